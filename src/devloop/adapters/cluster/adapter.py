"""Component adapter that deploys to a cluster through kubectl."""

from __future__ import annotations

from pathlib import PurePosixPath
from typing import IO, Any, Dict, List, Sequence, Tuple

from devloop.adapters.common.base import GenericAdapter
from devloop.adapters.common.sync import SyncPlan, tar_files
from devloop.domain.devfile import Container
from devloop.domain.errors import AdapterExecutionError
from devloop.ports.component_adapter import PushParameters

from .client import KubectlClient

PROJECTS_VOLUME = "devloop-projects"
KEEPALIVE = ["tail", "-f", "/dev/null"]


class ClusterAdapter(GenericAdapter):
    platform_name = "cluster"

    def __init__(self, identity, devfile, *, client: KubectlClient, runner, console, events) -> None:
        super().__init__(identity, devfile, runner=runner, console=console, events=events)
        self.client = client

    @property
    def labels(self) -> Dict[str, str]:
        return {"component": self.component_name, "app": self.identity.application}

    def component_exists(self) -> bool:
        return self.client.deployment_exists(self.component_name)

    def _create_or_update(self, params: PushParameters) -> bool:
        resources: List[Dict[str, Any]] = [self.deployment_manifest()]
        service = self.service_manifest()
        if service is not None:
            resources.append(service)
        output = self.client.apply(resources)
        self.client.rollout_status(self.component_name)
        for line in output.splitlines():
            if line.startswith("deployment") and not line.rstrip().endswith("unchanged"):
                self.console.success(f"Component {self.component_name} deployed to namespace {self.client.namespace}")
                return True
        return False

    def _sync(self, plan: SyncPlan, params: PushParameters) -> None:
        target = self._source_container()
        if target is None:
            return
        container_name, container = target
        pod = self._pod()
        mapping = container.source_mapping
        if plan.deleted:
            paths = [str(PurePosixPath(mapping) / relative) for relative in plan.deleted]
            self.client.exec(pod, container_name, ["rm", "-rf", *paths])
        if plan.changed:
            archive = tar_files(params.path, plan.changed)
            self.client.exec(pod, container_name, ["tar", "xf", "-", "-C", mapping], input=archive)

    def _exec_argv(self, container: str, argv: Sequence[str], *, show: bool) -> None:
        self.client.exec(self._pod(), container, argv, show=show)

    def _log_stream(self, container: str, follow: bool) -> IO[bytes]:
        return self.client.logs(self._pod(), container, follow)

    def _delete(self, labels: Dict[str, str], show: bool) -> bool:
        output = self.client.delete(labels)
        if show:
            for line in output.splitlines():
                self.console.info(line)
        return bool(output.strip())

    def _pod(self) -> str:
        pod = self.client.get_pod_name({"component": self.component_name})
        if pod is None:
            raise AdapterExecutionError(f"no running pod found for component {self.component_name}")
        return pod

    def _source_container(self) -> Tuple[str, Container] | None:
        for name, container in self.devfile.container_specs():
            if container.mount_sources:
                return name, container
        return None

    def deployment_manifest(self) -> Dict[str, Any]:
        containers: List[Dict[str, Any]] = []
        for name, container in self.devfile.container_specs():
            spec: Dict[str, Any] = {
                "name": name,
                "image": container.image,
                "env": [{"name": "PROJECTS_ROOT", "value": container.source_mapping}]
                + [{"name": key, "value": value} for key, value in container.env],
            }
            if container.command:
                spec["command"] = list(container.command)
                if container.args:
                    spec["args"] = list(container.args)
            else:
                spec["command"] = list(KEEPALIVE)
            if container.endpoints:
                spec["ports"] = [
                    {"name": endpoint.name[:15], "containerPort": endpoint.target_port}
                    for endpoint in container.endpoints
                ]
            if container.memory_limit:
                spec["resources"] = {"limits": {"memory": container.memory_limit}}
            if container.mount_sources:
                spec["volumeMounts"] = [{"name": PROJECTS_VOLUME, "mountPath": container.source_mapping}]
            containers.append(spec)
        return {
            "apiVersion": "apps/v1",
            "kind": "Deployment",
            "metadata": {"name": self.component_name, "labels": self.labels},
            "spec": {
                "replicas": 1,
                "selector": {"matchLabels": {"component": self.component_name}},
                "template": {
                    "metadata": {"labels": self.labels},
                    "spec": {
                        "containers": containers,
                        "volumes": [{"name": PROJECTS_VOLUME, "emptyDir": {}}],
                    },
                },
            },
        }

    def service_manifest(self) -> Dict[str, Any] | None:
        ports = [
            {"name": endpoint.name[:15], "port": endpoint.target_port, "targetPort": endpoint.target_port}
            for _, container in self.devfile.container_specs()
            for endpoint in container.endpoints
            if endpoint.exposure != "none"
        ]
        if not ports:
            return None
        return {
            "apiVersion": "v1",
            "kind": "Service",
            "metadata": {"name": self.component_name, "labels": self.labels},
            "spec": {"selector": {"component": self.component_name}, "ports": ports},
        }


__all__ = ["ClusterAdapter"]
