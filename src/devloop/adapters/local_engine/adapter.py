"""Component adapter running the devfile containers on a local engine."""

from __future__ import annotations

import hashlib
import json
from typing import IO, Dict, List, Sequence

from devloop.adapters.common.base import GenericAdapter
from devloop.adapters.common.sync import SyncPlan
from devloop.domain.devfile import Container
from devloop.domain.envinfo import URLKind
from devloop.ports.component_adapter import PushParameters

from .client import EngineClient

CONTAINER_LABEL = "devloop.container"
CONFIG_HASH_LABEL = "devloop.config-hash"
KEEPALIVE = ["tail", "-f", "/dev/null"]


def engine_memory(limit: str) -> str:
    """Translate a Kubernetes quantity such as ``512Mi`` into the engine's ``512m``."""

    value = limit.strip()
    if value[-2:].lower() in {"ki", "mi", "gi"}:
        return value[:-2] + value[-2].lower()
    return value


class LocalEngineAdapter(GenericAdapter):
    """Sources are bind-mounted, so syncing only needs the file index."""

    platform_name = "local engine"

    def __init__(self, identity, devfile, *, client: EngineClient, runner, console, events) -> None:
        super().__init__(identity, devfile, runner=runner, console=console, events=events)
        self.client = client

    def container_name(self, container: str) -> str:
        return f"{self.component_name}-{container}"

    def component_exists(self) -> bool:
        return bool(self.client.list_by_labels({"component": self.component_name}))

    def _create_or_update(self, params: PushParameters) -> bool:
        existing = set(self.client.list_by_labels({"component": self.component_name}))
        recreated = False
        for component_name, container in self.devfile.container_specs():
            name = self.container_name(component_name)
            args = self.run_arguments(component_name, container, params)
            digest = hashlib.sha256(json.dumps(args).encode("utf-8")).hexdigest()[:16]
            if name in existing:
                if self.client.label_of(name, CONFIG_HASH_LABEL) == digest:
                    continue
                self.client.remove([name])
            self.client.run_container(["--label", f"{CONFIG_HASH_LABEL}={digest}", *args])
            self.console.success(f"Started container {name}")
            recreated = True
        return recreated

    def run_arguments(self, component_name: str, container: Container, params: PushParameters) -> List[str]:
        args = [
            "--name",
            self.container_name(component_name),
            "--label",
            f"component={self.component_name}",
            "--label",
            f"app={self.identity.application}",
            "--label",
            f"{CONTAINER_LABEL}={component_name}",
            "-e",
            f"PROJECTS_ROOT={container.source_mapping}",
        ]
        for name, value in container.env:
            args.extend(["-e", f"{name}={value}"])
        if container.mount_sources:
            args.extend(["-v", f"{params.path}:{container.source_mapping}"])
        ports = {endpoint.target_port for endpoint in container.endpoints}
        for url in params.env_info.urls:
            if url.kind == URLKind.LOCAL_ENGINE and url.port in ports:
                args.extend(["-p", f"{url.exposed_port or url.port}:{url.port}"])
        if container.memory_limit:
            args.extend(["--memory", engine_memory(container.memory_limit)])
        if container.command:
            args.extend(["--entrypoint", container.command[0], container.image, *container.command[1:], *container.args])
        else:
            args.extend(["--entrypoint", KEEPALIVE[0], container.image, *KEEPALIVE[1:]])
        return args

    def _sync(self, plan: SyncPlan, params: PushParameters) -> None:
        return None

    def _exec_argv(self, container: str, argv: Sequence[str], *, show: bool) -> None:
        self.client.exec(self.container_name(container), argv, show=show)

    def _log_stream(self, container: str, follow: bool) -> IO[bytes]:
        return self.client.logs(self.container_name(container), follow)

    def _delete(self, labels: Dict[str, str], show: bool) -> bool:
        names = self.client.list_by_labels(labels)
        if not names:
            return False
        self.client.remove(names)
        if show:
            for name in names:
                self.console.info(f"Removed container {name}")
        return True


__all__ = ["LocalEngineAdapter", "engine_memory"]
