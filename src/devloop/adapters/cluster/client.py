"""kubectl-based cluster client."""

from __future__ import annotations

from typing import IO, Any, Dict, Iterable, List, Sequence

import yaml

from devloop.adapters.common.runner import ProcessError, ProcessRunner
from devloop.domain.errors import AdapterConstructionError

ROLLOUT_TIMEOUT = "5m"


def label_selector(labels: Dict[str, str]) -> str:
    return ",".join(f"{key}={value}" for key, value in sorted(labels.items()))


class KubectlClient:
    def __init__(self, namespace: str, runner: ProcessRunner, binary: str = "kubectl") -> None:
        self.namespace = namespace
        self._runner = runner
        self._binary = binary

    @classmethod
    def connect(cls, namespace: str, runner: ProcessRunner, binary: str = "kubectl") -> "KubectlClient":
        if runner.which(binary) is None:
            raise AdapterConstructionError(f"unable to create cluster client: `{binary}` was not found on PATH")
        client = cls(namespace, runner, binary)
        try:
            runner.run([binary, "config", "current-context"])
        except ProcessError as exc:
            raise AdapterConstructionError(f"unable to connect to the cluster: {exc}") from exc
        return client

    def _cmd(self, *args: str) -> List[str]:
        return [self._binary, *args, "-n", self.namespace]

    def apply(self, resources: Iterable[Dict[str, Any]]) -> str:
        document = yaml.safe_dump_all(list(resources), sort_keys=False)
        return self._runner.run(self._cmd("apply", "-f", "-"), input=document.encode("utf-8"))

    def rollout_status(self, deployment: str) -> None:
        self._runner.run(self._cmd("rollout", "status", f"deployment/{deployment}", f"--timeout={ROLLOUT_TIMEOUT}"))

    def deployment_exists(self, name: str) -> bool:
        output = self._runner.run(self._cmd("get", "deployment", name, "--ignore-not-found", "-o", "name"))
        return bool(output.strip())

    def get_pod_name(self, labels: Dict[str, str]) -> str | None:
        output = self._runner.run(
            self._cmd("get", "pods", "-l", label_selector(labels), "--field-selector=status.phase=Running", "-o", "name")
        )
        for line in output.splitlines():
            line = line.strip()
            if line:
                return line.split("/", 1)[-1]
        return None

    def exec(self, pod: str, container: str, argv: Sequence[str], *, input: bytes | None = None, show: bool = False) -> str:
        args = [self._binary, "exec"]
        if input is not None:
            args.append("-i")
        args.extend([pod, "-n", self.namespace, "-c", container, "--", *argv])
        return self._runner.run(args, input=input, show=show)

    def logs(self, pod: str, container: str, follow: bool) -> IO[bytes]:
        args = self._cmd("logs", pod, "-c", container)
        if follow:
            args.append("-f")
        return self._runner.stream(args)

    def delete(self, labels: Dict[str, str]) -> str:
        return self._runner.run(
            self._cmd("delete", "deployment,service", "-l", label_selector(labels), "--ignore-not-found", "--wait=true")
        )


__all__ = ["KubectlClient", "label_selector"]
