"""Container engine CLI client."""

from __future__ import annotations

from typing import IO, Dict, List, Sequence

from devloop.adapters.common.runner import ProcessError, ProcessRunner
from devloop.domain.errors import AdapterConstructionError

ENGINE_BINARIES = ("docker", "podman")


class EngineClient:
    def __init__(self, runner: ProcessRunner, binary: str = "docker") -> None:
        self._runner = runner
        self.binary = binary

    @classmethod
    def connect(cls, runner: ProcessRunner, binaries: Sequence[str] = ENGINE_BINARIES) -> "EngineClient":
        for binary in binaries:
            if runner.which(binary) is None:
                continue
            try:
                runner.run([binary, "info", "--format", "{{.ServerVersion}}"])
            except ProcessError as exc:
                raise AdapterConstructionError(f"unable to reach the {binary} engine: {exc}") from exc
            return cls(runner, binary)
        raise AdapterConstructionError(
            f"unable to create local engine client: none of {', '.join(binaries)} was found on PATH"
        )

    def list_by_labels(self, labels: Dict[str, str]) -> List[str]:
        args = [self.binary, "ps", "-a"]
        for key, value in sorted(labels.items()):
            args.extend(["--filter", f"label={key}={value}"])
        args.extend(["--format", "{{.Names}}"])
        output = self._runner.run(args)
        return [line.strip() for line in output.splitlines() if line.strip()]

    def label_of(self, name: str, label: str) -> str:
        output = self._runner.run(
            [self.binary, "inspect", "--format", f'{{{{ index .Config.Labels "{label}" }}}}', name]
        )
        return output.strip()

    def run_container(self, args: Sequence[str]) -> str:
        return self._runner.run([self.binary, "run", "-d", *args]).strip()

    def remove(self, names: Sequence[str]) -> str:
        return self._runner.run([self.binary, "rm", "-f", *names])

    def exec(self, name: str, argv: Sequence[str], *, show: bool = False) -> str:
        return self._runner.run([self.binary, "exec", name, *argv], show=show)

    def logs(self, name: str, follow: bool) -> IO[bytes]:
        args = [self.binary, "logs"]
        if follow:
            args.append("-f")
        args.append(name)
        return self._runner.stream(args)


__all__ = ["ENGINE_BINARIES", "EngineClient"]
