"""Port definitions for platform-specific component adapters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Dict, Sequence, Tuple

from devloop.domain.devfile import Command
from devloop.domain.envinfo import DEFAULT_DEBUG_PORT, EnvSpecificInfo


@dataclass(frozen=True)
class PushParameters:
    path: Path
    env_info: EnvSpecificInfo
    ignored_files: Tuple[str, ...] = field(default_factory=tuple)
    force_build: bool = False
    show: bool = False
    devfile_build_cmd: str = ""
    devfile_run_cmd: str = ""
    devfile_debug_cmd: str = ""
    debug: bool = False
    debug_port: int = DEFAULT_DEBUG_PORT


class ComponentAdapter(ABC):
    """The five lifecycle verbs every platform must provide."""

    @abstractmethod
    def push(self, params: PushParameters) -> None:
        """Create or update the component and run its build/run (or debug) commands."""

    @abstractmethod
    def log(self, follow: bool, command: Command) -> IO[bytes]:
        """Return a readable stream with the output of the container running ``command``."""

    @abstractmethod
    def delete(self, labels: Dict[str, str], show: bool) -> None:
        """Remove every platform resource matching ``labels``."""

    @abstractmethod
    def exec(self, command: Sequence[str]) -> None:
        """Run an arbitrary argument vector inside the component."""

    @abstractmethod
    def test(self, command_name: str, show: bool) -> None:
        """Run the named (or default) test command inside the component."""


__all__ = ["ComponentAdapter", "PushParameters"]
