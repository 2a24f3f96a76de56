"""Value objects describing a parsed devfile."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Tuple

DEFAULT_SOURCE_MAPPING = "/projects"


class CommandKind(str, Enum):
    BUILD = "build"
    RUN = "run"
    DEBUG = "debug"
    TEST = "test"


@dataclass(frozen=True)
class Endpoint:
    name: str
    target_port: int
    exposure: str = "public"
    protocol: str = "http"


@dataclass(frozen=True)
class Container:
    image: str
    memory_limit: str | None = None
    mount_sources: bool = True
    source_mapping: str = DEFAULT_SOURCE_MAPPING
    command: Tuple[str, ...] = ()
    args: Tuple[str, ...] = ()
    env: Tuple[Tuple[str, str], ...] = ()
    endpoints: Tuple[Endpoint, ...] = ()


@dataclass(frozen=True)
class Component:
    name: str
    container: Container | None = None

    @property
    def is_container(self) -> bool:
        return self.container is not None


@dataclass(frozen=True)
class ExecCommand:
    component: str
    command_line: str
    working_dir: str | None = None
    env: Tuple[Tuple[str, str], ...] = ()
    hot_reload_capable: bool = False


@dataclass(frozen=True)
class CompositeCommand:
    commands: Tuple[str, ...]
    parallel: bool = False


@dataclass(frozen=True)
class Command:
    """A named devfile command, optionally grouped under a lifecycle kind."""

    id: str
    kind: CommandKind | None = None
    is_default: bool = False
    exec: ExecCommand | None = None
    composite: CompositeCommand | None = None

    @property
    def is_composite(self) -> bool:
        return self.composite is not None


@dataclass(frozen=True)
class Devfile:
    schema_version: str
    name: str
    components: Tuple[Component, ...] = ()
    commands: Tuple[Command, ...] = ()
    metadata: Dict[str, Any] = field(default_factory=dict)
    source_path: Path | None = None

    def containers(self) -> Tuple[Component, ...]:
        return tuple(component for component in self.components if component.is_container)

    def container_specs(self) -> Tuple[Tuple[str, Container], ...]:
        """``(component name, container)`` pairs for every container component."""

        return tuple(
            (component.name, component.container) for component in self.components if component.container is not None
        )

    def get_component(self, name: str) -> Component | None:
        for component in self.components:
            if component.name == name:
                return component
        return None

    def get_command(self, command_id: str) -> Command | None:
        wanted = command_id.lower()
        for command in self.commands:
            if command.id.lower() == wanted:
                return command
        return None

    def flatten(self, command: Command) -> Tuple[Command, ...]:
        """Expand a composite command into the exec commands it runs, in order."""

        if not command.is_composite:
            return (command,)
        flattened: list[Command] = []
        for child_id in command.composite.commands:  # type: ignore[union-attr]
            child = self.get_command(child_id)
            if child is None:
                continue
            flattened.extend(self.flatten(child))
        return tuple(flattened)


__all__ = [
    "Command",
    "CommandKind",
    "Component",
    "CompositeCommand",
    "Container",
    "DEFAULT_SOURCE_MAPPING",
    "Devfile",
    "Endpoint",
    "ExecCommand",
]
