"""Execution platform contexts and the push-target selection rule."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union


@dataclass(frozen=True)
class ClusterContext:
    namespace: str


@dataclass(frozen=True)
class LocalEngineContext:
    pass


PlatformContext = Union[ClusterContext, LocalEngineContext]


@dataclass(frozen=True)
class ComponentIdentity:
    """Who is being operated on: stable for the whole invocation."""

    name: str
    application: str
    context: Path


def select_platform(push_target_is_local_engine: bool, namespace: str) -> PlatformContext:
    if push_target_is_local_engine:
        return LocalEngineContext()
    return ClusterContext(namespace=namespace)


__all__ = [
    "ClusterContext",
    "ComponentIdentity",
    "LocalEngineContext",
    "PlatformContext",
    "select_platform",
]
