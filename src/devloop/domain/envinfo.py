"""Environment-specific component settings kept beside the devfile."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

DEFAULT_DEBUG_PORT = 5858
DEFAULT_APPLICATION = "app"


class RunMode(str, Enum):
    RUN = "run"
    DEBUG = "debug"


class URLKind(str, Enum):
    CLUSTER = "cluster"
    LOCAL_ENGINE = "local-engine"


@dataclass(frozen=True)
class LocalURL:
    name: str
    port: int
    kind: URLKind = URLKind.CLUSTER
    exposed_port: int | None = None
    host: str | None = None
    secure: bool = False

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "port": self.port,
            "kind": self.kind.value,
            "secure": self.secure,
        }
        if self.exposed_port is not None:
            payload["exposedPort"] = self.exposed_port
        if self.host:
            payload["host"] = self.host
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LocalURL":
        exposed = data.get("exposedPort")
        return cls(
            name=str(data["name"]),
            port=int(data["port"]),
            kind=URLKind(data.get("kind", URLKind.CLUSTER.value)),
            exposed_port=int(exposed) if exposed is not None else None,
            host=data.get("host"),
            secure=bool(data.get("secure", False)),
        )


@dataclass(frozen=True)
class EnvSpecificInfo:
    """Snapshot of a component's environment settings at one point in time."""

    name: str
    application: str = DEFAULT_APPLICATION
    namespace: str | None = None
    debug_port: int = DEFAULT_DEBUG_PORT
    run_mode: RunMode | None = None
    urls: Tuple[LocalURL, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "name": self.name,
            "application": self.application,
            "debugPort": self.debug_port,
            "url": [url.to_dict() for url in self.urls],
        }
        if self.namespace:
            payload["namespace"] = self.namespace
        if self.run_mode is not None:
            payload["runMode"] = self.run_mode.value
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, default_name: str) -> "EnvSpecificInfo":
        run_mode = data.get("runMode")
        return cls(
            name=str(data.get("name") or default_name),
            application=str(data.get("application") or DEFAULT_APPLICATION),
            namespace=data.get("namespace") or None,
            debug_port=int(data.get("debugPort") or DEFAULT_DEBUG_PORT),
            run_mode=RunMode(run_mode) if run_mode else None,
            urls=tuple(LocalURL.from_dict(item) for item in data.get("url") or []),
        )


__all__ = [
    "DEFAULT_APPLICATION",
    "DEFAULT_DEBUG_PORT",
    "EnvSpecificInfo",
    "LocalURL",
    "RunMode",
    "URLKind",
]
