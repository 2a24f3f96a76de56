"""Adapter backed by a local container engine (docker or podman)."""

from .adapter import LocalEngineAdapter
from .client import EngineClient

__all__ = ["EngineClient", "LocalEngineAdapter"]
