"""Port definitions for environment-specific info storage."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

from devloop.domain.envinfo import EnvSpecificInfo, LocalURL, RunMode


class EnvInfoStore(ABC):
    @abstractmethod
    def load(self) -> EnvSpecificInfo:
        """Return a snapshot of the stored settings."""

    @abstractmethod
    def set_run_mode(self, mode: RunMode) -> None:
        """Persist the mode the component was last pushed in."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Persist a single scalar setting."""

    @abstractmethod
    def add_url(self, url: LocalURL) -> None:
        """Persist a new URL definition."""

    def get_name(self) -> str:
        return self.load().name

    def get_application(self) -> str:
        return self.load().application

    def get_namespace(self) -> str | None:
        return self.load().namespace

    def get_debug_port(self) -> int:
        return self.load().debug_port

    def get_run_mode(self) -> RunMode | None:
        return self.load().run_mode

    def list_urls(self) -> List[LocalURL]:
        return list(self.load().urls)


__all__ = ["EnvInfoStore"]
