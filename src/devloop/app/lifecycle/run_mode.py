"""Remembers whether the component was last pushed in run or debug mode."""

from __future__ import annotations

from devloop.domain.envinfo import RunMode
from devloop.domain.errors import PersistenceError
from devloop.ports.envinfo_store import EnvInfoStore


def mode_for(debug: bool) -> RunMode:
    return RunMode.DEBUG if debug else RunMode.RUN


class RunModeTracker:
    def __init__(self, store: EnvInfoStore) -> None:
        self._store = store

    def set_run_mode(self, mode: RunMode) -> None:
        try:
            self._store.set_run_mode(mode)
        except OSError as exc:
            raise PersistenceError(f"unable to save run mode {mode.value}: {exc}") from exc


__all__ = ["RunModeTracker", "mode_for"]
