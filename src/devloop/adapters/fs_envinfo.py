"""YAML-backed store for environment-specific component settings."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Dict

import yaml

from devloop.domain.envinfo import EnvSpecificInfo, LocalURL, RunMode
from devloop.domain.errors import PersistenceError
from devloop.ports.envinfo_store import EnvInfoStore

ENV_DIR = Path(".devloop") / "env"
ENV_FILE = "env.yaml"
SETTABLE_KEYS = ("name", "application", "namespace", "debugPort")


class FileEnvInfoStore(EnvInfoStore):
    """Stores ``.devloop/env/env.yaml`` under a component context directory."""

    def __init__(self, context: Path) -> None:
        self._context = Path(context).resolve()
        self._path = self._context / ENV_DIR / ENV_FILE

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> EnvSpecificInfo:
        data: Dict[str, Any] = {}
        if self._path.exists():
            try:
                raw = yaml.safe_load(self._path.read_text("utf-8")) or {}
            except (OSError, yaml.YAMLError) as exc:
                raise PersistenceError(f"Unable to read environment file {self._path}: {exc}") from exc
            if not isinstance(raw, dict):
                raise PersistenceError(f"Invalid environment file structure: {self._path}")
            data = dict(raw.get("componentSettings") or {})
        return EnvSpecificInfo.from_dict(data, default_name=self._context.name)

    def set_run_mode(self, mode: RunMode) -> None:
        self._persist(replace(self.load(), run_mode=mode))

    def set(self, key: str, value: str) -> None:
        info = self.load()
        if key == "name":
            info = replace(info, name=value)
        elif key == "application":
            info = replace(info, application=value)
        elif key == "namespace":
            info = replace(info, namespace=value or None)
        elif key == "debugPort":
            try:
                port = int(value)
            except ValueError as exc:
                raise PersistenceError(f"debugPort must be an integer, got '{value}'") from exc
            info = replace(info, debug_port=port)
        else:
            raise PersistenceError(f"Unknown setting '{key}', expected one of: {', '.join(SETTABLE_KEYS)}")
        self._persist(info)

    def add_url(self, url: LocalURL) -> None:
        info = self.load()
        if any(existing.name == url.name for existing in info.urls):
            raise PersistenceError(f"URL '{url.name}' already exists")
        self._persist(replace(info, urls=info.urls + (url,)))

    def _persist(self, info: EnvSpecificInfo) -> None:
        payload = {"componentSettings": info.to_dict()}
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(yaml.safe_dump(payload, sort_keys=False), encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Unable to write environment file {self._path}: {exc}") from exc


__all__ = ["FileEnvInfoStore", "SETTABLE_KEYS"]
