"""Runtime settings for the devloop CLI."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from devloop import __version__

PUSH_TARGET_CLUSTER = "cluster"
PUSH_TARGET_LOCAL_ENGINE = "local-engine"
PUSH_TARGETS = (PUSH_TARGET_CLUSTER, PUSH_TARGET_LOCAL_ENGINE)
PREFERENCE_KEYS = ("pushtarget", "namespace")


@dataclass(frozen=True)
class RuntimeSettings:
    home_dir: Path
    state_dir: Path
    log_dir: Path
    push_target: str = PUSH_TARGET_CLUSTER
    default_namespace: str = "default"
    cli_version: str = __version__

    @property
    def preference_file(self) -> Path:
        return self.home_dir / "preference.yaml"

    @property
    def is_push_target_local_engine(self) -> bool:
        return self.push_target == PUSH_TARGET_LOCAL_ENGINE


def _default_home_dir() -> Path:
    override = os.environ.get("DEVLOOP_HOME")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".devloop"


def read_preferences(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    data = yaml.safe_load(path.read_text("utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid preference file structure: {path}")
    return data


def write_preference(path: Path, key: str, value: str) -> None:
    if key not in PREFERENCE_KEYS:
        raise ValueError(f"Unknown preference '{key}', expected one of: {', '.join(PREFERENCE_KEYS)}")
    if key == "pushtarget" and value not in PUSH_TARGETS:
        raise ValueError(f"pushtarget must be one of: {', '.join(PUSH_TARGETS)}")
    data = read_preferences(path)
    data[key] = value
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")


def load_settings() -> RuntimeSettings:
    base = _default_home_dir()
    preferences = read_preferences(base / "preference.yaml")
    push_target = os.environ.get("DEVLOOP_PUSHTARGET") or str(preferences.get("pushtarget", PUSH_TARGET_CLUSTER))
    if push_target not in PUSH_TARGETS:
        push_target = PUSH_TARGET_CLUSTER
    return RuntimeSettings(
        home_dir=base,
        state_dir=base / "state",
        log_dir=base / "logs",
        push_target=push_target,
        default_namespace=str(preferences.get("namespace") or "default"),
    )


SETTINGS = load_settings()
