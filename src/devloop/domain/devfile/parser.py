"""Devfile loading: YAML decoding, schema check and model conversion."""

from __future__ import annotations

import json
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Iterable, Tuple

import yaml
from jsonschema import Draft202012Validator

from devloop.domain.errors import ManifestParseError

from .models import (
    DEFAULT_SOURCE_MAPPING,
    Command,
    CommandKind,
    Component,
    CompositeCommand,
    Container,
    Devfile,
    Endpoint,
    ExecCommand,
)

DEVFILE_NAME = "devfile.yaml"

_SCHEMA_RESOURCE = "devfile.schema.json"
_SCHEMA_PACKAGE = "devloop.resources"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


def iter_schema_errors(data: dict[str, Any]) -> Iterable[Tuple[str, str]]:
    for error in _validator().iter_errors(data):
        path = ".".join(str(item) for item in error.absolute_path)
        yield path, error.message


def parse_and_validate(path: Path) -> Devfile:
    """Read the devfile at ``path`` and return its schema-checked model."""

    path = Path(path)
    if not path.exists():
        raise ManifestParseError(f"The current directory does not represent a devloop component: {path} not found")
    try:
        raw = yaml.safe_load(path.read_text("utf-8"))
    except yaml.YAMLError as exc:
        raise ManifestParseError(f"Failed to decode devfile {path}: {exc}") from exc
    except OSError as exc:
        raise ManifestParseError(f"Failed to read devfile {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ManifestParseError(f"Devfile {path} must contain a mapping at the top level")
    return parse_devfile_data(raw, source_path=path.resolve())


def parse_devfile_data(data: dict[str, Any], *, source_path: Path | None = None) -> Devfile:
    errors = sorted(iter_schema_errors(data))
    if errors:
        details = "; ".join(f"{where or '<root>'}: {message}" for where, message in errors)
        raise ManifestParseError(f"Devfile schema validation failed: {details}")

    metadata = dict(data.get("metadata") or {})
    name = str(metadata.get("name") or (source_path.parent.name if source_path else ""))
    components = tuple(_component(item) for item in data.get("components") or [])
    commands = tuple(_command(item) for item in data.get("commands") or [])
    return Devfile(
        schema_version=str(data["schemaVersion"]),
        name=name,
        components=components,
        commands=commands,
        metadata=metadata,
        source_path=source_path,
    )


def _env(items: Iterable[dict[str, Any]] | None) -> Tuple[Tuple[str, str], ...]:
    return tuple((str(item["name"]), str(item["value"])) for item in items or [])


def _component(payload: dict[str, Any]) -> Component:
    raw = payload.get("container")
    if raw is None:
        return Component(name=payload["name"])
    endpoints = tuple(
        Endpoint(
            name=item["name"],
            target_port=int(item["targetPort"]),
            exposure=item.get("exposure", "public"),
            protocol=item.get("protocol", "http"),
        )
        for item in raw.get("endpoints") or []
    )
    container = Container(
        image=raw["image"],
        memory_limit=raw.get("memoryLimit"),
        mount_sources=raw.get("mountSources", True),
        source_mapping=raw.get("sourceMapping") or DEFAULT_SOURCE_MAPPING,
        command=tuple(raw.get("command") or ()),
        args=tuple(raw.get("args") or ()),
        env=_env(raw.get("env")),
        endpoints=endpoints,
    )
    return Component(name=payload["name"], container=container)


def _group(raw: dict[str, Any]) -> tuple[CommandKind | None, bool]:
    group = raw.get("group")
    if not group:
        return None, False
    return CommandKind(group["kind"]), bool(group.get("isDefault", False))


def _command(payload: dict[str, Any]) -> Command:
    if "exec" in payload:
        raw = payload["exec"]
        kind, is_default = _group(raw)
        return Command(
            id=payload["id"],
            kind=kind,
            is_default=is_default,
            exec=ExecCommand(
                component=raw["component"],
                command_line=raw["commandLine"],
                working_dir=raw.get("workingDir"),
                env=_env(raw.get("env")),
                hot_reload_capable=bool(raw.get("hotReloadCapable", False)),
            ),
        )
    raw = payload["composite"]
    kind, is_default = _group(raw)
    return Command(
        id=payload["id"],
        kind=kind,
        is_default=is_default,
        composite=CompositeCommand(
            commands=tuple(raw["commands"]),
            parallel=bool(raw.get("parallel", False)),
        ),
    )


__all__ = ["DEVFILE_NAME", "iter_schema_errors", "parse_and_validate", "parse_devfile_data"]
