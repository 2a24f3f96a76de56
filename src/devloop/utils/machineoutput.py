"""Machine-readable event stream used by ``-o json``."""

from __future__ import annotations

import json
import sys
import time
from abc import ABC, abstractmethod
from functools import lru_cache
from importlib import resources
from typing import Any, TextIO

from jsonschema import Draft202012Validator

_SCHEMA_RESOURCE = "events.schema.json"
_SCHEMA_PACKAGE = "devloop.resources"


def timestamp_now() -> str:
    """Current time as ``<seconds>.<microseconds>``."""

    now = time.time()
    seconds = int(now)
    micros = int(round((now - seconds) * 1_000_000)) % 1_000_000
    return f"{seconds}.{micros:06d}"


@lru_cache(maxsize=1)
def _validator() -> Draft202012Validator:
    resource = resources.files(_SCHEMA_PACKAGE) / _SCHEMA_RESOURCE
    with resource.open("r", encoding="utf-8") as handle:
        return Draft202012Validator(json.load(handle))


class EventLoggingClient(ABC):
    @abstractmethod
    def devfile_command_execution_begin(
        self, command_id: str, component: str, command_line: str, group_kind: str, timestamp: str
    ) -> None:
        ...

    @abstractmethod
    def devfile_command_execution_complete(
        self,
        command_id: str,
        component: str,
        command_line: str,
        group_kind: str,
        timestamp: str,
        error: BaseException | None = None,
    ) -> None:
        ...

    @abstractmethod
    def report_error(self, error: BaseException, timestamp: str) -> None:
        ...


class NoOpEventLoggingClient(EventLoggingClient):
    def devfile_command_execution_begin(self, command_id, component, command_line, group_kind, timestamp) -> None:
        return None

    def devfile_command_execution_complete(
        self, command_id, component, command_line, group_kind, timestamp, error=None
    ) -> None:
        return None

    def report_error(self, error, timestamp) -> None:
        return None


class ConsoleEventLoggingClient(EventLoggingClient):
    """Writes one schema-valid JSON object per line."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def devfile_command_execution_begin(
        self, command_id: str, component: str, command_line: str, group_kind: str, timestamp: str
    ) -> None:
        self._emit(
            "devFileCommandExecutionBegin",
            {
                "commandId": command_id,
                "componentName": component,
                "commandLine": command_line,
                "groupKind": group_kind,
                "timestamp": timestamp,
            },
        )

    def devfile_command_execution_complete(
        self,
        command_id: str,
        component: str,
        command_line: str,
        group_kind: str,
        timestamp: str,
        error: BaseException | None = None,
    ) -> None:
        body: dict[str, Any] = {
            "commandId": command_id,
            "componentName": component,
            "commandLine": command_line,
            "groupKind": group_kind,
            "timestamp": timestamp,
        }
        if error is not None:
            body["error"] = str(error)
        self._emit("devFileCommandExecutionComplete", body)

    def report_error(self, error: BaseException, timestamp: str) -> None:
        self._emit("reportError", {"error": str(error), "timestamp": timestamp})

    def _emit(self, name: str, body: dict[str, Any]) -> None:
        event = {name: body}
        _validator().validate(event)
        stream = self._stream if self._stream is not None else sys.stdout
        stream.write(json.dumps(event, ensure_ascii=False) + "\n")
        stream.flush()


__all__ = [
    "ConsoleEventLoggingClient",
    "EventLoggingClient",
    "NoOpEventLoggingClient",
    "timestamp_now",
]
