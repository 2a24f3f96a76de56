"""What happens to a failed push, depending on the output mode."""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import Callable

from devloop.domain.errors import DevloopError
from devloop.utils.machineoutput import EventLoggingClient, timestamp_now

ExitFn = Callable[[int], None]


class FailureReporter(ABC):
    @abstractmethod
    def handle(self, error: DevloopError) -> None:
        """Dispose of a push failure; returning means the caller must stop the verb."""


class RaisingFailureReporter(FailureReporter):
    def handle(self, error: DevloopError) -> None:
        raise error


class StructuredFailureReporter(FailureReporter):
    """Reports the error as a JSON event and terminates with status 1."""

    def __init__(self, events: EventLoggingClient, exit: ExitFn = sys.exit) -> None:
        self._events = events
        self._exit = exit

    def handle(self, error: DevloopError) -> None:
        self._events.report_error(error, timestamp_now())
        self._exit(1)


__all__ = ["FailureReporter", "RaisingFailureReporter", "StructuredFailureReporter"]
