"""Lifecycle orchestration: push, log, delete, exec and test."""

from .reporter import FailureReporter, RaisingFailureReporter, StructuredFailureReporter
from .run_mode import RunModeTracker, mode_for
from .service import LifecycleService, LifecycleTrace, PushRequest, Stage
from .urls import warn_if_urls_invalid

__all__ = [
    "FailureReporter",
    "LifecycleService",
    "LifecycleTrace",
    "PushRequest",
    "RaisingFailureReporter",
    "RunModeTracker",
    "Stage",
    "StructuredFailureReporter",
    "mode_for",
    "warn_if_urls_invalid",
]
