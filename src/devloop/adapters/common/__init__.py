"""Building blocks shared by the platform adapters."""

from .base import GenericAdapter
from .runner import ProcessError, ProcessRunner
from .sync import FileIndex, SyncPlan

__all__ = ["FileIndex", "GenericAdapter", "ProcessError", "ProcessRunner", "SyncPlan"]
