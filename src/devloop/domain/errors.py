"""Error taxonomy shared by every devloop layer."""

from __future__ import annotations


class DevloopError(RuntimeError):
    """Base class for failures reported to the CLI user."""


class ManifestParseError(DevloopError):
    """Raised when a devfile cannot be read, parsed or fails its schema."""


class ManifestValidationError(DevloopError):
    """Raised when a parsed devfile is structurally inconsistent."""


class CommandResolutionError(DevloopError):
    pass


class CommandNotFoundError(CommandResolutionError):
    pass


class NoDefaultCommandError(CommandResolutionError):
    pass


class NoDebugCommandError(CommandResolutionError):
    pass


class AdapterConstructionError(DevloopError):
    """Raised when no adapter can be built for the selected platform."""


class AdapterExecutionError(DevloopError):
    """Raised when an adapter verb fails."""


class PersistenceError(DevloopError):
    """Raised when environment-specific state cannot be saved."""


__all__ = [
    "AdapterConstructionError",
    "AdapterExecutionError",
    "CommandNotFoundError",
    "CommandResolutionError",
    "DevloopError",
    "ManifestParseError",
    "ManifestValidationError",
    "NoDebugCommandError",
    "NoDefaultCommandError",
    "PersistenceError",
]
