"""devloop: iterative build/run/debug/test cycles for devfile components."""

__version__ = "0.3.0"
