"""Devfile domain exports."""

from .models import (
    Command,
    CommandKind,
    Component,
    CompositeCommand,
    Container,
    Devfile,
    Endpoint,
    ExecCommand,
)
from .commands import resolve_command, resolve_optional_command
from .parser import DEVFILE_NAME, parse_and_validate, parse_devfile_data
from .validate import validate_devfile_data

__all__ = [
    "Command",
    "CommandKind",
    "Component",
    "CompositeCommand",
    "Container",
    "DEVFILE_NAME",
    "Devfile",
    "Endpoint",
    "ExecCommand",
    "parse_and_validate",
    "parse_devfile_data",
    "resolve_command",
    "resolve_optional_command",
    "validate_devfile_data",
]
