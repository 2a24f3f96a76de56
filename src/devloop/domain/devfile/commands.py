"""Lifecycle command resolution against a devfile's command list."""

from __future__ import annotations

from typing import Iterable, Sequence

from devloop.domain.errors import CommandNotFoundError, NoDebugCommandError, NoDefaultCommandError

from .models import Command, CommandKind

NON_DEBUG_HINT = {
    "log": "devloop log",
    "push": "devloop push",
}


def commands_of_kind(commands: Iterable[Command], kind: CommandKind) -> list[Command]:
    return [command for command in commands if command.kind == kind]


def resolve_command(commands: Sequence[Command], kind: CommandKind, name: str = "") -> Command:
    """Pick the command of ``kind`` to execute.

    An explicit ``name`` is matched case-insensitively among commands of that
    kind. Without a name the default command of the kind is used; a lone
    command of the kind counts as the default when none is marked.
    """

    candidates = commands_of_kind(commands, kind)
    if kind == CommandKind.DEBUG and not candidates:
        raise NoDebugCommandError(
            "no debug command found in devfile, please run "
            f"\"{NON_DEBUG_HINT['log']}\" or \"{NON_DEBUG_HINT['push']}\" without --debug"
        )

    if name:
        wanted = name.lower()
        for command in candidates:
            if command.id.lower() == wanted:
                return command
        for command in commands:
            if command.id.lower() == wanted:
                declared = command.kind.value if command.kind else "none"
                raise CommandNotFoundError(
                    f"command \"{name}\" is of kind \"{declared}\", not \"{kind.value}\""
                )
        raise CommandNotFoundError(f"the command \"{name}\" is not found in the devfile")

    defaults = [command for command in candidates if command.is_default]
    if len(defaults) == 1:
        return defaults[0]
    if len(defaults) > 1:
        raise NoDefaultCommandError(
            f"there should be exactly one default command for command group {kind.value}, "
            f"currently there are {len(defaults)}"
        )
    if len(candidates) == 1:
        return candidates[0]
    if not candidates:
        raise NoDefaultCommandError(f"the command group of kind \"{kind.value}\" is not found in the devfile")
    raise NoDefaultCommandError(
        f"there should be exactly one default command for command group {kind.value}, currently there is none"
    )


def resolve_optional_command(commands: Sequence[Command], kind: CommandKind, name: str = "") -> Command | None:
    """Like ``resolve_command`` but returns None when the devfile has no command of ``kind`` and no name was given."""

    if not name and not commands_of_kind(commands, kind):
        return None
    return resolve_command(commands, kind, name)


__all__ = ["commands_of_kind", "resolve_command", "resolve_optional_command"]
