from __future__ import annotations

import pytest

from devloop.domain.devfile import Command, CommandKind, ExecCommand, resolve_command, resolve_optional_command
from devloop.domain.errors import CommandNotFoundError, NoDebugCommandError, NoDefaultCommandError


def _cmd(command_id: str, kind: CommandKind | None, default: bool = False) -> Command:
    return Command(
        id=command_id,
        kind=kind,
        is_default=default,
        exec=ExecCommand(component="runtime", command_line=f"echo {command_id}"),
    )


COMMANDS = (
    _cmd("build", CommandKind.BUILD, True),
    _cmd("run", CommandKind.RUN, True),
    _cmd("run-watch", CommandKind.RUN),
)


def test_default_command_is_selected() -> None:
    assert resolve_command(COMMANDS, CommandKind.RUN).id == "run"


def test_explicit_name_is_case_insensitive() -> None:
    assert resolve_command(COMMANDS, CommandKind.BUILD, "Build") == resolve_command(COMMANDS, CommandKind.BUILD, "build")
    assert resolve_command(COMMANDS, CommandKind.RUN, "RUN-WATCH").id == "run-watch"


def test_explicit_name_of_another_kind_is_not_found() -> None:
    with pytest.raises(CommandNotFoundError) as exc:
        resolve_command(COMMANDS, CommandKind.RUN, "build")
    assert "of kind \"build\"" in str(exc.value)


def test_unknown_name_is_not_found() -> None:
    with pytest.raises(CommandNotFoundError):
        resolve_command(COMMANDS, CommandKind.RUN, "serve")


def test_two_defaults_fail() -> None:
    commands = (_cmd("a", CommandKind.RUN, True), _cmd("b", CommandKind.RUN, True))
    with pytest.raises(NoDefaultCommandError):
        resolve_command(commands, CommandKind.RUN)


def test_lone_undefaulted_command_is_used() -> None:
    commands = (_cmd("only", CommandKind.TEST),)
    assert resolve_command(commands, CommandKind.TEST).id == "only"


def test_several_undefaulted_commands_fail() -> None:
    commands = (_cmd("a", CommandKind.TEST), _cmd("b", CommandKind.TEST))
    with pytest.raises(NoDefaultCommandError):
        resolve_command(commands, CommandKind.TEST)


def test_missing_kind_fails_without_default() -> None:
    with pytest.raises(NoDefaultCommandError):
        resolve_command(COMMANDS, CommandKind.TEST)


@pytest.mark.parametrize("name", ["", "debug"])
def test_debug_without_debug_commands_is_distinct(name: str) -> None:
    with pytest.raises(NoDebugCommandError) as exc:
        resolve_command(COMMANDS, CommandKind.DEBUG, name)
    assert "without --debug" in str(exc.value)
    assert not isinstance(exc.value, (CommandNotFoundError, NoDefaultCommandError))


def test_optional_build_is_skipped_when_absent() -> None:
    commands = (_cmd("run", CommandKind.RUN, True),)
    assert resolve_optional_command(commands, CommandKind.BUILD) is None
    with pytest.raises(CommandNotFoundError):
        resolve_optional_command(commands, CommandKind.BUILD, "compile")
