"""Semantic checks run on every parsed devfile."""

from __future__ import annotations

from collections import Counter

from devloop.domain.errors import ManifestValidationError

from .models import Command, Devfile


def validate_devfile_data(devfile: Devfile) -> None:
    """Raise ``ManifestValidationError`` describing every inconsistency found."""

    problems: list[str] = []

    if not devfile.containers():
        problems.append("devfile must define at least one container component")

    component_names = Counter(component.name for component in devfile.components)
    for name, count in sorted(component_names.items()):
        if count > 1:
            problems.append(f"duplicate component name '{name}'")

    command_ids = Counter(command.id.lower() for command in devfile.commands)
    for command_id, count in sorted(command_ids.items()):
        if count > 1:
            problems.append(f"duplicate command id '{command_id}'")

    container_names = {component.name for component in devfile.containers()}
    for command in devfile.commands:
        if command.exec is not None and command.exec.component not in container_names:
            problems.append(
                f"command '{command.id}' references unknown container component '{command.exec.component}'"
            )
        if command.composite is not None:
            problems.extend(_composite_problems(devfile, command))

    defaults = Counter(command.kind for command in devfile.commands if command.kind and command.is_default)
    for kind, count in sorted(defaults.items(), key=lambda item: item[0].value):
        if count > 1:
            problems.append(f"more than one default command of kind '{kind.value}'")

    if problems:
        raise ManifestValidationError("Devfile validation failed: " + "; ".join(problems))


def _composite_problems(devfile: Devfile, root: Command) -> list[str]:
    problems: list[str] = []
    stack: list[tuple[Command, tuple[str, ...]]] = [(root, (root.id.lower(),))]
    while stack:
        command, trail = stack.pop()
        for child_id in command.composite.commands:  # type: ignore[union-attr]
            child = devfile.get_command(child_id)
            if child is None:
                problems.append(f"composite command '{command.id}' references unknown command '{child_id}'")
                continue
            if child.id.lower() in trail:
                problems.append(f"composite command '{root.id}' references itself through '{child.id}'")
                continue
            if child.is_composite:
                stack.append((child, trail + (child.id.lower(),)))
    return problems


__all__ = ["validate_devfile_data"]
