"""Ignore rules applied when syncing component sources."""

from __future__ import annotations

from fnmatch import fnmatch
from pathlib import Path, PurePosixPath
from typing import Iterable, List

IGNORE_FILES = (".devloopignore", ".gitignore")
ALWAYS_IGNORED = (".devloop", ".git")


def read_ignore_file(source_path: Path) -> List[str]:
    """Rules from the first ignore file found in ``source_path``."""

    for name in IGNORE_FILES:
        candidate = source_path / name
        if not candidate.is_file():
            continue
        rules: list[str] = []
        for line in candidate.read_text("utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            rules.append(line)
        return rules
    return []


def apply_ignore(ignores: Iterable[str], source_path: Path) -> List[str]:
    merged: list[str] = []
    for rule in [*ignores, *read_ignore_file(source_path), *ALWAYS_IGNORED]:
        if rule not in merged:
            merged.append(rule)
    return merged


def is_ignored(relative: str, rules: Iterable[str]) -> bool:
    """gitignore-style matching on a POSIX path relative to the source root."""

    path = PurePosixPath(relative)
    prefixes = [PurePosixPath(*path.parts[: index + 1]).as_posix() for index in range(len(path.parts))]
    for rule in rules:
        pattern = rule.rstrip("/").lstrip("/")
        if not pattern:
            continue
        for prefix in prefixes:
            if fnmatch(prefix, pattern) or fnmatch(PurePosixPath(prefix).name, pattern):
                return True
    return False


__all__ = ["ALWAYS_IGNORED", "apply_ignore", "is_ignored", "read_ignore_file"]
