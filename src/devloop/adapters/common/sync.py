"""Tracks which source files were already pushed to a component."""

from __future__ import annotations

import io
import json
import os
import tarfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Tuple

from devloop.utils.ignores import is_ignored

INDEX_DIR = Path(".devloop")
INDEX_FILE = "file-index.json"

Snapshot = Dict[str, List[int]]


@dataclass
class SyncPlan:
    changed: List[str] = field(default_factory=list)
    deleted: List[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.changed and not self.deleted


class FileIndex:
    """Stores ``.devloop/file-index.json`` with the mtime/size of every pushed file."""

    def __init__(self, source: Path) -> None:
        self._source = Path(source)
        self._path = self._source / INDEX_DIR / INDEX_FILE

    @property
    def path(self) -> Path:
        return self._path

    def scan(self, ignores: Iterable[str]) -> Snapshot:
        rules = list(ignores)
        snapshot: Snapshot = {}
        for root, dirs, files in os.walk(self._source):
            root_path = Path(root)
            rel_root = root_path.relative_to(self._source)
            dirs[:] = sorted(d for d in dirs if not is_ignored((rel_root / d).as_posix(), rules))
            for name in sorted(files):
                relative = (rel_root / name).as_posix()
                if is_ignored(relative, rules):
                    continue
                stat = (root_path / name).stat()
                snapshot[relative] = [stat.st_mtime_ns, stat.st_size]
        return snapshot

    def load(self) -> Snapshot:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text("utf-8"))
        except json.JSONDecodeError:
            return {}
        files = data.get("files", {}) if isinstance(data, dict) else {}
        return {str(key): list(value) for key, value in files.items()}

    def plan(self, ignores: Iterable[str], *, full: bool = False) -> Tuple[SyncPlan, Snapshot]:
        current = self.scan(ignores)
        previous = {} if full else self.load()
        changed = [path for path, meta in current.items() if previous.get(path) != meta]
        deleted = sorted(path for path in previous if path not in current)
        return SyncPlan(changed=sorted(changed), deleted=deleted), current

    def save(self, snapshot: Snapshot) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps({"files": snapshot}, indent=2, sort_keys=True) + "\n", encoding="utf-8")

    def clear(self) -> None:
        if self._path.exists():
            self._path.unlink()


def tar_files(source: Path, paths: Iterable[str]) -> bytes:
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as archive:
        for relative in paths:
            archive.add(str(source / relative), arcname=relative, recursive=False)
    return buffer.getvalue()


__all__ = ["FileIndex", "Snapshot", "SyncPlan", "tar_files"]
