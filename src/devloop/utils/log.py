"""Human-readable status output for CLI commands."""

from __future__ import annotations

import sys
from typing import IO, TextIO

SUCCESS_PREFIX = "✓"
WARNING_PREFIX = "⚠"
ERROR_PREFIX = "✗"


class Console:
    """Prints status lines; stays silent in JSON mode so stdout carries only events."""

    def __init__(self, *, json_mode: bool = False, out: TextIO | None = None, err: TextIO | None = None) -> None:
        self.json_mode = json_mode
        self._out = out
        self._err = err

    @property
    def out(self) -> TextIO:
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self) -> TextIO:
        return self._err if self._err is not None else sys.stderr

    def info(self, message: str) -> None:
        if not self.json_mode:
            print(message, file=self.out)

    def success(self, message: str) -> None:
        if not self.json_mode:
            print(f" {SUCCESS_PREFIX}  {message}", file=self.out)

    def warning(self, message: str) -> None:
        if not self.json_mode:
            print(f" {WARNING_PREFIX}  {message}", file=self.err)

    def error(self, message: str) -> None:
        if not self.json_mode:
            print(f" {ERROR_PREFIX}  {message}", file=self.err)


def display_log(follow: bool, stream: IO[bytes], out: TextIO, component: str, lines: int = -1) -> None:
    """Copy a component log stream to ``out``.

    When following, chunks are forwarded as they arrive until the stream closes.
    Otherwise the whole stream is read and, if ``lines`` is positive, only the
    last ``lines`` lines are written.
    """

    try:
        if follow:
            while True:
                chunk = stream.readline()
                if not chunk:
                    break
                out.write(chunk.decode("utf-8", errors="replace"))
                out.flush()
            return
        content = stream.read().decode("utf-8", errors="replace")
    finally:
        stream.close()
    if lines > 0:
        kept = content.splitlines(keepends=True)[-lines:]
        content = "".join(kept)
    if not content:
        print(f"No logs available for component {component}", file=out)
        return
    out.write(content)
    out.flush()


__all__ = ["Console", "display_log"]
