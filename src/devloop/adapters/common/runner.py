"""Thin wrapper around platform CLIs (kubectl, docker, podman)."""

from __future__ import annotations

import shutil
import subprocess
from typing import Sequence

from devloop.domain.errors import AdapterExecutionError


class ProcessError(AdapterExecutionError):
    """Raised when a platform CLI invocation exits with a non-zero status."""

    def __init__(self, args: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.args_list = list(args)
        self.returncode = returncode
        self.stderr = stderr.strip()
        message = f"command `{' '.join(self.args_list)}` failed with exit code {returncode}"
        if self.stderr:
            message = f"{message}: {self.stderr}"
        super().__init__(message)


class ProcessRunner:
    def which(self, binary: str) -> str | None:
        return shutil.which(binary)

    def run(self, args: Sequence[str], *, input: bytes | None = None, show: bool = False) -> str:
        """Run ``args`` to completion; with ``show`` the output goes straight to the terminal."""

        argv = list(args)
        try:
            if show:
                result = subprocess.run(argv, input=input)
            else:
                result = subprocess.run(argv, input=input, capture_output=True)
        except FileNotFoundError as exc:
            missing = argv[0] if argv else "<unknown>"
            raise ProcessError(argv, 127, f"executable not found: {missing}") from exc
        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", errors="replace")
            raise ProcessError(argv, result.returncode, stderr)
        return (result.stdout or b"").decode("utf-8", errors="replace")

    def stream(self, args: Sequence[str]) -> "ProcessStream":
        argv = list(args)
        try:
            process = subprocess.Popen(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        except FileNotFoundError as exc:
            raise ProcessError(argv, 127, f"executable not found: {argv[0]}") from exc
        return ProcessStream(process, argv)


class ProcessStream:
    """Stdout of a running platform CLI; ``close`` reaps the process and checks its exit status.

    A stream closed before its end was reached terminates the process and
    reports nothing.
    """

    def __init__(self, process: subprocess.Popen, args: Sequence[str]) -> None:
        self._process = process
        self._args = list(args)
        self._exhausted = False
        self.closed = False

    def read(self, size: int = -1) -> bytes:
        data = self._process.stdout.read(size)
        if size < 0 or not data:
            self._exhausted = True
        return data

    def readline(self) -> bytes:
        line = self._process.stdout.readline()
        if not line:
            self._exhausted = True
        return line

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._process.stdout.close()
        if not self._exhausted:
            self._process.terminate()
        returncode = self._process.wait()
        stderr = self._process.stderr.read().decode("utf-8", errors="replace")
        self._process.stderr.close()
        if self._exhausted and returncode != 0:
            raise ProcessError(self._args, returncode, stderr)

    def __enter__(self) -> "ProcessStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = ["ProcessError", "ProcessRunner", "ProcessStream"]
