# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Asynchronous wrappers around external tool processes."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from collections.abc import AsyncIterator, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from tlaqa.core.models import ExitCategory
from tlaqa.errors import ProcessSpawnError, ToolingFailureError

LOGGER = logging.getLogger(__name__)

NO_ERROR: Final[int] = 0
MIN_TOOLING_ERROR: Final[int] = 10
READ_CHUNK_SIZE: Final[int] = 65536


def classify_exit_code(returncode: int) -> ExitCategory:
    """Map a process exit status onto the tooling exit taxonomy.

    ``0`` is a clean run, ``1..9`` are outcomes the tool already reported in
    its output stream, anything else (including deaths by signal, reported as
    negative values) is a tooling-level failure.

    Args:
        returncode: Exit status reported by the process.

    Returns:
        ExitCategory: Category describing how the exit should be surfaced.
    """

    if returncode == NO_ERROR:
        return ExitCategory.SUCCESS
    if NO_ERROR < returncode < MIN_TOOLING_ERROR:
        return ExitCategory.TOOL_REPORTED
    return ExitCategory.TOOLING_FAILURE


async def iter_chunks(stream: asyncio.StreamReader, size: int = READ_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield raw chunks of at most ``size`` bytes from ``stream`` until EOF.

    Lines are left for the consumer to reassemble, so no line length limit
    applies.
    """

    while chunk := await stream.read(size):
        yield chunk


@dataclass(frozen=True, slots=True)
class ProcessExit:
    """Exit information captured when a tool process closes."""

    returncode: int
    category: ExitCategory
    stderr: tuple[str, ...]
    cancelled: bool = False

    def raise_for_tooling_failure(self, tool: str) -> None:
        """Raise :class:`ToolingFailureError` when the exit signals a tooling failure.

        Cancelled runs never raise: interrupting a process makes it exit with
        whatever status the runtime picks for the signal.

        Args:
            tool: Display name of the tool used in the error report.

        Raises:
            ToolingFailureError: If the exit category is a tooling failure.
        """

        if self.cancelled or self.category is not ExitCategory.TOOLING_FAILURE:
            return
        raise ToolingFailureError(tool, self.returncode, self.stderr)


class ProcessHandle:
    """Supervise a spawned tool process and expose its output streams."""

    def __init__(self, process: asyncio.subprocess.Process, args: Sequence[str]) -> None:
        """Wrap ``process`` and start draining its standard error stream.

        Args:
            process: Process created with piped stdout and stderr.
            args: Full argument vector used to start the process.
        """

        self._process = process
        self.args = tuple(args)
        self._stderr = bytearray()
        self._stderr_task = asyncio.ensure_future(self._drain_stderr())
        self._signaled = False
        self._exit: ProcessExit | None = None

    @property
    def pid(self) -> int:
        """Return the operating system process identifier."""

        return self._process.pid

    @property
    def stdout(self) -> AsyncIterator[bytes]:
        """Return the standard output as raw chunks for the output parsers."""

        stream = self._process.stdout
        if stream is None:
            raise RuntimeError("process was started without a stdout pipe")
        return iter_chunks(stream)

    @property
    def stderr_lines(self) -> tuple[str, ...]:
        """Return the standard error lines captured so far."""

        return tuple(self._stderr.decode(errors="replace").splitlines())

    @property
    def returncode(self) -> int | None:
        """Return the exit status, or ``None`` while the process is alive."""

        return self._process.returncode

    @property
    def cancelled(self) -> bool:
        """Return whether :meth:`cancel` delivered an interrupt to the process."""

        return self._signaled

    async def _drain_stderr(self) -> None:
        stream = self._process.stderr
        if stream is None:
            return
        async for chunk in iter_chunks(stream):
            self._stderr.extend(chunk)

    def cancel(self) -> None:
        """Interrupt the process; repeated calls and finished processes are no-ops."""

        if self._signaled or self._process.returncode is not None:
            return
        self._signaled = True
        try:
            if sys.platform == "win32":
                self._process.terminate()
            else:
                self._process.send_signal(signal.SIGINT)
        except ProcessLookupError:
            LOGGER.debug("process %s exited before the interrupt was delivered", self.pid)

    async def wait(self) -> ProcessExit:
        """Wait for the process to close and classify its exit status.

        Returns:
            ProcessExit: Exit status, category and captured stderr.
        """

        if self._exit is not None:
            return self._exit
        returncode = await self._process.wait()
        await self._stderr_task
        self._exit = ProcessExit(
            returncode=returncode,
            category=classify_exit_code(returncode),
            stderr=self.stderr_lines,
            cancelled=self._signaled,
        )
        LOGGER.debug("process %s exited with %s (%s)", self.pid, returncode, self._exit.category.value)
        return self._exit


async def spawn_process(executable: Path | str, args: Sequence[str], *, cwd: Path | None = None) -> ProcessHandle:
    """Start ``executable`` with ``args`` and return a supervising handle.

    Args:
        executable: Resolved path of the program to run.
        args: Argument vector passed after the executable.
        cwd: Optional working directory for the process.

    Returns:
        ProcessHandle: Handle exposing stdout, captured stderr and the exit signal.

    Raises:
        ProcessSpawnError: If the operating system fails to start the process.
    """

    command = [str(executable), *args]
    LOGGER.debug("spawning %s in %s", command, cwd)
    try:
        # Bandit: argument vectors are passed directly, no shell expansion.
        process = await asyncio.create_subprocess_exec(  # nosec B603
            *command,
            cwd=str(cwd) if cwd is not None else None,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ProcessSpawnError(str(executable), exc.strerror or str(exc)) from exc
    return ProcessHandle(process, command)


__all__ = [
    "MIN_TOOLING_ERROR",
    "NO_ERROR",
    "READ_CHUNK_SIZE",
    "ProcessExit",
    "ProcessHandle",
    "classify_exit_code",
    "iter_chunks",
    "spawn_process",
]
