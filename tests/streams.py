# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""In-memory stand-ins for tool output streams and processes."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable, Sequence
from pathlib import Path

from tlaqa.core.runtime import MIN_TOOLING_ERROR, ProcessExit, classify_exit_code


async def chunk_stream(chunks: Iterable[bytes | str]) -> AsyncIterator[bytes | str]:
    """Yield ``chunks`` as an asynchronous stream, letting the loop run in between."""

    for chunk in chunks:
        await asyncio.sleep(0)
        yield chunk


def lines_to_bytes(lines: Sequence[str]) -> bytes:
    """Join ``lines`` into the byte stream a tool would print."""

    return "".join(f"{line}\n" for line in lines).encode()


class FakeProcess:
    """Scripted replacement for :class:`tlaqa.core.runtime.ProcessHandle`.

    The stream yields ``output`` and then, when ``hold`` is set, blocks until
    the process is cancelled.
    """

    def __init__(self, output: Sequence[str] = (), *, returncode: int = 0, hold: bool = False) -> None:
        self.output = lines_to_bytes(output)
        self.returncode = returncode
        self.hold = hold
        self.cancel_calls = 0
        self._cancel_event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def stdout(self) -> AsyncIterator[bytes]:
        return self._stream()

    async def _stream(self) -> AsyncIterator[bytes]:
        if self.output:
            await asyncio.sleep(0)
            yield self.output
        if self.hold:
            await self._cancel_event.wait()

    def cancel(self) -> None:
        self.cancel_calls += 1
        self._cancel_event.set()

    async def wait(self) -> ProcessExit:
        returncode = -2 if self.cancelled else self.returncode
        return ProcessExit(
            returncode=returncode,
            category=classify_exit_code(returncode),
            stderr=("stderr line",) if returncode >= MIN_TOOLING_ERROR else (),
            cancelled=self.cancelled,
        )


class FakeJavaCache:
    """Java cache resolving to a fixed executable without probing."""

    def __init__(self) -> None:
        self.calls = 0

    async def resolve(self, java_home: Path | None) -> Path:
        self.calls += 1
        return Path("/usr/bin/java")


class FakeSpawner:
    """Record spawned commands and hand out queued :class:`FakeProcess` objects."""

    def __init__(self, *processes: FakeProcess) -> None:
        self.processes = list(processes)
        self.calls: list[tuple[Path, list[str], Path | None]] = []

    async def __call__(self, executable: Path, args: Sequence[str], *, cwd: Path | None = None) -> FakeProcess:
        self.calls.append((executable, list(args), cwd))
        return self.processes.pop(0)
