# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for spawning, supervising and classifying tool processes."""

from __future__ import annotations

import asyncio
import sys

import pytest

from tlaqa.core.models import ExitCategory
from tlaqa.core.models.check import CheckState
from tlaqa.core.runtime import READ_CHUNK_SIZE, ProcessExit, classify_exit_code, spawn_process
from tlaqa.errors import ProcessSpawnError, ToolingFailureError
from tlaqa.parsers import ModelCheckerOutputParser


@pytest.mark.parametrize(
    ("returncode", "category"),
    [
        (0, ExitCategory.SUCCESS),
        (1, ExitCategory.TOOL_REPORTED),
        (9, ExitCategory.TOOL_REPORTED),
        (10, ExitCategory.TOOLING_FAILURE),
        (255, ExitCategory.TOOLING_FAILURE),
        (-2, ExitCategory.TOOLING_FAILURE),
    ],
)
def test_classify_exit_code(returncode: int, category: ExitCategory) -> None:
    assert classify_exit_code(returncode) is category


def test_tooling_failure_raises_with_stderr() -> None:
    exit_info = ProcessExit(returncode=12, category=ExitCategory.TOOLING_FAILURE, stderr=("boom", "trace"))

    with pytest.raises(ToolingFailureError) as excinfo:
        exit_info.raise_for_tooling_failure("TLC")

    assert excinfo.value.returncode == 12
    assert excinfo.value.stderr == ("boom", "trace")
    assert "Error running TLC (exit code 12)" in str(excinfo.value)


def test_cancelled_or_reported_exits_do_not_raise() -> None:
    ProcessExit(returncode=-2, category=ExitCategory.TOOLING_FAILURE, stderr=(), cancelled=True).raise_for_tooling_failure(
        "TLC",
    )
    ProcessExit(returncode=3, category=ExitCategory.TOOL_REPORTED, stderr=()).raise_for_tooling_failure("TLC")


def test_spawn_captures_stdout_and_stderr() -> None:
    script = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"

    async def scenario() -> tuple[bytes, ProcessExit]:
        handle = await spawn_process(sys.executable, ["-c", script])
        output = b"".join([chunk async for chunk in handle.stdout])
        return output, await handle.wait()

    output, exit_info = asyncio.run(scenario())

    assert output.splitlines() == [b"out"]
    assert exit_info.returncode == 3
    assert exit_info.category is ExitCategory.TOOL_REPORTED
    assert exit_info.stderr == ("err",)


def test_spawn_failure_is_reported() -> None:
    with pytest.raises(ProcessSpawnError):
        asyncio.run(spawn_process("/nonexistent/tool-binary", []))


def test_cancel_is_idempotent_and_never_a_tooling_failure() -> None:
    async def scenario() -> ProcessExit:
        handle = await spawn_process(sys.executable, ["-c", "import time; time.sleep(30)"])
        handle.cancel()
        handle.cancel()
        exit_info = await handle.wait()
        handle.cancel()
        return exit_info

    exit_info = asyncio.run(scenario())

    assert exit_info.cancelled
    exit_info.raise_for_tooling_failure("TLC")


def test_wait_returns_cached_exit() -> None:
    async def scenario() -> tuple[ProcessExit, ProcessExit]:
        handle = await spawn_process(sys.executable, ["-c", "pass"])
        return await handle.wait(), await handle.wait()

    first, second = asyncio.run(scenario())

    assert first is second
    assert first.category is ExitCategory.SUCCESS


def test_lines_longer_than_a_read_chunk_are_reassembled() -> None:
    long_value = "a" * (2 * READ_CHUNK_SIZE)
    script = (
        "import sys\n"
        "print('@!@!@STARTMSG 2217:4 @!@!@')\n"
        "print('1: <Initial predicate>')\n"
        f"print('x = \"' + 'a' * {len(long_value)} + '\"')\n"
        "print('@!@!@ENDMSG 2217 @!@!@')\n"
        f"sys.stderr.write('e' * {len(long_value)} + '\\n')\n"
        "sys.exit(12)\n"
    )

    async def scenario() -> tuple[ModelCheckerOutputParser, ProcessExit]:
        handle = await spawn_process(sys.executable, ["-c", script])
        parser = ModelCheckerOutputParser("/specs/Spec.tla")
        await parser.read_all(handle.stdout)
        return parser, await handle.wait()

    parser, exit_info = asyncio.run(scenario())

    (state,) = parser.result.error_trace
    assert state.variables == (f'x = "{long_value}"',)
    assert parser.result.state is CheckState.FATAL
    assert exit_info.returncode == 12
    assert exit_info.stderr == ("e" * len(long_value),)
    with pytest.raises(ToolingFailureError):
        exit_info.raise_for_tooling_failure("TLC")
