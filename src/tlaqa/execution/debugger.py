# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Start the model checker with its debugger enabled and attach a client."""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Final

from ..core.models import SpecFiles
from ..core.models.check import ModelCheckResult
from ..diagnostics import DiagnosticSink
from ..parsers import EventSink, LineSink
from ..tooling.runner import ToolRunner
from .context import CheckContext
from .workflows import check_model

LOGGER = logging.getLogger(__name__)

MIN_DEBUGGER_PORT: Final[int] = 1025
MAX_DEBUGGER_PORT: Final[int] = 64510
DEBUGGER_FLAG: Final[str] = "-debugger"

AttachHook = Callable[[int], Awaitable[None] | None]


def pick_debugger_port(rng: random.Random | None = None) -> int:
    """Return a port in the unprivileged range the debugger listens on."""

    return (rng or random).randint(MIN_DEBUGGER_PORT, MAX_DEBUGGER_PORT)


def debugger_args(port: int) -> list[str]:
    """Return the model checker options enabling the debugger on ``port``."""

    return [DEBUGGER_FLAG, f"port={port}"]


async def check_and_debug(
    runner: ToolRunner,
    context: CheckContext,
    spec: SpecFiles,
    attach: AttachHook,
    *,
    delay: float | None = None,
    rng: random.Random | None = None,
    sink: DiagnosticSink | None = None,
    echo: LineSink | None = None,
    on_event: EventSink | None = None,
) -> ModelCheckResult:
    """Run a model check with the debugger enabled and attach after a delay.

    There is no readiness handshake: the client is attached after a fixed
    delay and may race the debugger's listener on slow machines.

    Args:
        runner: Tool launcher.
        context: Exclusive slot owner.
        spec: Module and model to check.
        attach: Hook called with the port once the delay has elapsed.
        delay: Seconds to wait, defaults to ``runner.config.debugger_delay``.
        rng: Random source used to pick the port.
        sink: Consumer receiving the final diagnostics.
        echo: Optional sink for cleaned raw output.
        on_event: Optional consumer of decoded events.

    Returns:
        ModelCheckResult: Final result of the check.
    """

    port = pick_debugger_port(rng)
    wait_for = runner.config.debugger_delay if delay is None else delay
    task = asyncio.ensure_future(
        check_model(
            runner,
            context,
            spec,
            extra_args=debugger_args(port),
            sink=sink,
            echo=echo,
            on_event=on_event,
        ),
    )
    done, _ = await asyncio.wait({task}, timeout=wait_for)
    if task in done:
        LOGGER.debug("model check ended before the debugger client could attach")
        return task.result()
    try:
        outcome = attach(port)
        if inspect.isawaitable(outcome):
            await outcome
    except BaseException:
        task.cancel()
        await asyncio.wait({task})
        raise
    return await task


__all__ = [
    "AttachHook",
    "MAX_DEBUGGER_PORT",
    "MIN_DEBUGGER_PORT",
    "check_and_debug",
    "debugger_args",
    "pick_debugger_port",
]
