# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``tlaqa debug``: run TLC with its debugger listening on a random port."""

from __future__ import annotations

from typing import Annotated

import typer

from ...diagnostics import InMemoryDiagnosticSink
from ...execution import CheckContext, check_and_debug
from ...reporting import ConsoleEcho, ProgressPrinter
from ..core.shared import CLIError, build_cli_logger, build_runner, global_options, load_config, run_async
from .check import ConfigOption, ShowOutputOption, SpecArgument, report_result, resolve_spec

DelayOption = Annotated[
    float | None,
    typer.Option("--delay", min=0, help="Seconds to wait before announcing the debugger port."),
]


def debug_command(
    ctx: typer.Context,
    spec: SpecArgument,
    config: ConfigOption = None,
    delay: DelayOption = None,
    show_output: ShowOutputOption = False,
) -> None:
    """Check SPEC with the TLC debugger enabled."""

    options = global_options(ctx)
    logger = build_cli_logger(emoji=options.emoji)
    sink = InMemoryDiagnosticSink()

    def announce(port: int) -> None:
        logger.info(f"TLC debugger listening on localhost:{port}")

    try:
        spec_files = resolve_spec(spec, config)
        runner = build_runner(load_config(options), logger)
        echo = ConsoleEcho(logger.console) if show_output else None
        progress = ProgressPrinter(logger.console, use_color=logger.use_color)
        result = run_async(
            check_and_debug(
                runner,
                CheckContext(),
                spec_files,
                announce,
                delay=delay,
                sink=sink,
                echo=echo,
                on_event=progress,
            ),
        )
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    raise typer.Exit(code=report_result(result, sink, logger))


def register(app: typer.Typer) -> None:
    """Register the ``debug`` command on ``app``."""

    app.command("debug")(debug_command)


__all__ = ["debug_command", "register"]
