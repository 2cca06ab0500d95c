# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``tlaqa parse``: transpile PlusCal and run the syntactic analyzer."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...core.models import MODULE_SUFFIX
from ...diagnostics import DiagnosticCollection, InMemoryDiagnosticSink
from ...execution import parse_module
from ...reporting import ConsoleEcho, render_diagnostics
from ..core.shared import (
    EXIT_DIAGNOSTICS,
    EXIT_TOOLING,
    CLIError,
    build_cli_logger,
    build_runner,
    global_options,
    load_config,
    run_async,
)


def parse_command(
    ctx: typer.Context,
    module: Annotated[Path, typer.Argument(help="TLA+ module to parse.", exists=True, dir_okay=False)],
    show_output: Annotated[bool, typer.Option("--show-output", help="Echo the raw tool output.")] = False,
) -> None:
    """Transpile PlusCal in MODULE and report parse errors."""

    options = global_options(ctx)
    logger = build_cli_logger(emoji=options.emoji)
    sink = InMemoryDiagnosticSink()
    try:
        if module.suffix != MODULE_SUFFIX:
            raise CLIError(f"{module.name} is not a {MODULE_SUFFIX} module", exit_code=EXIT_TOOLING)
        runner = build_runner(load_config(options), logger)
        echo = ConsoleEcho(logger.console) if show_output else None
        run_async(parse_module(runner, module, sink, echo=echo))
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc

    render_diagnostics(sink.snapshot, logger.console, use_color=logger.use_color)
    if DiagnosticCollection.from_mapping(sink.snapshot).has_errors():
        logger.fail(f"Errors found in {module.name}")
        raise typer.Exit(code=EXIT_DIAGNOSTICS)
    logger.ok(f"{module.name} parsed without errors")


def register(app: typer.Typer) -> None:
    """Register the ``parse`` command on ``app``."""

    app.command("parse")(parse_command)


__all__ = ["parse_command", "register"]
