# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``tlaqa check``: run the TLC model checker with live progress."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from ...core.models import SpecFiles
from ...core.models.check import CheckState, ModelCheckResult
from ...diagnostics import InMemoryDiagnosticSink
from ...errors import SpecFileError
from ...execution import CheckContext, check_model
from ...reporting import ConsoleEcho, ProgressPrinter, render_check_result, render_diagnostics
from ...tooling import ArgumentSyntaxError, split_arguments
from ..core.shared import (
    EXIT_DIAGNOSTICS,
    EXIT_TOOLING,
    CLIError,
    CLILogger,
    build_cli_logger,
    build_runner,
    global_options,
    load_config,
    run_async,
)

SpecArgument = Annotated[Path, typer.Argument(help="Module (.tla) or model (.cfg) to check.", dir_okay=False)]
ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Model file to use instead of the module's sibling .cfg.", dir_okay=False),
]
ExtraOption = Annotated[
    list[str] | None,
    typer.Option("--option", "-o", help="Extra TLC options, split like a shell command line."),
]
ShowOutputOption = Annotated[bool, typer.Option("--show-output", help="Echo the raw TLC output.")]


def resolve_spec(spec: Path, config: Path | None) -> SpecFiles:
    """Return the module/model pair for the CLI arguments.

    Raises:
        CLIError: If either file is missing or has an unsupported extension.
    """

    try:
        if config is not None:
            return SpecFiles.with_config(spec, config)
        return SpecFiles.from_path(spec)
    except SpecFileError as exc:
        raise CLIError(str(exc), exit_code=EXIT_TOOLING) from exc


def split_extra_options(values: list[str] | None) -> list[str]:
    """Tokenise every ``--option`` value in order.

    Raises:
        CLIError: If a value contains an unterminated quote.
    """

    extra: list[str] = []
    try:
        for value in values or ():
            extra.extend(split_arguments(value))
    except ArgumentSyntaxError as exc:
        raise CLIError(str(exc), exit_code=EXIT_TOOLING) from exc
    return extra


def exit_code_for(result: ModelCheckResult) -> int:
    """Map the final check state to the command exit status."""

    if result.state is CheckState.SUCCESS:
        return 0
    if result.state is CheckState.FATAL:
        return EXIT_TOOLING
    return EXIT_DIAGNOSTICS


def report_result(result: ModelCheckResult, sink: InMemoryDiagnosticSink, logger: CLILogger) -> int:
    """Render ``result`` and return the exit status for it."""

    render_diagnostics(sink.snapshot, logger.console, use_color=logger.use_color)
    render_check_result(result, logger.console, use_color=logger.use_color)
    if result.truncated:
        logger.warn("TLC output ended before its last message was complete")
    code = exit_code_for(result)
    if result.state is CheckState.SUCCESS:
        logger.ok("No errors found")
    elif result.state is CheckState.STOPPED:
        logger.warn("Model checking was stopped")
    else:
        logger.fail(f"Model checking finished with state {result.state.value}")
    return code


def check_command(
    ctx: typer.Context,
    spec: SpecArgument,
    config: ConfigOption = None,
    option: ExtraOption = None,
    show_output: ShowOutputOption = False,
) -> None:
    """Check the model of SPEC with TLC."""

    options = global_options(ctx)
    logger = build_cli_logger(emoji=options.emoji)
    sink = InMemoryDiagnosticSink()
    try:
        spec_files = resolve_spec(spec, config)
        settings = load_config(options)
        extra_args = split_extra_options(option)
        runner = build_runner(settings, logger)
        echo = ConsoleEcho(logger.console) if show_output else None
        progress = ProgressPrinter(logger.console, use_color=logger.use_color)
        result = run_async(
            check_model(
                runner,
                CheckContext(),
                spec_files,
                extra_args=extra_args,
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
    """Register the ``check`` command on ``app``."""

    app.command("check")(check_command)


__all__ = ["check_command", "exit_code_for", "register", "report_result", "resolve_spec", "split_extra_options"]
