# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""``tlaqa java``: show the Java runtime used to launch the tools."""

from __future__ import annotations

import typer

from ...tooling import JavaExecutableCache
from ..core.shared import CLIError, build_cli_logger, global_options, load_config, run_async


def java_command(ctx: typer.Context) -> None:
    """Print the resolved Java executable and its version."""

    options = global_options(ctx)
    logger = build_cli_logger(emoji=options.emoji)
    cache = JavaExecutableCache(warn=logger.warn)
    try:
        config = load_config(options)
        java_path = run_async(cache.resolve(config.java_home))
    except CLIError as exc:
        logger.fail(str(exc))
        raise typer.Exit(code=exc.exit_code) from exc
    version = cache.version
    logger.section("Java runtime")
    logger.echo(f"Executable: {java_path}")
    logger.echo(f"Version:    {version.version if version else '?'}")
    logger.echo(f"Tools:      {config.tools_archive}")
    if not config.tools_archive.exists():
        logger.warn(f"TLA+ tools archive not found at {config.tools_archive}")


def register(app: typer.Typer) -> None:
    """Register the ``java`` command on ``app``."""

    app.command("java")(java_command)


__all__ = ["java_command", "register"]
