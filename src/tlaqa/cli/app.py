# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""CLI application entry point wiring commands and shared options."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from .commands import register_commands
from .core.shared import GlobalOptions

app = typer.Typer(help="Run the TLA+ tools and decode their output.", no_args_is_help=True, add_completion=False)


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Path | None,
        typer.Option("--config-file", help="TOML file used instead of ./tlaqa.toml.", dir_okay=False),
    ] = None,
    java_home: Annotated[
        Path | None,
        typer.Option("--java-home", help="Java home overriding every other configuration source.", file_okay=False),
    ] = None,
    no_emoji: Annotated[bool, typer.Option("--no-emoji", help="Disable emoji in console output.")] = False,
) -> None:
    """Store global options for the sub-commands."""

    ctx.obj = GlobalOptions(config_file=config_file, java_home=java_home, emoji=not no_emoji)


register_commands(app)

__all__ = ["app"]
