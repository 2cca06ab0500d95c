# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared utilities for CLI commands (logging, errors, option state)."""

from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Final, TypeVar

import typer
from rich.console import Console

from ...config import Config, ConfigError, ConfigLoader
from ...core.logging import detect_tty
from ...core.logging import fail as core_fail
from ...core.logging import info as core_info
from ...core.logging import ok as core_ok
from ...core.logging import section as core_section
from ...core.logging import warn as core_warn
from ...errors import TlaToolingError
from ...tooling import JavaExecutableCache, ToolRunner

EXIT_DIAGNOSTICS: Final[int] = 1
EXIT_TOOLING: Final[int] = 2

ResultT = TypeVar("ResultT")


class CLIError(RuntimeError):
    """Error raised when a CLI command fails and should exit with a status code."""

    def __init__(self, message: str, *, exit_code: int = EXIT_DIAGNOSTICS) -> None:
        """Initialise the error with a message and exit code.

        Args:
            message: Human-readable error message shown to the user.
            exit_code: Exit status associated with the failure.
        """

        super().__init__(message)
        self.exit_code = exit_code


@dataclass(slots=True)
class CLILogger:
    """Adapter around project logging helpers respecting CLI emoji settings."""

    console: Console
    use_emoji: bool
    use_color: bool = True

    def fail(self, message: str) -> None:
        core_fail(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def warn(self, message: str) -> None:
        core_warn(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def ok(self, message: str) -> None:
        core_ok(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def info(self, message: str) -> None:
        core_info(message, use_emoji=self.use_emoji, use_color=self.use_color)

    def section(self, title: str) -> None:
        core_section(title, use_color=self.use_color)

    def echo(self, message: str) -> None:
        """Write ``message`` to stdout using Typer's echo helper."""

        typer.echo(message)


def build_cli_logger(*, emoji: bool, no_color: bool = False) -> CLILogger:
    """Return a ``CLILogger`` bound to a dedicated Rich console.

    Args:
        emoji: Whether log output may include emoji glyphs.
        no_color: Whether terminal colour output should be disabled.

    Returns:
        CLILogger: Logger instance for one command invocation.
    """

    use_color = not no_color and detect_tty()
    console = Console(no_color=not use_color, highlight=False, soft_wrap=True)
    return CLILogger(console=console, use_emoji=emoji, use_color=use_color)


@dataclass(slots=True)
class GlobalOptions:
    """Options accepted before the sub-command name."""

    config_file: Path | None = None
    java_home: Path | None = None
    emoji: bool = True


def global_options(ctx: typer.Context) -> GlobalOptions:
    """Return the options stored by the application callback."""

    options = ctx.obj
    return options if isinstance(options, GlobalOptions) else GlobalOptions()


def load_config(options: GlobalOptions, *, root: Path | None = None) -> Config:
    """Load configuration for ``root`` applying the global CLI overrides.

    Raises:
        CLIError: If any configuration source is invalid.
    """

    loader = ConfigLoader.for_root(root or Path.cwd(), config_file=options.config_file)
    try:
        return loader.load({"java_home": options.java_home})
    except ConfigError as exc:
        raise CLIError(str(exc), exit_code=EXIT_TOOLING) from exc


def build_runner(config: Config, logger: CLILogger) -> ToolRunner:
    """Return a tool runner whose Java version warnings go through ``logger``."""

    return ToolRunner(config, java_cache=JavaExecutableCache(warn=logger.warn))


def run_async(coro: Coroutine[Any, Any, ResultT]) -> ResultT:
    """Run ``coro`` to completion, translating tooling errors into :class:`CLIError`.

    Raises:
        CLIError: If the tools cannot be run or the configuration is invalid.
    """

    try:
        return asyncio.run(coro)
    except (TlaToolingError, ConfigError) as exc:
        raise CLIError(str(exc), exit_code=EXIT_TOOLING) from exc


__all__ = [
    "CLIError",
    "CLILogger",
    "EXIT_DIAGNOSTICS",
    "EXIT_TOOLING",
    "GlobalOptions",
    "build_cli_logger",
    "build_runner",
    "global_options",
    "load_config",
    "run_async",
]
