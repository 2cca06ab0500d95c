# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Split free-form option strings the way a user types them in a shell."""

from __future__ import annotations

import shlex

from tlaqa.config.models import ConfigError


class ArgumentSyntaxError(ConfigError):
    """Raised when an option string contains an unterminated quote."""


def split_arguments(command_line: str) -> list[str]:
    """Split ``command_line`` on whitespace outside of quotes.

    Single and double quotes group characters and are stripped from the
    emitted token; an empty quoted segment yields an empty-string token.
    Backslashes carry no special meaning so Windows paths survive intact.

    Args:
        command_line: Options as typed by the user.

    Returns:
        list[str]: Discrete arguments in their original order.

    Raises:
        ArgumentSyntaxError: If a quoted segment is never closed.
    """

    lexer = shlex.shlex(command_line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""
    lexer.escape = ""
    try:
        return list(lexer)
    except ValueError as exc:
        raise ArgumentSyntaxError(f"Cannot split options {command_line!r}: {exc}") from exc


__all__ = ["ArgumentSyntaxError", "split_arguments"]
