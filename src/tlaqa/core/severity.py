# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Severity related types and helpers."""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Severity levels attached to diagnostics produced by the TLA+ tools."""

    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"
    HINT = "hint"


class MessageClass(int, Enum):
    """Sub-codes carried by model checker sentinel messages."""

    NONE = 0
    ERROR = 1
    TOOL_BUG = 2
    WARNING = 3
    STATE = 4


_SEVERITY_RANK: Final[dict[Severity, int]] = {
    Severity.ERROR: 3,
    Severity.WARNING: 2,
    Severity.INFORMATION: 1,
    Severity.HINT: 0,
}

_MESSAGE_CLASS_SEVERITY: Final[dict[MessageClass, Severity]] = {
    MessageClass.ERROR: Severity.ERROR,
    MessageClass.TOOL_BUG: Severity.ERROR,
    MessageClass.WARNING: Severity.WARNING,
}


def severity_rank(severity: Severity) -> int:
    """Return a sortable rank where higher values are more severe.

    Args:
        severity: Severity to rank.

    Returns:
        int: Rank used when ordering or summarising diagnostics.
    """

    return _SEVERITY_RANK[severity]


def severity_from_message_class(sub_code: int | None, default: Severity = Severity.INFORMATION) -> Severity:
    """Infer severity from the optional sub-code of a sentinel message.

    Args:
        sub_code: Numeric message class emitted after the message code.
        default: Severity returned when the sub-code is missing or unknown.

    Returns:
        Severity: Severity derived from the message class.
    """

    if sub_code is None:
        return default
    try:
        message_class = MessageClass(sub_code)
    except ValueError:
        return default
    return _MESSAGE_CLASS_SEVERITY.get(message_class, default)


__all__ = ["MessageClass", "Severity", "severity_from_message_class", "severity_rank"]
