# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Console presentation of tool output and results."""

from __future__ import annotations

from .console import (
    ConsoleEcho,
    ProgressPrinter,
    format_location,
    render_check_result,
    render_diagnostics,
    severity_color,
)

__all__ = [
    "ConsoleEcho",
    "ProgressPrinter",
    "format_location",
    "render_check_result",
    "render_diagnostics",
    "severity_color",
]
