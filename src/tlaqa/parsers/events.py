# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Typed events emitted while a tool output stream is decoded."""

from __future__ import annotations

from dataclasses import dataclass

from ..core.models import DiagnosticRecord, ParseResult, ToolKind
from ..core.models.check import ModelCheckResult

ToolResult = ParseResult | ModelCheckResult


@dataclass(frozen=True, slots=True)
class DiagnosticAdded:
    """A new diagnostic was decoded."""

    tool: ToolKind
    record: DiagnosticRecord


@dataclass(frozen=True, slots=True)
class ProgressUpdated:
    """The tool reported progress; ``snapshot`` holds the model checker state."""

    tool: ToolKind
    detail: str
    snapshot: ModelCheckResult | None = None


@dataclass(frozen=True, slots=True)
class ResultFinalized:
    """The stream ended and the final aggregate is available."""

    tool: ToolKind
    result: ToolResult


OutputEvent = DiagnosticAdded | ProgressUpdated | ResultFinalized

__all__ = ["DiagnosticAdded", "OutputEvent", "ProgressUpdated", "ResultFinalized", "ToolResult"]
