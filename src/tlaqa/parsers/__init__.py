# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Streaming decoders for the output of the TLA+ tools."""

from __future__ import annotations

from pathlib import Path

from ..core.models import ToolKind
from .base import (
    ANY_MARKER_RE,
    END_MARKER_RE,
    START_MARKER_RE,
    EventSink,
    LineSink,
    LineSplitter,
    ParserState,
    StreamingOutputParser,
    strip_markers,
)
from .events import DiagnosticAdded, OutputEvent, ProgressUpdated, ResultFinalized, ToolResult
from .pluscal import TranspilerOutputParser
from .sany import AnalyzerOutputParser, SanyGrammar
from .tlc import ModelCheckerOutputParser, StopProbe, TlcCode


def parser_for(
    tool: ToolKind,
    module_path: Path | str,
    *,
    echo: LineSink | None = None,
    stopped: StopProbe | None = None,
) -> StreamingOutputParser:
    """Return a fresh parser decoding the output of ``tool``.

    Args:
        tool: Tool whose output will be decoded.
        module_path: Module the tool runs against.
        echo: Optional sink for cleaned raw output lines.
        stopped: Cancellation probe, used by the model checker parser only.

    Returns:
        StreamingOutputParser: Single-use parser bound to one run.
    """

    if tool is ToolKind.TRANSPILER:
        return TranspilerOutputParser(module_path, echo=echo)
    if tool is ToolKind.ANALYZER:
        return AnalyzerOutputParser(echo=echo)
    return ModelCheckerOutputParser(module_path, echo=echo, stopped=stopped)


__all__ = [
    "ANY_MARKER_RE",
    "AnalyzerOutputParser",
    "DiagnosticAdded",
    "END_MARKER_RE",
    "EventSink",
    "LineSink",
    "LineSplitter",
    "ModelCheckerOutputParser",
    "OutputEvent",
    "ParserState",
    "ProgressUpdated",
    "ResultFinalized",
    "START_MARKER_RE",
    "SanyGrammar",
    "StopProbe",
    "StreamingOutputParser",
    "TlcCode",
    "ToolResult",
    "TranspilerOutputParser",
    "parser_for",
    "strip_markers",
]
