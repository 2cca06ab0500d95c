# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for the PlusCal transpiler (``pcal.trans``) output."""

from __future__ import annotations

import re
from collections.abc import Iterable
from pathlib import Path
from typing import Final

from ..core.models import DiagnosticRecord, ParsedMessage, ParseResult, SourceRange, ToolKind
from ..core.severity import Severity
from .base import LineSink, StreamingOutputParser
from .events import OutputEvent, ProgressUpdated

_UNRECOVERABLE_ERROR: Final[str] = "Unrecoverable error:"
_MESSAGE_PREFIX: Final[str] = " -- "
_WARNING_PREFIX: Final[str] = "Warning:"
_NO_ALGORITHM_MARKERS: Final[tuple[str, ...]] = (
    "Beginning of algorithm string --algorithm not found",
    "Beginning of algorithm string --fair algorithm not found",
)
_PROGRESS_LINES: Final[tuple[str, ...]] = ("Parsing completed.", "Translation completed.")
_LOCATION_RE: Final[re.Pattern[str]] = re.compile(r"line (\d+), column (\d+)")
_NEW_FILE_RE: Final[re.Pattern[str]] = re.compile(r"^New file (.+) written\.$")


class TranspilerOutputParser(StreamingOutputParser[ParseResult]):
    """Turn PlusCal translation errors into diagnostics on the module file."""

    tool = ToolKind.TRANSPILER

    def __init__(self, module_path: Path | str, *, echo: LineSink | None = None) -> None:
        super().__init__(echo=echo)
        self._file = str(module_path)
        self._diagnostics.add_file(self._file)
        self._awaiting_message = False
        self._pending_text: str | None = None

    def handle_line(self, line: str) -> Iterable[OutputEvent]:
        if line.startswith(_UNRECOVERABLE_ERROR):
            events = self._flush_pending()
            self._awaiting_message = True
            return events
        if self._awaiting_message and line.startswith(_MESSAGE_PREFIX):
            self._awaiting_message = False
            text = line[len(_MESSAGE_PREFIX) :].strip()
            if any(marker in text for marker in _NO_ALGORITHM_MARKERS):
                return [ProgressUpdated(tool=self.tool, detail="No PlusCal algorithm found")]
            location = _LOCATION_RE.search(text)
            if location:
                return self._error(text, location)
            self._pending_text = text
            return []
        if self._pending_text is not None:
            location = _LOCATION_RE.search(line)
            if location:
                text, self._pending_text = self._pending_text, None
                return self._error(text, location)
            if line.strip():
                return self._flush_pending()
            return []
        if line.startswith(_WARNING_PREFIX):
            text = line[len(_WARNING_PREFIX) :].strip()
            return self._diagnostic(text, SourceRange.file_start(), Severity.WARNING)
        stripped = line.strip()
        if stripped in _PROGRESS_LINES or _NEW_FILE_RE.match(stripped):
            return [ProgressUpdated(tool=self.tool, detail=stripped)]
        return []

    def handle_message(self, message: ParsedMessage) -> Iterable[OutputEvent]:
        # The transpiler has no structured messages; keep any block as progress.
        return [ProgressUpdated(tool=self.tool, detail=message.text)]

    def handle_end(self) -> Iterable[OutputEvent]:
        return self._flush_pending()

    def _flush_pending(self) -> list[OutputEvent]:
        if self._pending_text is None:
            return []
        text, self._pending_text = self._pending_text, None
        return self._diagnostic(text, SourceRange.file_start(), Severity.ERROR)

    def _error(self, text: str, location: re.Match[str]) -> list[OutputEvent]:
        line_no, column = int(location.group(1)), int(location.group(2))
        return self._diagnostic(text, SourceRange.from_tool(line_no, column), Severity.ERROR)

    def _diagnostic(self, text: str, span: SourceRange, severity: Severity) -> list[OutputEvent]:
        record = DiagnosticRecord(file=self._file, range=span, severity=severity, text=text)
        return self.add_diagnostic(record)

    def build_result(self) -> ParseResult:
        return ParseResult(
            tool=self.tool,
            diagnostics=self._diagnostics.to_mapping(),
            conditions=self.conditions,
        )


__all__ = ["TranspilerOutputParser"]
