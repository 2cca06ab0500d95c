# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for the SANY syntactic/semantic analyzer output."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Final

from ..core.models import DiagnosticRecord, ParsedMessage, ParseResult, SourceRange, ToolKind
from ..core.severity import Severity
from .base import LineSink, StreamingOutputParser
from .events import OutputEvent, ProgressUpdated

_PARSING_FILE_RE: Final[re.Pattern[str]] = re.compile(r"^Parsing file (.+?)(?: \(.*\))?$")
_SEMANTIC_MODULE_RE: Final[re.Pattern[str]] = re.compile(r"^Semantic processing of module (\S+)")
_ERRORS_RE: Final[re.Pattern[str]] = re.compile(r"^\*\*\* Errors: \d+")
_WARNINGS_RE: Final[re.Pattern[str]] = re.compile(r"^\*\*\* Warnings: \d+")
_RANGE_RE: Final[re.Pattern[str]] = re.compile(
    r"^line (\d+), col (\d+) to line (\d+), col (\d+) of module (\S+)",
)
_PARSE_ERROR_MARKER: Final[str] = "***Parse Error***"
_ENCOUNTERED_RE: Final[re.Pattern[str]] = re.compile(r"at line (\d+), column (\d+)")
_LEXICAL_ERROR_RE: Final[re.Pattern[str]] = re.compile(r"^Lexical error at line (\d+), column (\d+)")


@dataclass(slots=True)
class GrammarStep:
    """Diagnostics and progress produced by a single analyzer output line."""

    records: list[DiagnosticRecord] = field(default_factory=list)
    progress: str | None = None
    file: str | None = None


@dataclass(slots=True)
class _PendingLocation:
    file: str
    span: SourceRange
    severity: Severity
    lines: list[str] = field(default_factory=list)


class SanyGrammar:
    """Line grammar of SANY's plain-text report.

    Kept separate from the parser so the model checker can feed it the
    analyzer output it prints before checking starts.
    """

    def __init__(self) -> None:
        self.modules: dict[str, str] = {}
        self._current_file: str | None = None
        self._severity = Severity.ERROR
        self._pending: _PendingLocation | None = None
        self._awaiting_parse_error = False

    def _module_file(self, module: str) -> str:
        return self.modules.get(module, f"{module}.tla")

    def feed(self, line: str) -> GrammarStep:
        """Consume one line of analyzer output."""

        stripped = line.strip()
        step = GrammarStep()
        range_match = _RANGE_RE.match(stripped)
        if range_match:
            step.records.extend(self.flush())
            line_no, col, end_line, end_col = (int(range_match.group(index)) for index in range(1, 5))
            self._pending = _PendingLocation(
                file=self._module_file(range_match.group(5)),
                span=SourceRange.from_tool(line_no, col, end_line, end_col),
                severity=self._severity,
            )
            return step
        if self._pending is not None:
            if stripped:
                self._pending.lines.append(stripped)
                return step
            if self._pending.lines:
                step.records.extend(self.flush())
            return step
        if self._awaiting_parse_error and stripped:
            self._awaiting_parse_error = False
            location = _ENCOUNTERED_RE.search(stripped)
            if location and self._current_file is not None:
                span = SourceRange.from_tool(int(location.group(1)), int(location.group(2)))
                step.records.append(self._record(self._current_file, span, Severity.ERROR, stripped))
            return step
        if stripped == _PARSE_ERROR_MARKER:
            self._awaiting_parse_error = True
            return step
        lexical = _LEXICAL_ERROR_RE.match(stripped)
        if lexical and self._current_file is not None:
            span = SourceRange.from_tool(int(lexical.group(1)), int(lexical.group(2)))
            step.records.append(self._record(self._current_file, span, Severity.ERROR, stripped))
            return step
        if _ERRORS_RE.match(stripped):
            self._severity = Severity.ERROR
            return step
        if _WARNINGS_RE.match(stripped):
            self._severity = Severity.WARNING
            return step
        parsing = _PARSING_FILE_RE.match(stripped)
        if parsing:
            path = parsing.group(1)
            self._current_file = path
            self.modules[PurePath(path).stem] = path
            step.progress = stripped
            step.file = path
            return step
        if _SEMANTIC_MODULE_RE.match(stripped):
            step.progress = stripped
        return step

    def flush(self) -> list[DiagnosticRecord]:
        """Emit the diagnostic whose message is still being collected."""

        pending, self._pending = self._pending, None
        if pending is None:
            return []
        text = "\n".join(pending.lines) or "Unknown error"
        return [self._record(pending.file, pending.span, pending.severity, text)]

    @staticmethod
    def _record(file: str, span: SourceRange, severity: Severity, text: str) -> DiagnosticRecord:
        return DiagnosticRecord(file=file, range=span, severity=severity, text=text)


class AnalyzerOutputParser(StreamingOutputParser[ParseResult]):
    """Turn SANY parse and semantic errors into diagnostics."""

    tool = ToolKind.ANALYZER

    def __init__(self, *, echo: LineSink | None = None) -> None:
        super().__init__(echo=echo)
        self._grammar = SanyGrammar()

    def handle_line(self, line: str) -> Iterable[OutputEvent]:
        return self._apply(self._grammar.feed(line))

    def handle_message(self, message: ParsedMessage) -> Iterable[OutputEvent]:
        events: list[OutputEvent] = []
        for line in message.lines:
            events.extend(self._apply(self._grammar.feed(line)))
        return events

    def handle_end(self) -> Iterable[OutputEvent]:
        return self._apply(GrammarStep(records=self._grammar.flush()))

    def _apply(self, step: GrammarStep) -> list[OutputEvent]:
        events: list[OutputEvent] = []
        if step.file is not None:
            self._diagnostics.add_file(step.file)
        if step.progress is not None:
            events.append(ProgressUpdated(tool=self.tool, detail=step.progress))
        for record in step.records:
            events.extend(self.add_diagnostic(record))
        return events

    def build_result(self) -> ParseResult:
        return ParseResult(
            tool=self.tool,
            diagnostics=self._diagnostics.to_mapping(),
            modules=dict(self._grammar.modules),
            conditions=self.conditions,
        )


__all__ = ["AnalyzerOutputParser", "GrammarStep", "SanyGrammar"]
