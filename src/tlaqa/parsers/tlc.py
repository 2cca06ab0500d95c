# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Parser for the TLC model checker running in ``-tool`` mode."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Final

from ..core.models import DiagnosticRecord, ParsedMessage, SourceRange, ToolKind
from ..core.models.check import (
    CheckState,
    CheckStatus,
    CoverageItem,
    ErrorInfo,
    InitialStateStat,
    ModelCheckResult,
    TraceState,
)
from ..core.severity import MessageClass, Severity
from .base import LineSink, StreamingOutputParser
from .events import OutputEvent, ProgressUpdated
from .sany import GrammarStep, SanyGrammar


class TlcCode(IntEnum):
    """Message codes printed between sentinel markers."""

    GENERAL = 1000
    INVARIANT_VIOLATED = 2110
    DEADLOCK = 2114
    BEHAVIOR_UP_TO_THIS_POINT = 2121
    STARTING = 2185
    FINISHED = 2186
    MODE_MC = 2187
    MODE_SIMULATION = 2188
    COMPUTING_INIT = 2189
    INIT_GENERATED = 2190
    CHECKING_TEMPORAL = 2192
    SUCCESS = 2193
    SEARCH_DEPTH = 2194
    STATS = 2199
    PROGRESS = 2200
    COVERAGE_INIT = 2201
    COVERAGE_END = 2202
    STATE_PRINT = 2217
    BACK_TO_STATE = 2218
    SANY_END = 2219
    SANY_START = 2220
    COVERAGE_NEXT = 2772


ERROR_CODES: Final[frozenset[int]] = frozenset(
    {TlcCode.GENERAL, TlcCode.INVARIANT_VIOLATED, TlcCode.DEADLOCK, TlcCode.BEHAVIOR_UP_TO_THIS_POINT},
)
TRACE_CODES: Final[frozenset[int]] = frozenset({TlcCode.STATE_PRINT, TlcCode.BACK_TO_STATE})
COVERAGE_CODES: Final[frozenset[int]] = frozenset({TlcCode.COVERAGE_INIT, TlcCode.COVERAGE_NEXT})

_TIMESTAMP_RE: Final[re.Pattern[str]] = re.compile(r"\(([^()]+)\)\s*$")
_FINISHED_RE: Final[re.Pattern[str]] = re.compile(r"^Finished in (\S+) at \(([^)]+)\)")
_PROGRESS_RE: Final[re.Pattern[str]] = re.compile(
    r"Progress\((\d+)\) at (.+?): ([\d,]+) states generated.*?, ([\d,]+) distinct states found.*?, "
    r"([\d,]+) states left on queue",
)
_STATS_RE: Final[re.Pattern[str]] = re.compile(
    r"([\d,]+) states generated, ([\d,]+) distinct states found, ([\d,]+) states left on queue",
)
_DEPTH_RE: Final[re.Pattern[str]] = re.compile(r"depth of the complete state graph search is (\d+)")
_COVERAGE_RE: Final[re.Pattern[str]] = re.compile(r"^<(\w+) (line .+ of module (\w+))>: (\d+):(\d+)")
_FINGERPRINT_RE: Final[re.Pattern[str]] = re.compile(r"(?:calculated \(optimistic\):\s*)?val = (\S+)")
_LOCATION_RE: Final[re.Pattern[str]] = re.compile(
    r"line (\d+), col(?:umn)? (\d+) to line (\d+), col(?:umn)? (\d+) of module (\w+)",
)
_TRACE_TITLE_RE: Final[re.Pattern[str]] = re.compile(r"^(\d+): (.*)$")

StopProbe = Callable[[], bool]


def _count(text: str) -> int:
    return int(text.replace(",", ""))


@dataclass(slots=True)
class _CheckBuilder:
    """Mutable accumulator behind the immutable result snapshots."""

    spec_path: str | None
    state: CheckState = CheckState.RUNNING
    status: CheckStatus = CheckStatus.NOT_STARTED
    mode: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration: str | None = None
    diameter: int = 0
    initial_state_stats: list[InitialStateStat] = field(default_factory=list)
    final_stats: InitialStateStat | None = None
    coverage: list[CoverageItem] = field(default_factory=list)
    errors: list[ErrorInfo] = field(default_factory=list)
    error_trace: list[TraceState] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    fingerprint: str | None = None
    tool_bug: bool = False


class ModelCheckerOutputParser(StreamingOutputParser[ModelCheckResult]):
    """Accumulate TLC messages into a :class:`ModelCheckResult`.

    Every sentinel block produces its diagnostics followed by a single
    :class:`ProgressUpdated` event carrying a snapshot of the run.
    """

    tool = ToolKind.MODEL_CHECKER

    def __init__(
        self,
        spec_path: Path | str | None = None,
        *,
        echo: LineSink | None = None,
        stopped: StopProbe | None = None,
    ) -> None:
        """Initialise the parser.

        Args:
            spec_path: Module being checked, used for results and diagnostics.
            echo: Optional sink for the cleaned raw output.
            stopped: Callable reporting whether the run was cancelled.
        """

        super().__init__(echo=echo)
        self._builder = _CheckBuilder(spec_path=str(spec_path) if spec_path is not None else None)
        self._stopped = stopped
        self._sany: SanyGrammar | None = None
        if spec_path is not None:
            self._diagnostics.add_file(str(spec_path))

    def handle_line(self, line: str) -> Iterable[OutputEvent]:
        if self._sany is None:
            return ()
        return self._apply_grammar(self._sany.feed(line))

    def handle_end(self) -> Iterable[OutputEvent]:
        return self._flush_sany()

    def _apply_grammar(self, step: GrammarStep) -> list[OutputEvent]:
        if step.file is not None:
            self._diagnostics.add_file(step.file)
        events: list[OutputEvent] = []
        for record in step.records:
            events.extend(self.add_diagnostic(record))
        return events

    def _flush_sany(self) -> list[OutputEvent]:
        if self._sany is None:
            return []
        return self._apply_grammar(GrammarStep(records=self._sany.flush()))

    def handle_message(self, message: ParsedMessage) -> Iterable[OutputEvent]:
        events = self._dispatch(message)
        detail = message.lines[0].strip() if message.lines else f"message {message.code}"
        events.append(ProgressUpdated(tool=self.tool, detail=detail, snapshot=self.snapshot()))
        return events

    def _dispatch(self, message: ParsedMessage) -> list[OutputEvent]:
        builder = self._builder
        code = message.code
        text = message.text
        if code == TlcCode.SANY_START:
            builder.status = CheckStatus.SANY_PARSING
            self._sany = SanyGrammar()
            return []
        if code == TlcCode.SANY_END:
            events = self._flush_sany()
            self._sany = None
            builder.status = CheckStatus.SANY_FINISHED
            return events
        if message.sub_code == MessageClass.TOOL_BUG:
            builder.tool_bug = True
        if message.sub_code in (MessageClass.ERROR, MessageClass.TOOL_BUG) or code in ERROR_CODES:
            return self._record_error(message)
        if message.sub_code == MessageClass.WARNING:
            builder.warnings.append(text)
            return []
        if code in TRACE_CODES or message.sub_code == MessageClass.STATE:
            self._record_trace_state(message)
            return []
        self._update_status(code, text)
        return []

    def _update_status(self, code: int, text: str) -> None:
        builder = self._builder
        if code == TlcCode.STARTING:
            builder.status = CheckStatus.STARTING
            stamp = _TIMESTAMP_RE.search(text)
            builder.start_time = stamp.group(1) if stamp else None
        elif code == TlcCode.MODE_MC:
            builder.mode = "mc"
        elif code == TlcCode.MODE_SIMULATION:
            builder.mode = "simulate"
        elif code == TlcCode.COMPUTING_INIT:
            builder.status = CheckStatus.INITIAL_STATES_COMPUTING
        elif code == TlcCode.INIT_GENERATED:
            builder.status = CheckStatus.CHECKING
        elif code == TlcCode.CHECKING_TEMPORAL:
            builder.status = CheckStatus.CHECKING_LIVENESS
        elif code == TlcCode.SUCCESS:
            if builder.state is CheckState.RUNNING:
                builder.state = CheckState.SUCCESS
            probability = _FINGERPRINT_RE.search(text)
            builder.fingerprint = probability.group(1) if probability else None
        elif code == TlcCode.SEARCH_DEPTH:
            depth = _DEPTH_RE.search(text)
            if depth:
                builder.diameter = int(depth.group(1))
        elif code == TlcCode.PROGRESS:
            self._record_progress(text)
        elif code == TlcCode.STATS:
            stats = _STATS_RE.search(text)
            if stats:
                builder.final_stats = InitialStateStat(
                    time_stamp=builder.end_time or "",
                    diameter=builder.diameter,
                    generated=_count(stats.group(1)),
                    distinct=_count(stats.group(2)),
                    left=_count(stats.group(3)),
                )
        elif code in COVERAGE_CODES:
            self._record_coverage(text)
        elif code == TlcCode.FINISHED:
            self._record_finished(text)

    def _record_progress(self, text: str) -> None:
        progress = _PROGRESS_RE.search(text)
        if progress is None:
            return
        diameter = int(progress.group(1))
        self._builder.diameter = diameter
        self._builder.initial_state_stats.append(
            InitialStateStat(
                time_stamp=progress.group(2),
                diameter=diameter,
                generated=_count(progress.group(3)),
                distinct=_count(progress.group(4)),
                left=_count(progress.group(5)),
            ),
        )

    def _record_coverage(self, text: str) -> None:
        for line in text.splitlines():
            item = _COVERAGE_RE.match(line.strip())
            if item:
                self._builder.coverage.append(
                    CoverageItem(
                        module=item.group(3),
                        action=item.group(1),
                        location=item.group(2),
                        total=int(item.group(4)),
                        distinct=int(item.group(5)),
                    ),
                )

    def _record_finished(self, text: str) -> None:
        builder = self._builder
        builder.status = CheckStatus.FINISHED
        finished = _FINISHED_RE.search(text)
        if finished:
            builder.duration = finished.group(1)
            builder.end_time = finished.group(2)
        if builder.state is CheckState.RUNNING:
            builder.state = self._terminal_state()

    def _terminal_state(self) -> CheckState:
        builder = self._builder
        if builder.tool_bug:
            return CheckState.FATAL
        if builder.errors or self._diagnostics.has_errors():
            return CheckState.ERROR
        return CheckState.SUCCESS

    def _record_error(self, message: ParsedMessage) -> list[OutputEvent]:
        builder = self._builder
        lines = tuple(line for line in message.lines if line.strip())
        builder.errors.append(ErrorInfo(code=message.code, lines=lines))
        if builder.state is CheckState.RUNNING or builder.state is CheckState.SUCCESS:
            builder.state = CheckState.FATAL if builder.tool_bug else CheckState.ERROR
        events: list[OutputEvent] = []
        for location in _LOCATION_RE.finditer(message.text):
            file = self._module_file(location.group(5))
            span = SourceRange.from_tool(*(int(location.group(index)) for index in range(1, 5)))
            record = DiagnosticRecord(file=file, range=span, severity=Severity.ERROR, text=lines[0] if lines else "")
            events.extend(self.add_diagnostic(record))
        return events

    def _module_file(self, module: str) -> str:
        spec_path = self._builder.spec_path
        if spec_path is not None and Path(spec_path).stem == module:
            return spec_path
        if self._sany is not None and module in self._sany.modules:
            return self._sany.modules[module]
        if spec_path is not None:
            return str(Path(spec_path).with_name(f"{module}.tla"))
        return f"{module}.tla"

    def _record_trace_state(self, message: ParsedMessage) -> None:
        if not message.lines:
            return
        title = _TRACE_TITLE_RE.match(message.lines[0].strip())
        if title is None:
            return
        variables = tuple(line for line in message.lines[1:] if line.strip())
        self._builder.error_trace.append(
            TraceState(number=int(title.group(1)), title=title.group(2), variables=variables),
        )

    def snapshot(self, state: CheckState | None = None) -> ModelCheckResult:
        """Return an immutable view of the run accumulated so far."""

        builder = self._builder
        return ModelCheckResult(
            spec_path=builder.spec_path,
            state=state or builder.state,
            status=builder.status,
            mode=builder.mode,
            start_time=builder.start_time,
            end_time=builder.end_time,
            duration=builder.duration,
            initial_state_stats=tuple(builder.initial_state_stats),
            final_stats=builder.final_stats,
            coverage=tuple(builder.coverage),
            errors=tuple(builder.errors),
            error_trace=tuple(builder.error_trace),
            warnings=tuple(builder.warnings),
            fingerprint_collision_probability=builder.fingerprint,
            diagnostics=self._diagnostics.to_mapping(),
            conditions=self.conditions,
        )

    def build_result(self) -> ModelCheckResult:
        state = self._builder.state
        if self._stopped is not None and self._stopped():
            state = CheckState.STOPPED
        elif state is CheckState.RUNNING:
            # Output ended without a finish message.
            state = CheckState.ERROR if self._diagnostics.has_errors() else CheckState.FATAL
        return self.snapshot(state)


__all__ = ["ModelCheckerOutputParser", "StopProbe", "TlcCode"]
