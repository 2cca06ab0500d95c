# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Sentinel protocol state machine shared by every tool output parser.

Tool output interleaves free-form text with machine readable blocks::

    @!@!@STARTMSG 2185:0 @!@!@
    Starting... (2024-01-01 10:00:00)
    @!@!@ENDMSG 2185 @!@!@

Each parser consumes the stream line by line, buffers the body of an open
block and dispatches the finished :class:`ParsedMessage` to a tool-specific
handler. Everything outside blocks is handed to :meth:`handle_line`.
"""

from __future__ import annotations

import codecs
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterable, AsyncIterator, Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Final, Generic, TypeVar

from ..core.models import (
    DiagnosticRecord,
    OutputCondition,
    OutputConditionKind,
    ParsedMessage,
    ParseResult,
    ToolKind,
)
from ..core.models.check import ModelCheckResult
from ..diagnostics import DiagnosticCollection
from ..errors import ParserStateError
from .events import DiagnosticAdded, OutputEvent, ResultFinalized

LOGGER = logging.getLogger(__name__)

START_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"^@!@!@STARTMSG\s*(\d+)(?::(\d+))?\s*@!@!@$")
END_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"^@!@!@ENDMSG\s*(\d+)\s*@!@!@$")
ANY_MARKER_RE: Final[re.Pattern[str]] = re.compile(r"@!@!@(?:START|END)MSG\s*\d+(?::\d+)?\s*@!@!@")

ResultT = TypeVar("ResultT", ParseResult, ModelCheckResult)
LineSink = Callable[[str], None]
EventSink = Callable[[OutputEvent], None]
StreamChunk = bytes | str


def strip_markers(line: str) -> str | None:
    """Remove sentinel markers from ``line`` before it is displayed.

    Args:
        line: Raw output line.

    Returns:
        str | None: Cleaned line, or ``None`` when nothing but markers remained.
        Lines that were empty to begin with are returned unchanged.
    """

    if line == "":
        return line
    cleaned = ANY_MARKER_RE.sub("", line)
    return cleaned or None


class LineSplitter:
    """Reassemble complete lines from arbitrarily sized output chunks."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._pending = ""

    def feed(self, chunk: StreamChunk) -> list[str]:
        """Return the lines completed by ``chunk``, keeping any partial tail."""

        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        self._pending += text
        *complete, self._pending = self._pending.split("\n")
        return [line.removesuffix("\r") for line in complete]

    def flush(self) -> list[str]:
        """Return the unterminated tail once the stream has ended."""

        self._pending += self._decoder.decode(b"", final=True)
        tail, self._pending = self._pending, ""
        return [tail.removesuffix("\r")] if tail else []


class ParserState(str, Enum):
    """States of the sentinel protocol machine."""

    PASSTHROUGH = "passthrough"
    IN_MESSAGE = "in_message"


@dataclass(slots=True)
class _OpenMessage:
    code: int
    sub_code: int | None
    lines: list[str] = field(default_factory=list)

    def freeze(self) -> ParsedMessage:
        return ParsedMessage(code=self.code, sub_code=self.sub_code, lines=tuple(self.lines))


class StreamingOutputParser(ABC, Generic[ResultT]):
    """Decode one tool run's stdout into ordered events and a final aggregate.

    Parsers are single-use: they bind to exactly one process run and cannot
    be restarted once the stream has been consumed.
    """

    tool: ClassVar[ToolKind]

    def __init__(self, *, echo: LineSink | None = None) -> None:
        """Initialise an idle parser.

        Args:
            echo: Optional sink receiving every non-sentinel line with markers
                removed, typically a tool console.
        """

        self._echo = echo
        self._message: _OpenMessage | None = None
        self._diagnostics = DiagnosticCollection()
        self._conditions: list[OutputCondition] = []
        self._started = False
        self._result: ResultT | None = None

    @property
    def state(self) -> ParserState:
        """Return the current protocol state."""

        return ParserState.PASSTHROUGH if self._message is None else ParserState.IN_MESSAGE

    @property
    def diagnostics(self) -> DiagnosticCollection:
        """Return diagnostics accumulated so far."""

        return self._diagnostics

    @property
    def conditions(self) -> tuple[OutputCondition, ...]:
        """Return stream anomalies recorded so far."""

        return tuple(self._conditions)

    @property
    def result(self) -> ResultT:
        """Return the final aggregate.

        Raises:
            ParserStateError: If the stream has not reached its end yet.
        """

        if self._result is None:
            raise ParserStateError(f"{self.tool.display_name} output has not been fully read")
        return self._result

    def feed_line(self, line: str) -> list[OutputEvent]:
        """Advance the state machine by one output line.

        Args:
            line: Output line without its terminator.

        Returns:
            list[OutputEvent]: Events produced by the line, in order.

        Raises:
            ParserStateError: If the parser already produced its result.
        """

        if self._result is not None:
            raise ParserStateError(f"{self.tool.display_name} parser is single-use and already finished")
        stripped = line.strip()
        start = START_MARKER_RE.match(stripped)
        if start:
            code = int(start.group(1))
            sub_code = int(start.group(2)) if start.group(2) is not None else None
            if self._message is not None:
                self._record_violation(f"message {self._message.code} interrupted by the start of message {code}")
            self._message = _OpenMessage(code=code, sub_code=sub_code)
            return []
        end = END_MARKER_RE.match(stripped)
        if end:
            return self._close_message(int(end.group(1)))
        self._echo_line(line)
        if self._message is not None:
            self._message.lines.append(line)
            return []
        return list(self.handle_line(line))

    def _close_message(self, code: int) -> list[OutputEvent]:
        if self._message is None:
            LOGGER.debug("discarding unmatched end marker of message %s", code)
            return []
        if self._message.code != code:
            self._record_violation(f"message {self._message.code} closed by the end marker of message {code}")
            self._message = None
            return []
        message = self._message.freeze()
        self._message = None
        return list(self.handle_message(message))

    def _echo_line(self, line: str) -> None:
        if self._echo is None:
            return
        cleaned = strip_markers(line)
        if cleaned is not None:
            self._echo(cleaned)

    def _record_violation(self, detail: str) -> None:
        LOGGER.warning("%s output protocol violation: %s", self.tool.display_name, detail)
        self._conditions.append(OutputCondition(kind=OutputConditionKind.PROTOCOL_VIOLATION, detail=detail))

    def add_diagnostic(self, record: DiagnosticRecord) -> list[OutputEvent]:
        """Add ``record`` and return the event announcing it, if it was new."""

        if self._diagnostics.add(record):
            return [DiagnosticAdded(tool=self.tool, record=record)]
        return []

    def close(self) -> list[OutputEvent]:
        """Mark the end of the stream and build the final aggregate.

        An unterminated message is discarded and reported as truncated output.

        Returns:
            list[OutputEvent]: Trailing events, ending with :class:`ResultFinalized`.

        Raises:
            ParserStateError: If the stream was already closed.
        """

        if self._result is not None:
            raise ParserStateError(f"{self.tool.display_name} parser is single-use and already finished")
        if self._message is not None:
            detail = f"output ended inside message {self._message.code}"
            LOGGER.warning("%s %s", self.tool.display_name, detail)
            self._conditions.append(OutputCondition(kind=OutputConditionKind.TRUNCATED_OUTPUT, detail=detail))
            self._message = None
        trailing = list(self.handle_end())
        self._result = self.build_result()
        return [*trailing, ResultFinalized(tool=self.tool, result=self._result)]

    def finish(self) -> ResultT:
        """Close the stream and return the final aggregate, dropping trailing events."""

        self.close()
        return self.result

    async def events(self, stream: AsyncIterable[StreamChunk]) -> AsyncIterator[OutputEvent]:
        """Consume ``stream`` and yield events as lines arrive.

        The final event is always a :class:`ResultFinalized` carrying the
        aggregate returned by :meth:`finish`.

        Args:
            stream: Chunks (bytes or text) of the tool's standard output.

        Yields:
            OutputEvent: Decoded events in strict arrival order.

        Raises:
            ParserStateError: If the parser was already bound to a stream.
        """

        if self._started:
            raise ParserStateError(f"{self.tool.display_name} parser is single-use and cannot be restarted")
        self._started = True
        splitter = LineSplitter()
        async for chunk in stream:
            for line in splitter.feed(chunk):
                for event in self.feed_line(line):
                    yield event
        for line in splitter.flush():
            for event in self.feed_line(line):
                yield event
        for event in self.close():
            yield event

    async def read_all(self, stream: AsyncIterable[StreamChunk], sink: EventSink | None = None) -> ResultT:
        """Consume ``stream`` completely, forwarding events to ``sink``.

        Args:
            stream: Chunks of the tool's standard output.
            sink: Optional incremental consumer of events.

        Returns:
            ResultT: Final aggregate for the run.
        """

        async for event in self.events(stream):
            if sink is not None:
                sink(event)
        return self.result

    def handle_line(self, line: str) -> Iterable[OutputEvent]:
        """Handle a line outside of any sentinel block."""

        del line
        return ()

    def handle_end(self) -> Iterable[OutputEvent]:
        """Flush state pending at the end of the stream."""

        return ()

    @abstractmethod
    def handle_message(self, message: ParsedMessage) -> Iterable[OutputEvent]:
        """Handle a completed sentinel block."""

    @abstractmethod
    def build_result(self) -> ResultT:
        """Return the immutable aggregate once the stream has ended."""


__all__ = [
    "ANY_MARKER_RE",
    "END_MARKER_RE",
    "EventSink",
    "LineSink",
    "LineSplitter",
    "ParserState",
    "START_MARKER_RE",
    "StreamChunk",
    "StreamingOutputParser",
    "strip_markers",
]
