# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for the sentinel protocol state machine shared by all parsers."""

from __future__ import annotations

import asyncio
from collections.abc import Iterable

import pytest

from tests.streams import chunk_stream, lines_to_bytes
from tlaqa.core.models import OutputConditionKind, ParsedMessage, ParseResult, ToolKind
from tlaqa.errors import ParserStateError
from tlaqa.parsers import (
    LineSink,
    LineSplitter,
    ParserState,
    ProgressUpdated,
    ResultFinalized,
    StreamingOutputParser,
    strip_markers,
)
from tlaqa.parsers.events import OutputEvent


class RecordingParser(StreamingOutputParser[ParseResult]):
    tool = ToolKind.MODEL_CHECKER

    def __init__(self, *, echo: LineSink | None = None) -> None:
        super().__init__(echo=echo)
        self.messages: list[ParsedMessage] = []
        self.passthrough: list[str] = []

    def handle_line(self, line: str) -> Iterable[OutputEvent]:
        self.passthrough.append(line)
        return ()

    def handle_message(self, message: ParsedMessage) -> Iterable[OutputEvent]:
        self.messages.append(message)
        return [ProgressUpdated(tool=self.tool, detail=message.text)]

    def build_result(self) -> ParseResult:
        return ParseResult(tool=self.tool, conditions=self.conditions)


def feed_all(parser: StreamingOutputParser, lines: list[str]) -> list[OutputEvent]:
    events: list[OutputEvent] = []
    for line in lines:
        events.extend(parser.feed_line(line))
    return events


def test_message_body_is_buffered_and_dispatched_on_end() -> None:
    parser = RecordingParser()

    feed_all(
        parser,
        [
            "banner",
            "@!@!@STARTMSG 2185:0 @!@!@",
            "Starting... (2024-01-01 10:00:00)",
            "@!@!@ENDMSG 2185 @!@!@",
        ],
    )

    assert parser.passthrough == ["banner"]
    assert parser.messages == [ParsedMessage(code=2185, sub_code=0, lines=("Starting... (2024-01-01 10:00:00)",))]
    assert parser.state is ParserState.PASSTHROUGH


def test_start_marker_without_sub_code() -> None:
    parser = RecordingParser()

    feed_all(parser, ["@!@!@STARTMSG 2262 @!@!@", "TLC2 Version 2.18", "@!@!@ENDMSG 2262 @!@!@"])

    assert parser.messages[0].sub_code is None
    assert parser.messages[0].code == 2262


def test_state_is_in_message_between_markers() -> None:
    parser = RecordingParser()

    parser.feed_line("@!@!@STARTMSG 2200:0 @!@!@")

    assert parser.state is ParserState.IN_MESSAGE


def test_unmatched_end_marker_is_discarded() -> None:
    parser = RecordingParser()

    events = feed_all(parser, ["@!@!@ENDMSG 2185 @!@!@", "after"])

    assert events == []
    assert parser.messages == []
    assert parser.passthrough == ["after"]
    assert parser.conditions == ()


def test_mismatched_end_marker_discards_message() -> None:
    parser = RecordingParser()

    feed_all(parser, ["@!@!@STARTMSG 2185:0 @!@!@", "body", "@!@!@ENDMSG 2186 @!@!@", "after"])

    assert parser.messages == []
    assert parser.state is ParserState.PASSTHROUGH
    assert parser.passthrough == ["after"]
    assert [item.kind for item in parser.conditions] == [OutputConditionKind.PROTOCOL_VIOLATION]


def test_nested_start_replaces_open_message() -> None:
    parser = RecordingParser()

    feed_all(
        parser,
        [
            "@!@!@STARTMSG 2185:0 @!@!@",
            "lost",
            "@!@!@STARTMSG 2186:0 @!@!@",
            "kept",
            "@!@!@ENDMSG 2186 @!@!@",
        ],
    )

    assert parser.messages == [ParsedMessage(code=2186, sub_code=0, lines=("kept",))]
    assert parser.conditions[0].kind is OutputConditionKind.PROTOCOL_VIOLATION


def test_truncated_stream_discards_partial_message() -> None:
    parser = RecordingParser()
    feed_all(parser, ["@!@!@STARTMSG 2200:0 @!@!@", "Progress(1) at ..."])

    trailing = parser.close()

    assert parser.messages == []
    assert isinstance(trailing[-1], ResultFinalized)
    assert parser.result.truncated


def test_echo_receives_non_sentinel_lines_with_markers_stripped() -> None:
    echoed: list[str] = []
    parser = RecordingParser(echo=echoed.append)

    feed_all(
        parser,
        [
            "plain",
            "",
            "@!@!@STARTMSG 2185:0 @!@!@",
            "inside @!@!@ENDMSG 1 @!@!@ text",
            "@!@!@ENDMSG 2185 @!@!@",
        ],
    )

    assert echoed == ["plain", "", "inside  text"]


def test_strip_markers_rules() -> None:
    assert strip_markers("") == ""
    assert strip_markers("@!@!@STARTMSG 2185:0 @!@!@") is None
    assert strip_markers("a @!@!@ENDMSG 2185 @!@!@") == "a "


def test_line_splitter_reassembles_chunks_and_multibyte_characters() -> None:
    splitter = LineSplitter()
    encoded = "ä line\r\nsecond".encode()

    lines = splitter.feed(encoded[:1]) + splitter.feed(encoded[1:])

    assert lines == ["ä line"]
    assert splitter.flush() == ["second"]


def test_parser_is_single_use() -> None:
    parser = RecordingParser()
    parser.finish()

    with pytest.raises(ParserStateError):
        parser.feed_line("late")
    with pytest.raises(ParserStateError):
        parser.close()


def test_result_unavailable_before_end() -> None:
    parser = RecordingParser()

    with pytest.raises(ParserStateError):
        _ = parser.result


def test_events_stream_in_order_and_end_with_result() -> None:
    parser = RecordingParser()
    payload = lines_to_bytes(
        [
            "@!@!@STARTMSG 2185:0 @!@!@",
            "one",
            "@!@!@ENDMSG 2185 @!@!@",
            "@!@!@STARTMSG 2186:0 @!@!@",
            "two",
            "@!@!@ENDMSG 2186 @!@!@",
        ],
    )
    chunks = [payload[index : index + 7] for index in range(0, len(payload), 7)]

    async def collect() -> list[OutputEvent]:
        return [event async for event in parser.events(chunk_stream(chunks))]

    events = asyncio.run(collect())

    assert [event.detail for event in events if isinstance(event, ProgressUpdated)] == ["one", "two"]
    assert isinstance(events[-1], ResultFinalized)
    assert sum(isinstance(event, ResultFinalized) for event in events) == 1


def test_events_cannot_be_restarted() -> None:
    parser = RecordingParser()

    async def run_twice() -> None:
        await parser.read_all(chunk_stream([b"x\n"]))
        await parser.read_all(chunk_stream([b"y\n"]))

    with pytest.raises(ParserStateError):
        asyncio.run(run_twice())


def test_truncation_keeps_every_event_before_the_cut() -> None:
    complete = [
        "@!@!@STARTMSG 2185:0 @!@!@",
        "one",
        "@!@!@ENDMSG 2185 @!@!@",
    ]
    cut = [*complete, "@!@!@STARTMSG 2186:0 @!@!@", "partial"]

    full_parser = RecordingParser()
    full_events = feed_all(full_parser, complete) + full_parser.close()
    cut_parser = RecordingParser()
    cut_events = feed_all(cut_parser, cut) + cut_parser.close()

    def without_result(events: list[OutputEvent]) -> list[OutputEvent]:
        return [event for event in events if not isinstance(event, ResultFinalized)]

    assert without_result(cut_events) == without_result(full_events)
    assert cut_parser.result.truncated
    assert not full_parser.result.truncated
