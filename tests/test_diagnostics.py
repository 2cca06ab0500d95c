# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for diagnostic collections, merging and sink application."""

from __future__ import annotations

from tlaqa.core.models import DiagnosticRecord, SourceRange
from tlaqa.core.severity import Severity
from tlaqa.diagnostics import (
    DiagnosticCollection,
    DiagnosticSink,
    InMemoryDiagnosticSink,
    apply_collection,
    merge_collections,
)


def record(file: str, text: str, line: int = 1, severity: Severity = Severity.ERROR) -> DiagnosticRecord:
    return DiagnosticRecord(file=file, range=SourceRange.from_tool(line, 1), severity=severity, text=text)


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[dict[str, tuple[DiagnosticRecord, ...]]] = []

    def replace_all(self, diagnostics) -> None:
        self.calls.append(dict(diagnostics))


def test_add_deduplicates_on_file_range_and_text() -> None:
    collection = DiagnosticCollection()

    assert collection.add(record("a.tla", "x"))
    assert not collection.add(record("a.tla", "x", severity=Severity.WARNING))
    assert collection.add(record("a.tla", "x", line=2))
    assert len(collection) == 2


def test_registered_files_without_findings_are_kept() -> None:
    collection = DiagnosticCollection()
    collection.add_file("clean.tla")

    assert collection.to_mapping() == {"clean.tla": ()}
    assert not collection.has_errors()


def test_merge_preserves_order_and_duplicates() -> None:
    transpiler = DiagnosticCollection()
    transpiler.add(record("a.tla", "from pcal"))
    analyzer = DiagnosticCollection()
    analyzer.add(record("a.tla", "from pcal"))
    analyzer.add(record("b.tla", "from sany"))

    merged = merge_collections([transpiler, analyzer])

    assert [item.text for item in merged.records_for("a.tla")] == ["from pcal", "from pcal"]
    assert merged.files == ("a.tla", "b.tla")


def test_merge_of_nothing_is_empty() -> None:
    assert len(merge_collections([])) == 0


def test_apply_replaces_sink_contents_in_one_call() -> None:
    collection = DiagnosticCollection()
    collection.add(record("a.tla", "x"))
    collection.add_file("b.tla")
    sink = RecordingSink()

    apply_collection(collection, sink)

    assert sink.calls == [{"a.tla": (record("a.tla", "x"),), "b.tla": ()}]


def test_in_memory_sink_snapshot_is_read_only() -> None:
    sink = InMemoryDiagnosticSink()
    collection = DiagnosticCollection()
    collection.add(record("a.tla", "x"))

    apply_collection(collection, sink)
    apply_collection(DiagnosticCollection(), sink)

    assert dict(sink.snapshot) == {}
    assert sink.updates == 2
    assert isinstance(sink, DiagnosticSink)


def test_from_mapping_round_trips_duplicates() -> None:
    duplicated = (record("a.tla", "x"), record("a.tla", "x"))

    collection = DiagnosticCollection.from_mapping({"a.tla": duplicated})

    assert collection.records_for("a.tla") == duplicated
