# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Diagnostic collections, merging and atomic application to a sink."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from threading import Lock
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from ..core.models import DiagnosticMapping, DiagnosticRecord, SourceRange
from ..core.severity import Severity


class DiagnosticCollection:
    """Per-file ordered sets of diagnostics produced by one check or parse.

    Files registered without findings are kept so that applying the
    collection clears stale diagnostics previously reported for them.
    """

    def __init__(self) -> None:
        self._records: dict[str, list[DiagnosticRecord]] = {}
        self._seen: set[tuple[str, SourceRange, str]] = set()

    @classmethod
    def from_mapping(cls, mapping: DiagnosticMapping) -> DiagnosticCollection:
        """Rebuild a collection from a frozen ``file -> records`` mapping."""

        collection = cls()
        for file, records in mapping.items():
            collection.add_file(file)
            for record in records:
                collection._append(record)
        return collection

    def add_file(self, file: str) -> None:
        """Register ``file`` as checked, even when it has no diagnostics."""

        self._records.setdefault(file, [])

    def add(self, record: DiagnosticRecord) -> bool:
        """Add ``record`` unless an identical ``(file, range, text)`` is present.

        Args:
            record: Diagnostic to add.

        Returns:
            bool: ``True`` when the record was new.
        """

        if record.identity in self._seen:
            return False
        self._append(record)
        return True

    def _append(self, record: DiagnosticRecord) -> None:
        self._seen.add(record.identity)
        self._records.setdefault(record.file, []).append(record)

    def extend(self, other: DiagnosticCollection) -> None:
        """Append every file and record of ``other`` keeping duplicates."""

        for file, records in other.items():
            self.add_file(file)
            for record in records:
                self._append(record)

    @property
    def files(self) -> tuple[str, ...]:
        """Return registered files in insertion order."""

        return tuple(self._records)

    def items(self) -> Iterator[tuple[str, tuple[DiagnosticRecord, ...]]]:
        """Yield ``(file, records)`` pairs in insertion order."""

        for file, records in self._records.items():
            yield file, tuple(records)

    def records_for(self, file: str) -> tuple[DiagnosticRecord, ...]:
        """Return diagnostics registered for ``file``."""

        return tuple(self._records.get(file, ()))

    def __iter__(self) -> Iterator[DiagnosticRecord]:
        for records in self._records.values():
            yield from records

    def __len__(self) -> int:
        return sum(len(records) for records in self._records.values())

    def has_errors(self) -> bool:
        """Return whether any diagnostic carries :attr:`Severity.ERROR`."""

        return any(record.severity is Severity.ERROR for record in self)

    def to_mapping(self) -> dict[str, tuple[DiagnosticRecord, ...]]:
        """Return an immutable snapshot keyed by file."""

        return dict(self.items())


def merge_collections(collections: Iterable[DiagnosticCollection]) -> DiagnosticCollection:
    """Concatenate ``collections`` in call order without deduplication.

    Duplicate records coming from independent tool runs are preserved since
    they represent independent findings.

    Args:
        collections: Collections to merge, applied in iteration order.

    Returns:
        DiagnosticCollection: New collection holding every record.
    """

    merged = DiagnosticCollection()
    for collection in collections:
        merged.extend(collection)
    return merged


@runtime_checkable
class DiagnosticSink(Protocol):
    """External consumer of diagnostics, such as an editor problem list."""

    def replace_all(self, diagnostics: DiagnosticMapping) -> None:
        """Replace every diagnostic held by the sink with ``diagnostics``."""


def apply_collection(collection: DiagnosticCollection, sink: DiagnosticSink) -> None:
    """Apply ``collection`` to ``sink`` in a single replacement call.

    The complete snapshot is built before the sink is touched so partial
    application is never observable.

    Args:
        collection: Diagnostics to publish.
        sink: Consumer receiving the snapshot.
    """

    sink.replace_all(collection.to_mapping())


class InMemoryDiagnosticSink:
    """Thread-safe sink keeping the latest snapshot in memory."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._snapshot: Mapping[str, tuple[DiagnosticRecord, ...]] = MappingProxyType({})
        self.updates = 0

    def replace_all(self, diagnostics: DiagnosticMapping) -> None:
        snapshot = MappingProxyType(dict(diagnostics))
        with self._lock:
            self._snapshot = snapshot
            self.updates += 1

    @property
    def snapshot(self) -> Mapping[str, tuple[DiagnosticRecord, ...]]:
        """Return the most recently applied diagnostics."""

        with self._lock:
            return self._snapshot


__all__ = [
    "DiagnosticCollection",
    "DiagnosticSink",
    "InMemoryDiagnosticSink",
    "apply_collection",
    "merge_collections",
]
