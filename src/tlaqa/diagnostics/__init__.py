# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Diagnostics package exposing collection, merge and sink helpers."""

from __future__ import annotations

from .core import (
    DiagnosticCollection,
    DiagnosticSink,
    InMemoryDiagnosticSink,
    apply_collection,
    merge_collections,
)

__all__ = (
    "DiagnosticCollection",
    "DiagnosticSink",
    "InMemoryDiagnosticSink",
    "apply_collection",
    "merge_collections",
)
