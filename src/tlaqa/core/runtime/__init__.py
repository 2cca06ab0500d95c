# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Process supervision primitives."""

from __future__ import annotations

from .process import (
    MIN_TOOLING_ERROR,
    NO_ERROR,
    READ_CHUNK_SIZE,
    ProcessExit,
    ProcessHandle,
    classify_exit_code,
    iter_chunks,
    spawn_process,
)

__all__ = [
    "MIN_TOOLING_ERROR",
    "NO_ERROR",
    "READ_CHUNK_SIZE",
    "ProcessExit",
    "ProcessHandle",
    "classify_exit_code",
    "iter_chunks",
    "spawn_process",
]
