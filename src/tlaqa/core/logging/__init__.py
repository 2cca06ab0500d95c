# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Shared logging helpers for user-facing console output."""

from __future__ import annotations

from .public import detect_tty, emoji, fail, get_console, info, ok, section, warn

__all__ = [
    "detect_tty",
    "emoji",
    "fail",
    "get_console",
    "info",
    "ok",
    "section",
    "warn",
]
