# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Workflows driving the TLA+ tools end to end."""

from __future__ import annotations

from .context import ActiveCheck, CheckContext, CheckRequest
from .debugger import check_and_debug, debugger_args, pick_debugger_port
from .output_saver import OutputFileSaver, out_file_for
from .workflows import ParseOutcome, check_model, parse_module, run_last_check_again, stop_model_check

__all__ = [
    "ActiveCheck",
    "CheckContext",
    "CheckRequest",
    "OutputFileSaver",
    "ParseOutcome",
    "check_and_debug",
    "check_model",
    "debugger_args",
    "out_file_for",
    "parse_module",
    "pick_debugger_port",
    "run_last_check_again",
    "stop_model_check",
]
