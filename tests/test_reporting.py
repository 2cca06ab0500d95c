# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for console rendering of diagnostics and check results."""

from __future__ import annotations

from rich.console import Console

from tlaqa.core.models import DiagnosticRecord, SourceRange, ToolKind
from tlaqa.core.models.check import CheckState, CheckStatus, ModelCheckResult, TraceState
from tlaqa.core.severity import Severity
from tlaqa.parsers import DiagnosticAdded, ProgressUpdated
from tlaqa.reporting import ConsoleEcho, ProgressPrinter, format_location, render_check_result, render_diagnostics


def recording_console() -> Console:
    return Console(record=True, width=200, color_system=None)


def record(line: int, severity: Severity, text: str) -> DiagnosticRecord:
    return DiagnosticRecord(file="Spec.tla", range=SourceRange.from_tool(line, 2), severity=severity, text=text)


def test_format_location_is_one_based() -> None:
    assert format_location(record(4, Severity.ERROR, "x")) == "Spec.tla:4:2"


def test_diagnostics_are_sorted_by_severity() -> None:
    console = recording_console()
    warning = record(1, Severity.WARNING, "shadowed name")
    error = record(9, Severity.ERROR, "unknown operator")

    count = render_diagnostics({"Spec.tla": (warning, error)}, console, use_color=False)

    output = console.export_text()
    assert count == 2
    assert output.index("unknown operator") < output.index("shadowed name")


def test_no_diagnostics_prints_nothing() -> None:
    console = recording_console()

    assert render_diagnostics({"Spec.tla": ()}, console, use_color=False) == 0
    assert console.export_text() == ""


def test_progress_printer_announces_status_changes_once() -> None:
    console = recording_console()
    printer = ProgressPrinter(console, use_color=False)
    checking = ModelCheckResult(status=CheckStatus.CHECKING)

    printer(ProgressUpdated(tool=ToolKind.MODEL_CHECKER, detail="a", snapshot=checking))
    printer(ProgressUpdated(tool=ToolKind.MODEL_CHECKER, detail="b", snapshot=checking))
    printer(DiagnosticAdded(tool=ToolKind.MODEL_CHECKER, record=record(1, Severity.ERROR, "x")))
    finished = checking.model_copy(update={"status": CheckStatus.FINISHED})
    printer(ProgressUpdated(tool=ToolKind.MODEL_CHECKER, detail="c", snapshot=finished))

    assert console.export_text().splitlines() == ["» Checking", "» Finished"]


def test_check_result_panel_includes_trace() -> None:
    console = recording_console()
    result = ModelCheckResult(
        state=CheckState.ERROR,
        status=CheckStatus.FINISHED,
        duration="02s",
        error_trace=(TraceState(number=1, title="<Initial predicate>", variables=("x = 0",)),),
    )

    render_check_result(result, console, use_color=False)

    output = console.export_text()
    assert "TLC: error" in output
    assert "02s" in output
    assert "<Initial predicate>" in output
    assert "x = 0" in output


def test_console_echo_prints_lines_verbatim() -> None:
    console = recording_console()

    ConsoleEcho(console)("[bold]not markup[/bold]")

    assert console.export_text() == "[bold]not markup[/bold]\n"
