# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Rich rendering of tool output, diagnostics and model checking results."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.models import DiagnosticMapping, DiagnosticRecord
from ..core.models.check import CheckState, CheckStatus, ModelCheckResult
from ..core.severity import Severity, severity_rank
from ..parsers.events import OutputEvent, ProgressUpdated

STATUS_LABELS: Final[dict[CheckStatus, str]] = {
    CheckStatus.NOT_STARTED: "Not started",
    CheckStatus.SANY_PARSING: "Parsing specification",
    CheckStatus.SANY_FINISHED: "Specification parsed",
    CheckStatus.STARTING: "Starting",
    CheckStatus.INITIAL_STATES_COMPUTING: "Computing initial states",
    CheckStatus.CHECKING: "Checking",
    CheckStatus.CHECKING_LIVENESS: "Checking liveness",
    CheckStatus.FINISHED: "Finished",
}

STATE_STYLES: Final[dict[CheckState, str]] = {
    CheckState.RUNNING: "cyan",
    CheckState.SUCCESS: "green",
    CheckState.ERROR: "red",
    CheckState.STOPPED: "yellow",
    CheckState.FATAL: "bold red",
}


def severity_color(severity: Severity) -> str:
    """Return the rich colour name associated with a severity level."""

    return {
        Severity.ERROR: "red",
        Severity.WARNING: "yellow",
        Severity.INFORMATION: "blue",
        Severity.HINT: "cyan",
    }.get(severity, "yellow")


def format_location(record: DiagnosticRecord) -> str:
    """Return ``file:line:column`` using 1-based coordinates."""

    start = record.range.start
    return f"{record.file}:{start.line + 1}:{start.column + 1}"


@dataclass(slots=True)
class ConsoleEcho:
    """Line sink printing the cleaned raw tool output verbatim."""

    console: Console

    def __call__(self, line: str) -> None:
        self.console.print(Text(line), soft_wrap=True)


@dataclass(slots=True)
class ProgressPrinter:
    """Event sink announcing model checker phase changes as they happen."""

    console: Console
    use_color: bool = True
    _last_status: CheckStatus | None = field(default=None, init=False)

    def __call__(self, event: OutputEvent) -> None:
        if not isinstance(event, ProgressUpdated) or event.snapshot is None:
            return
        snapshot = event.snapshot
        if snapshot.status is self._last_status:
            return
        self._last_status = snapshot.status
        text = Text(f"» {STATUS_LABELS[snapshot.status]}")
        if self.use_color:
            text.stylize("cyan")
        self.console.print(text)


def render_diagnostics(diagnostics: DiagnosticMapping, console: Console, *, use_color: bool) -> int:
    """Print every diagnostic sorted by severity then location.

    Returns:
        int: Number of diagnostics rendered.
    """

    records = [record for items in diagnostics.values() for record in items]
    if not records:
        return 0
    records.sort(key=lambda item: (-severity_rank(item.severity), item.file, item.range.start.line))
    table = Table(box=box.SIMPLE, show_header=True, expand=False, pad_edge=False)
    table.add_column("Location", no_wrap=True)
    table.add_column("Severity", no_wrap=True)
    table.add_column("Message", overflow="fold")
    for record in records:
        style = severity_color(record.severity) if use_color else None
        table.add_row(format_location(record), Text(record.severity.value, style=style or ""), record.text)
    console.print(table)
    return len(records)


def render_check_result(result: ModelCheckResult, console: Console, *, use_color: bool) -> None:
    """Print a summary panel for a finished model check."""

    table = Table(show_header=False, box=box.SIMPLE, pad_edge=False, expand=False)
    table.add_column(style="yellow" if use_color else None, no_wrap=True)
    table.add_column(no_wrap=True)
    table.add_row("Status", STATUS_LABELS[result.status])
    if result.mode:
        table.add_row("Mode", result.mode)
    if result.start_time:
        table.add_row("Started", result.start_time)
    if result.duration:
        table.add_row("Duration", result.duration)
    stats = result.final_stats or (result.initial_state_stats[-1] if result.initial_state_stats else None)
    if stats is not None:
        table.add_row("Diameter", str(stats.diameter))
        table.add_row("States found", f"{stats.generated:,}")
        table.add_row("Distinct states", f"{stats.distinct:,}")
        table.add_row("Queue size", f"{stats.left:,}")
    if result.fingerprint_collision_probability:
        table.add_row("Fingerprint collision", result.fingerprint_collision_probability)
    for condition in result.conditions:
        table.add_row("Output warning", condition.detail)
    border = STATE_STYLES[result.state] if use_color else "none"
    console.print(Panel(table, title=f"TLC: {result.state.value}", border_style=border, expand=False))
    for error in result.errors:
        console.print(Text("\n".join(error.lines), style="red" if use_color else ""))
    for warning in result.warnings:
        console.print(Text(warning, style="yellow" if use_color else ""))
    if result.error_trace:
        trace = Table(title="Error trace", box=box.SIMPLE, expand=False)
        trace.add_column("#", justify="right")
        trace.add_column("Action")
        trace.add_column("Variables", overflow="fold")
        for state in result.error_trace:
            trace.add_row(str(state.number), state.title, "\n".join(state.variables))
        console.print(trace)


__all__ = [
    "ConsoleEcho",
    "ProgressPrinter",
    "format_location",
    "render_check_result",
    "render_diagnostics",
    "severity_color",
]
