# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Models describing the accumulated state of a model checking run."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from . import DiagnosticRecord, OutputCondition, OutputConditionKind


class CheckState(str, Enum):
    """Overall outcome of a model checking run."""

    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"
    STOPPED = "stopped"
    FATAL = "fatal"


class CheckStatus(str, Enum):
    """Phase the model checker reported most recently."""

    NOT_STARTED = "not_started"
    SANY_PARSING = "sany_parsing"
    SANY_FINISHED = "sany_finished"
    STARTING = "starting"
    INITIAL_STATES_COMPUTING = "initial_states_computing"
    CHECKING = "checking"
    CHECKING_LIVENESS = "checking_liveness"
    FINISHED = "finished"


class InitialStateStat(BaseModel):
    """Snapshot of the state-space exploration counters."""

    model_config = ConfigDict(frozen=True)

    time_stamp: str
    diameter: int
    generated: int
    distinct: int
    left: int


class CoverageItem(BaseModel):
    """Coverage counters reported for an action of the specification."""

    model_config = ConfigDict(frozen=True)

    module: str
    action: str
    location: str
    total: int
    distinct: int


class ErrorInfo(BaseModel):
    """Error message reported by the model checker."""

    model_config = ConfigDict(frozen=True)

    code: int
    lines: tuple[str, ...]


class TraceState(BaseModel):
    """One state of an error trace."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    variables: tuple[str, ...] = ()


class ModelCheckResult(BaseModel):
    """Immutable view of everything learned from a model checker output stream."""

    model_config = ConfigDict(frozen=True)

    spec_path: str | None = None
    state: CheckState = CheckState.RUNNING
    status: CheckStatus = CheckStatus.NOT_STARTED
    mode: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration: str | None = None
    initial_state_stats: tuple[InitialStateStat, ...] = ()
    final_stats: InitialStateStat | None = None
    coverage: tuple[CoverageItem, ...] = ()
    errors: tuple[ErrorInfo, ...] = ()
    error_trace: tuple[TraceState, ...] = ()
    warnings: tuple[str, ...] = ()
    fingerprint_collision_probability: str | None = None
    diagnostics: dict[str, tuple[DiagnosticRecord, ...]] = Field(default_factory=dict)
    conditions: tuple[OutputCondition, ...] = ()

    @property
    def truncated(self) -> bool:
        """Return whether the output stream ended inside an open message."""

        return any(item.kind is OutputConditionKind.TRUNCATED_OUTPUT for item in self.conditions)

    @property
    def finished(self) -> bool:
        """Return whether the run reached a terminal state."""

        return self.state is not CheckState.RUNNING


__all__ = [
    "CheckState",
    "CheckStatus",
    "CoverageItem",
    "ErrorInfo",
    "InitialStateStat",
    "ModelCheckResult",
    "TraceState",
]
