# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Core data models shared across the tlaqa package."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tlaqa.core.severity import Severity
from tlaqa.errors import SpecFileError

MODULE_SUFFIX: Final[str] = ".tla"
MODEL_SUFFIX: Final[str] = ".cfg"


class ToolKind(str, Enum):
    """Enumerate the external verification tools shipped in the tools archive."""

    TRANSPILER = "pluscal"
    ANALYZER = "sany"
    MODEL_CHECKER = "tlc"

    @property
    def main_class(self) -> str:
        """Return the Java entry point implementing the tool."""

        return _MAIN_CLASSES[self]

    @property
    def display_name(self) -> str:
        """Return the name shown to users in reports and errors."""

        return _DISPLAY_NAMES[self]


_MAIN_CLASSES: Final[dict[ToolKind, str]] = {
    ToolKind.TRANSPILER: "pcal.trans",
    ToolKind.ANALYZER: "tla2sany.SANY",
    ToolKind.MODEL_CHECKER: "tlc2.TLC",
}

_DISPLAY_NAMES: Final[dict[ToolKind, str]] = {
    ToolKind.TRANSPILER: "PlusCal",
    ToolKind.ANALYZER: "SANY",
    ToolKind.MODEL_CHECKER: "TLC",
}


class SpecFiles(BaseModel):
    """Pair a TLA+ module with the model configuration used to check it."""

    model_config = ConfigDict(frozen=True)

    tla_path: Path
    cfg_path: Path

    @field_validator("tla_path", "cfg_path", mode="after")
    @classmethod
    def _resolve(cls, value: Path) -> Path:
        """Return ``value`` as an absolute, resolved path.

        Args:
            value: Path supplied by the caller.

        Returns:
            Path: Resolved absolute path.
        """

        return value.expanduser().resolve()

    @classmethod
    def from_path(cls, path: Path) -> SpecFiles:
        """Locate the module/model pair for ``path``.

        A ``.tla`` module pairs with the sibling ``.cfg`` of the same stem and
        vice versa.

        Args:
            path: Either the module or the model file.

        Returns:
            SpecFiles: Resolved pair of files.

        Raises:
            SpecFileError: If the extension is unsupported or the counterpart
                file does not exist.
        """

        if path.suffix == MODULE_SUFFIX:
            tla_path, cfg_path = path, path.with_suffix(MODEL_SUFFIX)
            missing = cfg_path
        elif path.suffix == MODEL_SUFFIX:
            tla_path, cfg_path = path.with_suffix(MODULE_SUFFIX), path
            missing = tla_path
        else:
            raise SpecFileError(f"{path.name} is not a .tla or .cfg file, it cannot be checked as a model")
        if not missing.exists():
            kind = "TLA+ module" if missing is tla_path else "Model"
            raise SpecFileError(f"{kind} file {missing.name} doesn't exist. Cannot check model.")
        return cls(tla_path=tla_path, cfg_path=cfg_path)

    @classmethod
    def with_config(cls, tla_path: Path, cfg_path: Path) -> SpecFiles:
        """Pair ``tla_path`` with an explicitly chosen model file.

        Raises:
            SpecFileError: If either file does not exist.
        """

        for candidate in (tla_path, cfg_path):
            if not candidate.exists():
                raise SpecFileError(f"File {candidate.name} doesn't exist. Cannot check model.")
        return cls(tla_path=tla_path, cfg_path=cfg_path)

    @property
    def spec_dir(self) -> Path:
        """Return the directory tools are launched from."""

        return self.tla_path.parent


class SourcePosition(BaseModel):
    """Zero-based line/column position inside a source file."""

    model_config = ConfigDict(frozen=True)

    line: int = Field(ge=0)
    column: int = Field(ge=0)


class SourceRange(BaseModel):
    """Half-open span between two source positions."""

    model_config = ConfigDict(frozen=True)

    start: SourcePosition
    end: SourcePosition

    @classmethod
    def from_tool(cls, line: int, column: int, end_line: int | None = None, end_column: int | None = None) -> SourceRange:
        """Build a range from the 1-based coordinates printed by the tools.

        Args:
            line: 1-based start line.
            column: 1-based start column.
            end_line: Optional 1-based end line, defaults to ``line``.
            end_column: Optional 1-based inclusive end column.

        Returns:
            SourceRange: Zero-based range covering the reported span.
        """

        start = SourcePosition(line=max(line - 1, 0), column=max(column - 1, 0))
        if end_line is None or end_column is None:
            return cls(start=start, end=start)
        end = SourcePosition(line=max(end_line - 1, 0), column=max(end_column, 0))
        return cls(start=start, end=end)

    @classmethod
    def file_start(cls) -> SourceRange:
        """Return the empty range at the very beginning of a file."""

        origin = SourcePosition(line=0, column=0)
        return cls(start=origin, end=origin)


class DiagnosticRecord(BaseModel):
    """Single finding reported by a tool against a source file."""

    model_config = ConfigDict(frozen=True)

    file: str
    range: SourceRange
    severity: Severity
    text: str

    @property
    def identity(self) -> tuple[str, SourceRange, str]:
        """Return the ``(file, range, text)`` key used to detect duplicates."""

        return self.file, self.range, self.text


class ExitCategory(str, Enum):
    """Classify process exit statuses."""

    SUCCESS = "success"
    TOOL_REPORTED = "tool_reported"
    TOOLING_FAILURE = "tooling_failure"


@dataclass(frozen=True, slots=True)
class ParsedMessage:
    """Structured block decoded from a pair of sentinel markers."""

    code: int
    sub_code: int | None
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        """Return the buffered lines joined with newlines."""

        return "\n".join(self.lines)


class OutputConditionKind(str, Enum):
    """Non-fatal anomalies noticed while decoding a tool output stream."""

    PROTOCOL_VIOLATION = "protocol_violation"
    TRUNCATED_OUTPUT = "truncated_output"


class OutputCondition(BaseModel):
    """Warning attached to a final result describing a stream anomaly."""

    model_config = ConfigDict(frozen=True)

    kind: OutputConditionKind
    detail: str


DiagnosticMapping = Mapping[str, tuple[DiagnosticRecord, ...]]


class ParseResult(BaseModel):
    """Final aggregate produced by the transpiler and analyzer parsers."""

    model_config = ConfigDict(frozen=True)

    tool: ToolKind
    diagnostics: dict[str, tuple[DiagnosticRecord, ...]] = Field(default_factory=dict)
    modules: dict[str, str] = Field(default_factory=dict)
    conditions: tuple[OutputCondition, ...] = ()

    @property
    def truncated(self) -> bool:
        """Return whether the output stream ended inside an open message."""

        return any(item.kind is OutputConditionKind.TRUNCATED_OUTPUT for item in self.conditions)


__all__ = [
    "DiagnosticMapping",
    "DiagnosticRecord",
    "ExitCategory",
    "MODEL_SUFFIX",
    "MODULE_SUFFIX",
    "OutputCondition",
    "OutputConditionKind",
    "ParseResult",
    "ParsedMessage",
    "SourcePosition",
    "SourceRange",
    "SpecFiles",
    "ToolKind",
]
