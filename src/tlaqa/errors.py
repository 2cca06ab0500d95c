# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exception hierarchy raised by the TLA+ tooling integration."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .execution.context import ActiveCheck


class TlaToolingError(RuntimeError):
    """Base class for failures that terminate a tool run."""


class ToolingUnavailableError(TlaToolingError):
    """Raised when Java or the tools archive is missing or unusable."""


class ProcessSpawnError(TlaToolingError):
    """Raised when the operating system refuses to start a tool process."""

    def __init__(self, executable: str, reason: str) -> None:
        """Initialise the error with the executable that failed to start.

        Args:
            executable: Path of the executable passed to the OS.
            reason: Human readable description of the OS failure.
        """

        super().__init__(f"Cannot start '{executable}': {reason}")
        self.executable = executable
        self.reason = reason


class ToolingFailureError(TlaToolingError):
    """Raised when a tool exits with a tooling-level status (10 and above)."""

    def __init__(self, tool: str, returncode: int, stderr: Sequence[str]) -> None:
        """Initialise the error with the captured stderr report.

        Args:
            tool: Display name of the tool that failed.
            returncode: Exit status reported by the process.
            stderr: Lines captured from the process standard error stream.
        """

        details = "\n".join(stderr)
        message = f"Error running {tool} (exit code {returncode})"
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)
        self.tool = tool
        self.returncode = returncode
        self.stderr = tuple(stderr)


class CheckAlreadyRunningError(TlaToolingError):
    """Raised when a model check is requested while another one is in flight."""

    def __init__(self, active: ActiveCheck) -> None:
        """Initialise the error with a reference to the running check.

        Args:
            active: Handle of the model check currently occupying the slot.
        """

        super().__init__("Another model checking process is currently running")
        self.active = active


class SpecFileError(TlaToolingError):
    """Raised when the module or model file of a specification cannot be found."""


class ParserStateError(RuntimeError):
    """Raised when a single-use output parser is consumed more than once."""


__all__ = [
    "CheckAlreadyRunningError",
    "ParserStateError",
    "ProcessSpawnError",
    "SpecFileError",
    "TlaToolingError",
    "ToolingFailureError",
    "ToolingUnavailableError",
]
