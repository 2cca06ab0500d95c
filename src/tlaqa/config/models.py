# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Configuration models for the TLA+ tooling integration."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TOOLS_ARCHIVE: Final[Path] = Path(__file__).resolve().parents[1] / "tools" / "tla2tools.jar"
DEFAULT_DEBUGGER_DELAY: Final[float] = 2.0


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class Config(BaseModel):
    """Read-only settings consumed when building and running tool invocations."""

    model_config = ConfigDict(validate_assignment=True, extra="forbid")

    java_home: Path | None = None
    java_options: str = ""
    pluscal_options: str = ""
    tlc_options: str = ""
    create_out_files: bool = True
    tools_archive: Path = DEFAULT_TOOLS_ARCHIVE
    debugger_delay: float = Field(default=DEFAULT_DEBUGGER_DELAY, ge=0)

    @field_validator("java_home", mode="before")
    @classmethod
    def _blank_java_home(cls, value: Any) -> Any:
        """Treat an empty ``java_home`` string as unset.

        Args:
            value: Raw value supplied by a configuration source.

        Returns:
            Any: ``None`` for blank strings, otherwise ``value`` unchanged.
        """

        if isinstance(value, str) and not value.strip():
            return None
        return value

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible mapping of the configuration."""

        return self.model_dump(mode="json")


__all__ = ["Config", "ConfigError", "DEFAULT_DEBUGGER_DELAY", "DEFAULT_TOOLS_ARCHIVE"]
