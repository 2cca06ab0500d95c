# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Configuration models and loaders."""

from __future__ import annotations

from .loader import ConfigLoader, ConfigSource, EnvironmentConfigSource, PyProjectConfigSource, TomlConfigSource
from .models import DEFAULT_DEBUGGER_DELAY, DEFAULT_TOOLS_ARCHIVE, Config, ConfigError

__all__ = [
    "Config",
    "ConfigError",
    "ConfigLoader",
    "ConfigSource",
    "DEFAULT_DEBUGGER_DELAY",
    "DEFAULT_TOOLS_ARCHIVE",
    "EnvironmentConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
]
