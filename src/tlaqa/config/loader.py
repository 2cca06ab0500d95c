# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Concrete configuration sources (defaults, TOML, pyproject, environment)."""

from __future__ import annotations

import os
import tomllib
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Final

from pydantic import ValidationError

from .models import Config, ConfigError

PYPROJECT_FILENAME: Final[str] = "pyproject.toml"
CONFIG_FILENAME: Final[str] = "tlaqa.toml"
PYPROJECT_TOOL_KEY: Final[str] = "tool"
PYPROJECT_SECTION_KEY: Final[str] = "tlaqa"

ENV_PREFIX: Final[str] = "TLAQA_"
ENV_KEYS: Final[tuple[str, ...]] = ("java_home", "java_options", "tools_archive")


class ConfigSource(ABC):
    """Produce a configuration fragment from a single origin."""

    name: str

    @abstractmethod
    def load(self) -> Mapping[str, Any]:
        """Return the raw fragment contributed by this source."""

    @abstractmethod
    def describe(self) -> str:
        """Return a human readable description used in error messages."""


def _normalise_keys(data: Mapping[str, Any]) -> dict[str, Any]:
    return {str(key).replace("-", "_"): value for key, value in data.items()}


class DefaultConfigSource(ConfigSource):
    """Return the built-in defaults as a configuration fragment."""

    name = "defaults"

    def load(self) -> Mapping[str, Any]:
        return Config().to_dict()

    def describe(self) -> str:
        return "Built-in defaults"


class TomlConfigSource(ConfigSource):
    """Load configuration data from a standalone TOML document."""

    def __init__(self, path: Path, *, name: str | None = None) -> None:
        self._path = path
        self.name = name or str(path)

    def _read(self) -> dict[str, Any]:
        if not self._path.is_file():
            return {}
        try:
            with self._path.open("rb") as handle:
                return tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{self.describe()} is not valid TOML: {exc}") from exc

    def load(self) -> Mapping[str, Any]:
        return _normalise_keys(self._read())

    def describe(self) -> str:
        return f"TOML configuration at {self.name}"


class PyProjectConfigSource(TomlConfigSource):
    """Read configuration from ``[tool.tlaqa]`` within ``pyproject.toml``."""

    def load(self) -> Mapping[str, Any]:
        tool_section = self._read().get(PYPROJECT_TOOL_KEY)
        if not isinstance(tool_section, Mapping):
            return {}
        section = tool_section.get(PYPROJECT_SECTION_KEY)
        if not isinstance(section, Mapping):
            return {}
        return _normalise_keys(section)

    def describe(self) -> str:
        return f"pyproject.toml ({self.name})"


class EnvironmentConfigSource(ConfigSource):
    """Read ``TLAQA_*`` overrides from the process environment."""

    name = "environment"

    def __init__(self, env: Mapping[str, str] | None = None) -> None:
        self._env = env if env is not None else os.environ

    def load(self) -> Mapping[str, Any]:
        fragment: dict[str, Any] = {}
        for key in ENV_KEYS:
            value = self._env.get(f"{ENV_PREFIX}{key.upper()}")
            if value is not None:
                fragment[key] = value
        return fragment

    def describe(self) -> str:
        return "environment variables"


class ConfigLoader:
    """Merge configuration fragments from every source into a :class:`Config`."""

    def __init__(self, sources: Sequence[ConfigSource]) -> None:
        self._sources = tuple(sources)

    @classmethod
    def for_root(
        cls,
        root: Path,
        *,
        config_file: Path | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ConfigLoader:
        """Return the default source chain for a project rooted at ``root``.

        Args:
            root: Directory searched for ``pyproject.toml`` and ``tlaqa.toml``.
            config_file: Explicit TOML file replacing ``tlaqa.toml``.
            env: Environment mapping, defaults to :data:`os.environ`.

        Returns:
            ConfigLoader: Loader applying defaults, files and environment in order.
        """

        return cls(
            [
                DefaultConfigSource(),
                PyProjectConfigSource(root / PYPROJECT_FILENAME),
                TomlConfigSource(config_file or root / CONFIG_FILENAME),
                EnvironmentConfigSource(env),
            ],
        )

    def load(self, overrides: Mapping[str, Any] | None = None) -> Config:
        """Return the merged configuration.

        Args:
            overrides: Final fragment applied on top of every source, usually
                populated from CLI flags. ``None`` values are ignored.

        Returns:
            Config: Validated configuration.

        Raises:
            ConfigError: If a source provides invalid data.
        """

        merged: dict[str, Any] = {}
        for source in self._sources:
            fragment = dict(source.load())
            self._validate(fragment, source.describe())
            merged.update(fragment)
        if overrides:
            merged.update({key: value for key, value in overrides.items() if value is not None})
        return self._validate(merged, "command line overrides")

    @staticmethod
    def _validate(fragment: Mapping[str, Any], origin: str) -> Config:
        try:
            return Config.model_validate(dict(fragment))
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration in {origin}: {exc}") from exc


__all__ = [
    "CONFIG_FILENAME",
    "ConfigLoader",
    "ConfigSource",
    "DefaultConfigSource",
    "EnvironmentConfigSource",
    "PyProjectConfigSource",
    "TomlConfigSource",
]
