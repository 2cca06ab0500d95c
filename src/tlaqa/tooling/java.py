# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Locate the Java runtime used to launch the TLA+ tools."""

from __future__ import annotations

import logging
import re
import shutil
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Final

from tlaqa.core.runtime.process import spawn_process
from tlaqa.errors import ToolingUnavailableError

LOGGER = logging.getLogger(__name__)

JAVA_CMD: Final[str] = "java.exe" if sys.platform == "win32" else "java"
LOWEST_JAVA_VERSION: Final[int] = 8
UNKNOWN_VERSION: Final[str] = "?"
_VERSION_RE: Final[re.Pattern[str]] = re.compile(r'version "([^"]+)"')
_MAJOR_RE: Final[re.Pattern[str]] = re.compile(r"^(\d+)")


@dataclass(frozen=True, slots=True)
class JavaVersion:
    """Version reported by ``java -version`` along with the raw output."""

    version: str
    full_output: tuple[str, ...]

    @property
    def major(self) -> int | None:
        """Return the major version number, treating ``1.x`` as ``x``."""

        number = self.version[2:] if self.version.startswith("1.") else self.version
        match = _MAJOR_RE.match(number)
        return int(match.group(1)) if match else None

    @property
    def supported(self) -> bool:
        """Return whether the runtime meets :data:`LOWEST_JAVA_VERSION`."""

        major = self.major
        return major is not None and major >= LOWEST_JAVA_VERSION


def parse_java_version(lines: Sequence[str]) -> JavaVersion:
    """Extract the quoted version from ``java -version`` output.

    Args:
        lines: Lines printed by the probe (the JVM writes them to stderr).

    Returns:
        JavaVersion: Parsed version, :data:`UNKNOWN_VERSION` when absent.
    """

    for line in lines:
        match = _VERSION_RE.search(line)
        if match:
            return JavaVersion(version=match.group(1), full_output=tuple(lines))
    return JavaVersion(version=UNKNOWN_VERSION, full_output=tuple(lines))


def build_java_path(java_home: Path | None) -> Path:
    """Return the Java executable for ``java_home`` or from ``PATH``.

    Raises:
        ToolingUnavailableError: If no executable can be found.
    """

    if java_home is not None:
        java_path = java_home.expanduser() / "bin" / JAVA_CMD
        if not java_path.exists():
            raise ToolingUnavailableError("Java executable not found. Check the Java Home configuration property.")
        return java_path
    resolved = shutil.which(JAVA_CMD)
    if resolved is None:
        raise ToolingUnavailableError(f"'{JAVA_CMD}' was not found on PATH. Install Java or configure Java Home.")
    return Path(resolved)


async def probe_java_version(java_path: Path) -> JavaVersion:
    """Run ``java -version`` and parse the reported version.

    Args:
        java_path: Executable to probe.

    Returns:
        JavaVersion: Version reported by the runtime.
    """

    handle = await spawn_process(java_path, ["-version"])
    stdout = b"".join([chunk async for chunk in handle.stdout]).decode(errors="replace").splitlines()
    exit_info = await handle.wait()
    return parse_java_version([*exit_info.stderr, *stdout])


class JavaExecutableCache:
    """Cache the resolved Java executable keyed by the ``java_home`` setting."""

    def __init__(self, *, warn: Callable[[str], None] | None = None) -> None:
        """Create an empty cache.

        Args:
            warn: Callback receiving the unsupported-version warning.
        """

        self._key: Path | None = None
        self._path: Path | None = None
        self._version: JavaVersion | None = None
        self._warn = warn

    @property
    def version(self) -> JavaVersion | None:
        """Return the version found by the last successful probe."""

        return self._version

    def invalidate(self) -> None:
        """Forget the cached executable."""

        self._key = None
        self._path = None
        self._version = None

    async def resolve(self, java_home: Path | None) -> Path:
        """Return the Java executable for ``java_home``, probing it on a cache miss.

        Args:
            java_home: Configured Java home, ``None`` to search ``PATH``.

        Returns:
            Path: Executable path.

        Raises:
            ToolingUnavailableError: If Java is missing or its version is unknown.
        """

        if self._path is not None and self._key == java_home:
            return self._path
        self.invalidate()
        java_path = build_java_path(java_home)
        version = await probe_java_version(java_path)
        if version.version == UNKNOWN_VERSION:
            for line in version.full_output:
                LOGGER.debug("java -version: %s", line)
            raise ToolingUnavailableError(
                "Error while obtaining Java version. Check the Java Home configuration property.",
            )
        if not version.supported and self._warn is not None:
            self._warn(f"Unexpected Java version: {version.version}")
        self._key = java_home
        self._path = java_path
        self._version = version
        return java_path


__all__ = [
    "JAVA_CMD",
    "JavaExecutableCache",
    "JavaVersion",
    "LOWEST_JAVA_VERSION",
    "UNKNOWN_VERSION",
    "build_java_path",
    "parse_java_version",
    "probe_java_version",
]
