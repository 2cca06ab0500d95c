# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for locating and probing the Java runtime."""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from tlaqa.errors import ToolingUnavailableError
from tlaqa.tooling import java
from tlaqa.tooling.java import JavaExecutableCache, JavaVersion, build_java_path, parse_java_version


@pytest.mark.parametrize(
    ("output", "version", "major"),
    [
        (['java version "1.8.0_292"', "Java(TM) SE Runtime Environment"], "1.8.0_292", 8),
        (['openjdk version "17.0.1" 2021-10-19', "OpenJDK Runtime Environment"], "17.0.1", 17),
        (['openjdk version "21" 2023-09-19'], "21", 21),
        (["Error: could not find java.dll"], "?", None),
    ],
)
def test_parse_java_version(output: list[str], version: str, major: int | None) -> None:
    parsed = parse_java_version(output)

    assert parsed.version == version
    assert parsed.major == major
    assert parsed.full_output == tuple(output)


def test_supported_versions() -> None:
    assert JavaVersion("1.8.0", ()).supported
    assert JavaVersion("11.0.2", ()).supported
    assert not JavaVersion("1.7.0_80", ()).supported
    assert not JavaVersion("?", ()).supported


def test_java_home_without_executable(tmp_path: Path) -> None:
    with pytest.raises(ToolingUnavailableError, match="Java Home"):
        build_java_path(tmp_path)


def test_java_home_with_executable(tmp_path: Path) -> None:
    executable = tmp_path / "bin" / java.JAVA_CMD
    executable.parent.mkdir()
    executable.write_text("", encoding="utf-8")

    assert build_java_path(tmp_path) == executable


def test_missing_java_on_path(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(java.shutil, "which", lambda _name: None)

    with pytest.raises(ToolingUnavailableError, match="PATH"):
        build_java_path(None)


class ProbeRecorder:
    def __init__(self, version: str) -> None:
        self.version = version
        self.probed: list[Path] = []

    async def __call__(self, java_path: Path) -> JavaVersion:
        self.probed.append(java_path)
        return JavaVersion(self.version, (f'openjdk version "{self.version}"',))


@pytest.fixture
def probe(monkeypatch: pytest.MonkeyPatch) -> ProbeRecorder:
    recorder = ProbeRecorder("17.0.1")
    monkeypatch.setattr(java, "probe_java_version", recorder)
    monkeypatch.setattr(java, "build_java_path", lambda home: (home or Path("/usr")) / "bin" / "java")
    return recorder


def test_cache_probes_once_per_java_home(probe: ProbeRecorder) -> None:
    cache = JavaExecutableCache()

    async def resolve_all() -> list[Path]:
        return [
            await cache.resolve(None),
            await cache.resolve(None),
            await cache.resolve(Path("/opt/jdk")),
        ]

    paths = asyncio.run(resolve_all())

    assert paths == [Path("/usr/bin/java"), Path("/usr/bin/java"), Path("/opt/jdk/bin/java")]
    assert probe.probed == [Path("/usr/bin/java"), Path("/opt/jdk/bin/java")]
    assert cache.version is not None
    assert cache.version.major == 17


def test_cache_rejects_unknown_version(probe: ProbeRecorder) -> None:
    probe.version = "?"
    cache = JavaExecutableCache()

    with pytest.raises(ToolingUnavailableError, match="Java version"):
        asyncio.run(cache.resolve(None))
    assert cache.version is None


def test_cache_warns_about_old_runtime(probe: ProbeRecorder) -> None:
    probe.version = "1.7.0_80"
    warnings: list[str] = []
    cache = JavaExecutableCache(warn=warnings.append)

    path = asyncio.run(cache.resolve(None))

    assert path == Path("/usr/bin/java")
    assert warnings == ["Unexpected Java version: 1.7.0_80"]
