# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Tests for Java and tool argument vectors."""

from __future__ import annotations

import pytest

from tlaqa.core.models import ToolKind
from tlaqa.tooling.arguments import (
    DEFAULT_GC_ARG,
    build_java_args,
    build_pluscal_args,
    build_sany_args,
    build_tlc_args,
    build_tool_args,
    classpath_references,
    substitute_variables,
)

SEP = ":"


def test_pluscal_args_without_custom_options() -> None:
    assert build_pluscal_args("/path/to/module.tla", []) == ["module.tla"]


def test_pluscal_custom_options_precede_module() -> None:
    assert build_pluscal_args("/path/to/module.tla", ["-lineWidth", "100", "-nocfg"]) == [
        "-lineWidth",
        "100",
        "-nocfg",
        "module.tla",
    ]


def test_sany_args_are_just_the_module_basename() -> None:
    assert build_sany_args("/path/to/module.tla") == ["module.tla"]


def test_tlc_default_args() -> None:
    assert build_tlc_args("/path/to/module.tla", "/path/to/module.cfg", []) == [
        "module.tla",
        "-tool",
        "-modelcheck",
        "-config",
        "/path/to/module.cfg",
    ]


def test_tlc_custom_args_follow_defaults() -> None:
    args = build_tlc_args("/path/to/module.tla", "/path/to/module.cfg", ["-deadlock", "-checkpoint", "5"])

    assert args == [
        "module.tla",
        "-tool",
        "-modelcheck",
        "-config",
        "/path/to/module.cfg",
        "-deadlock",
        "-checkpoint",
        "5",
    ]


def test_tlc_config_override_replaces_default() -> None:
    args = build_tlc_args(
        "/path/to/module.tla",
        "/path/to/module.cfg",
        ["-deadlock", "-config", "/path/to/another.cfg", "-nowarning"],
    )

    assert args == [
        "module.tla",
        "-tool",
        "-modelcheck",
        "-config",
        "/path/to/another.cfg",
        "-deadlock",
        "-nowarning",
    ]
    assert args.count("-config") == 1


def test_tlc_dangling_config_flag_is_kept_verbatim() -> None:
    args = build_tlc_args("/p/m.tla", "/p/m.cfg", ["-deadlock", "-config"])

    assert args == ["m.tla", "-tool", "-modelcheck", "-config", "/p/m.cfg", "-deadlock", "-config"]


@pytest.mark.parametrize(
    ("user_arg", "expected"),
    [
        ("${specName}.dot", "foo.dot"),
        ("${modelName}.dot", "bar.dot"),
        ("${specName}", "foo"),
        ("plain", "plain"),
    ],
)
def test_tlc_variable_substitution(user_arg: str, expected: str) -> None:
    args = build_tlc_args("/path/to/foo.tla", "/path/to/bar.cfg", ["-dump", "dot", user_arg])

    assert args[-3:] == ["-dump", "dot", expected]


def test_substitute_variables_handles_windows_paths() -> None:
    result = substitute_variables(
        "${specName}-${modelName}",
        spec_path="C:\\specs\\foo.tla",
        config_path="C:\\specs\\bar.cfg",
    )

    assert result == "foo-bar"


def test_build_tool_args_dispatches_and_sany_ignores_user_args() -> None:
    assert build_tool_args(ToolKind.ANALYZER, "/a/m.tla", "/a/m.cfg", ["-x"]) == ["m.tla"]
    assert build_tool_args(ToolKind.TRANSPILER, "/a/m.tla", "/a/m.cfg", ["-x"]) == ["-x", "m.tla"]
    assert build_tool_args(ToolKind.MODEL_CHECKER, "/a/m.tla", "/a/m.cfg")[0] == "m.tla"


def test_java_args_default_classpath_and_gc() -> None:
    assert build_java_args([], "/path/tla2tools.jar", separator=SEP) == ["-cp", "/path/tla2tools.jar", DEFAULT_GC_ARG]


def test_java_args_keep_custom_options_first() -> None:
    assert build_java_args(["-Xmx2048M", "-Xms512M"], "/path/to/tla2tools.jar", separator=SEP) == [
        "-Xmx2048M",
        "-Xms512M",
        "-cp",
        "/path/to/tla2tools.jar",
        DEFAULT_GC_ARG,
    ]


def test_java_args_respect_user_gc() -> None:
    args = build_java_args(["-Xmx2048M", "-XX:+UseG1GC", "-Xms512M"], "/path/to/tla2tools.jar", separator=SEP)

    assert args == ["-Xmx2048M", "-XX:+UseG1GC", "-Xms512M", "-cp", "/path/to/tla2tools.jar"]


@pytest.mark.parametrize("flag", ["-cp", "-classpath"])
def test_java_args_merge_archive_into_user_classpath(flag: str) -> None:
    args = build_java_args([flag, f"Foo.jar{SEP}Bar.jar"], "/default/tla2tools.jar", separator=SEP)

    assert args == [flag, f"Foo.jar{SEP}Bar.jar{SEP}/default/tla2tools.jar", DEFAULT_GC_ARG]


def test_java_args_keep_custom_archive_reference() -> None:
    classpath = f"Foo.jar{SEP}/custom/tla2tools.jar{SEP}Bar.jar"

    assert build_java_args(["-cp", classpath], "/default/tla2tools.jar", separator=SEP) == [
        "-cp",
        classpath,
        DEFAULT_GC_ARG,
    ]


def test_java_args_merge_with_many_options() -> None:
    args = build_java_args(
        ["-Xmx2048M", "-classpath", f"Foo.jar{SEP}Baz.jar", "-XX:+UseG1GC"],
        "/default/tla2tools.jar",
        separator=SEP,
    )

    assert args == ["-Xmx2048M", "-classpath", f"Foo.jar{SEP}Baz.jar{SEP}/default/tla2tools.jar", "-XX:+UseG1GC"]


def test_java_args_similar_library_name_is_not_the_archive() -> None:
    args = build_java_args(["-cp", "not_tla2tools.jar"], "/default/tla2tools.jar", separator=SEP)

    assert args == ["-cp", f"not_tla2tools.jar{SEP}/default/tla2tools.jar", DEFAULT_GC_ARG]


def test_java_args_bare_archive_name_counts_as_reference() -> None:
    assert build_java_args(["-cp", "tla2tools.jar"], "/default/tla2tools.jar", separator=SEP) == [
        "-cp",
        "tla2tools.jar",
        DEFAULT_GC_ARG,
    ]


def test_java_args_dangling_classpath_flag() -> None:
    assert build_java_args(["-cp"], "/default/tla2tools.jar", separator=SEP) == [
        "-cp",
        "-cp",
        "/default/tla2tools.jar",
        DEFAULT_GC_ARG,
    ]


def test_java_args_are_deterministic() -> None:
    options = ["-Xmx1G", "-cp", "Foo.jar"]

    first = build_java_args(options, "/d/tla2tools.jar", separator=SEP)
    second = build_java_args(options, "/d/tla2tools.jar", separator=SEP)

    assert first == second
    assert options == ["-Xmx1G", "-cp", "Foo.jar"]


def test_classpath_references_compares_basenames() -> None:
    assert classpath_references(f"a.jar{SEP}/x/tla2tools.jar", "/d/tla2tools.jar", separator=SEP)
    assert not classpath_references("tla2tools.jar.bak", "/d/tla2tools.jar", separator=SEP)
