# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Argument building, Java resolution and tool launching."""

from __future__ import annotations

from .arguments import (
    DEFAULT_GC_ARG,
    build_java_args,
    build_pluscal_args,
    build_sany_args,
    build_tlc_args,
    build_tool_args,
    classpath_references,
    substitute_variables,
)
from .java import JavaExecutableCache, JavaVersion, build_java_path, parse_java_version, probe_java_version
from .runner import ToolRunner
from .shell import ArgumentSyntaxError, split_arguments

__all__ = [
    "ArgumentSyntaxError",
    "DEFAULT_GC_ARG",
    "JavaExecutableCache",
    "JavaVersion",
    "ToolRunner",
    "build_java_args",
    "build_java_path",
    "build_pluscal_args",
    "build_sany_args",
    "build_tlc_args",
    "build_tool_args",
    "classpath_references",
    "parse_java_version",
    "probe_java_version",
    "split_arguments",
    "substitute_variables",
]
