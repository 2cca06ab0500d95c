# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Build argument vectors for the Java runtime and the TLA+ tools.

Every function in this module is pure: the same inputs always yield the same
argument vector and nothing is read from or written to disk. Malformed user
options are passed through verbatim so the external tool reports them.
"""

from __future__ import annotations

import ntpath
import os
import posixpath
from collections.abc import Sequence
from typing import Final

from tlaqa.core.models import ToolKind

DEFAULT_GC_ARG: Final[str] = "-XX:+UseParallelGC"
CLASSPATH_FLAGS: Final[frozenset[str]] = frozenset({"-cp", "-classpath"})
GC_PREFIX: Final[str] = "-XX:+Use"
GC_SUFFIX: Final[str] = "GC"

CONFIG_FLAG: Final[str] = "-config"
TLC_DEFAULT_FLAGS: Final[tuple[str, ...]] = ("-tool", "-modelcheck")
VAR_SPEC_NAME: Final[str] = "${specName}"
VAR_MODEL_NAME: Final[str] = "${modelName}"


def _basename(path: str) -> str:
    """Return the final component of ``path`` for POSIX or Windows separators."""

    return ntpath.basename(path) if "\\" in path else posixpath.basename(path)


def _stem(path: str) -> str:
    name = _basename(path)
    stem, _ = posixpath.splitext(name)
    return stem


def substitute_variables(arg: str, *, spec_path: str, config_path: str) -> str:
    """Expand ``${specName}`` and ``${modelName}`` within ``arg``.

    Args:
        arg: Raw user argument.
        spec_path: Path of the module being checked.
        config_path: Path of the model configuration.

    Returns:
        str: Argument with both variables replaced by the extension-less
        basenames of the respective files.
    """

    return arg.replace(VAR_SPEC_NAME, _stem(spec_path)).replace(VAR_MODEL_NAME, _stem(config_path))


def build_pluscal_args(module_path: str, user_args: Sequence[str]) -> list[str]:
    """Return transpiler arguments: user options followed by the module file."""

    return [*user_args, _basename(module_path)]


def build_sany_args(module_path: str) -> list[str]:
    """Return analyzer arguments: just the module file."""

    return [_basename(module_path)]


def build_tlc_args(module_path: str, config_path: str, user_args: Sequence[str]) -> list[str]:
    """Return model checker arguments.

    A ``-config <value>`` pair in ``user_args`` replaces the default model
    path instead of being appended as a duplicate; the remaining user options
    keep their relative order after the default flags.

    Args:
        module_path: Path of the module being checked.
        config_path: Default model configuration path.
        user_args: Extra options supplied by the user.

    Returns:
        list[str]: Ordered argument vector for ``tlc2.TLC``.
    """

    custom = [substitute_variables(arg, spec_path=module_path, config_path=config_path) for arg in user_args]
    effective_config = config_path
    if CONFIG_FLAG in custom:
        index = custom.index(CONFIG_FLAG)
        if index + 1 < len(custom) and not custom[index + 1].startswith("-"):
            effective_config = custom[index + 1]
            del custom[index : index + 2]
    return [_basename(module_path), *TLC_DEFAULT_FLAGS, CONFIG_FLAG, effective_config, *custom]


def build_tool_args(
    tool: ToolKind,
    module_path: str,
    config_path: str,
    user_args: Sequence[str] = (),
) -> list[str]:
    """Dispatch to the argument builder for ``tool``.

    Args:
        tool: Tool being invoked.
        module_path: Path of the primary ``.tla`` module.
        config_path: Path of the model configuration.
        user_args: Extra options supplied by the user. The analyzer ignores them.

    Returns:
        list[str]: Ordered argument vector following the tool's contract.
    """

    if tool is ToolKind.TRANSPILER:
        return build_pluscal_args(module_path, user_args)
    if tool is ToolKind.ANALYZER:
        return build_sany_args(module_path)
    return build_tlc_args(module_path, config_path, user_args)


def _find_classpath_value(options: Sequence[str]) -> tuple[int, int | None]:
    """Return ``(flag_index, value_index)`` of the first classpath flag.

    ``flag_index`` is ``-1`` when no flag is present; ``value_index`` is
    ``None`` when the flag is the last token.
    """

    for index, option in enumerate(options):
        if option in CLASSPATH_FLAGS:
            value_index = index + 1
            return index, value_index if value_index < len(options) else None
    return -1, None


def classpath_references(classpath: str, archive_path: str, *, separator: str = os.pathsep) -> bool:
    """Return whether ``classpath`` already lists an entry named like ``archive_path``.

    Args:
        classpath: Classpath value as typed by the user.
        archive_path: Path to the tools archive.
        separator: Platform classpath separator.

    Returns:
        bool: ``True`` when an entry's basename equals the archive's basename.
    """

    archive_name = _basename(archive_path)
    return any(_basename(entry) == archive_name for entry in classpath.split(separator) if entry)


def build_java_args(
    user_java_opts: Sequence[str],
    tools_archive_path: str,
    *,
    separator: str = os.pathsep,
) -> list[str]:
    """Merge the tools archive and the default GC into the user's Java options.

    Args:
        user_java_opts: Tokenised Java options supplied by the user.
        tools_archive_path: Resolved path of ``tla2tools.jar``.
        separator: Platform classpath separator.

    Returns:
        list[str]: Java options with the classpath merged and a GC selected.
    """

    options = list(user_java_opts)
    flag_index, value_index = _find_classpath_value(options)
    if flag_index < 0 or value_index is None:
        options.extend(["-cp", tools_archive_path])
    elif not classpath_references(options[value_index], tools_archive_path, separator=separator):
        options[value_index] = f"{options[value_index]}{separator}{tools_archive_path}"
    if not any(option.startswith(GC_PREFIX) and option.endswith(GC_SUFFIX) for option in options):
        options.append(DEFAULT_GC_ARG)
    return options


__all__ = [
    "DEFAULT_GC_ARG",
    "build_java_args",
    "build_pluscal_args",
    "build_sany_args",
    "build_tlc_args",
    "build_tool_args",
    "classpath_references",
    "substitute_variables",
]
