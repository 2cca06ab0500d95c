# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Launch the TLA+ tools on the Java runtime."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path

from ..config.models import Config
from ..core.models import SpecFiles, ToolKind
from ..core.runtime.process import ProcessHandle, spawn_process
from ..errors import ToolingUnavailableError
from .arguments import CLASSPATH_FLAGS, build_java_args, build_tool_args, classpath_references
from .java import JavaExecutableCache
from .shell import split_arguments

LOGGER = logging.getLogger(__name__)

SpawnFn = Callable[..., Awaitable[ProcessHandle]]


class ToolRunner:
    """Resolve Java, assemble argument vectors and spawn tool processes."""

    def __init__(
        self,
        config: Config,
        *,
        java_cache: JavaExecutableCache | None = None,
        spawn: SpawnFn = spawn_process,
    ) -> None:
        self.config = config
        self.java_cache = java_cache or JavaExecutableCache()
        self._spawn = spawn

    def tool_options(self, tool: ToolKind) -> list[str]:
        """Return the configured user options for ``tool``.

        Raises:
            ArgumentSyntaxError: If the option string has an unterminated quote.
        """

        if tool is ToolKind.TRANSPILER:
            return split_arguments(self.config.pluscal_options)
        if tool is ToolKind.MODEL_CHECKER:
            return split_arguments(self.config.tlc_options)
        return []

    def java_arguments(self) -> list[str]:
        """Return the Java options with the tools archive on the classpath.

        Raises:
            ToolingUnavailableError: If the tools archive is missing and the
                user classpath does not provide it either.
            ArgumentSyntaxError: If ``java_options`` cannot be split.
        """

        user_options = split_arguments(self.config.java_options)
        archive = self.config.tools_archive
        if not archive.exists() and not _user_classpath_provides(user_options, archive):
            raise ToolingUnavailableError(f"TLA+ tools archive not found: {archive}")
        return build_java_args(user_options, str(archive))

    def command_for(self, tool: ToolKind, spec: SpecFiles, extra_args: Sequence[str] = ()) -> list[str]:
        """Return the arguments passed to the Java executable for one tool run."""

        user_args = [*self.tool_options(tool), *extra_args]
        tool_args = build_tool_args(tool, str(spec.tla_path), str(spec.cfg_path), user_args)
        return [*self.java_arguments(), tool.main_class, *tool_args]

    async def run_tool(self, tool: ToolKind, spec: SpecFiles, extra_args: Sequence[str] = ()) -> ProcessHandle:
        """Spawn ``tool`` for ``spec`` from the specification directory.

        Args:
            tool: Tool to run.
            spec: Module and model pair.
            extra_args: Options appended after the configured ones.

        Returns:
            ProcessHandle: Handle supervising the new process.

        Raises:
            ToolingUnavailableError: If Java or the tools archive cannot be found.
            ProcessSpawnError: If the process cannot be started.
        """

        java_path = await self.java_cache.resolve(self.config.java_home)
        args = self.command_for(tool, spec, extra_args)
        LOGGER.debug("running %s: %s", tool.display_name, args)
        return await self._spawn(java_path, args, cwd=spec.spec_dir)


def _user_classpath_provides(options: Sequence[str], archive: Path) -> bool:
    for index, option in enumerate(options[:-1]):
        if option in CLASSPATH_FLAGS and classpath_references(options[index + 1], str(archive)):
            return True
    return False


__all__ = ["SpawnFn", "ToolRunner"]
