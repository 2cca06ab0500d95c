# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""End-to-end workflows combining the runner, the parsers and the sink."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..core.models import MODEL_SUFFIX, ParseResult, SpecFiles, ToolKind
from ..core.models.check import ModelCheckResult
from ..diagnostics import DiagnosticCollection, DiagnosticSink, apply_collection, merge_collections
from ..parsers import (
    AnalyzerOutputParser,
    EventSink,
    LineSink,
    ModelCheckerOutputParser,
    TranspilerOutputParser,
)
from ..tooling.runner import ToolRunner
from .context import CheckContext, CheckRequest
from .output_saver import OutputFileSaver, out_file_for

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParseOutcome:
    """Results of transpiling and analyzing one module."""

    transpiler: ParseResult
    analyzer: ParseResult
    diagnostics: DiagnosticCollection


async def _run_parse_tool(
    runner: ToolRunner,
    tool: ToolKind,
    spec: SpecFiles,
    *,
    echo: LineSink | None,
    on_event: EventSink | None,
) -> ParseResult:
    handle = await runner.run_tool(tool, spec)
    parser: TranspilerOutputParser | AnalyzerOutputParser
    if tool is ToolKind.TRANSPILER:
        parser = TranspilerOutputParser(spec.tla_path, echo=echo)
    else:
        parser = AnalyzerOutputParser(echo=echo)
    try:
        result = await parser.read_all(handle.stdout, on_event)
    except BaseException:
        handle.cancel()
        raise
    exit_info = await handle.wait()
    exit_info.raise_for_tooling_failure(tool.display_name)
    return result


async def parse_module(
    runner: ToolRunner,
    module_path: Path,
    sink: DiagnosticSink | None = None,
    *,
    echo: LineSink | None = None,
    on_event: EventSink | None = None,
) -> ParseOutcome:
    """Transpile then analyze ``module_path`` and publish the merged diagnostics.

    The analyzer only starts after the transpiler has exited, since it reads
    the file the transpiler rewrote.

    Args:
        runner: Tool launcher.
        module_path: ``.tla`` file to process.
        sink: Consumer receiving the merged diagnostics in one replacement.
        echo: Optional sink for cleaned raw output.
        on_event: Optional consumer of decoded events.

    Returns:
        ParseOutcome: Both tool results and the merged collection.

    Raises:
        ToolingFailureError: If either tool exits with a tooling failure.
    """

    spec = SpecFiles(tla_path=module_path, cfg_path=module_path.with_suffix(MODEL_SUFFIX))
    transpiler = await _run_parse_tool(runner, ToolKind.TRANSPILER, spec, echo=echo, on_event=on_event)
    analyzer = await _run_parse_tool(runner, ToolKind.ANALYZER, spec, echo=echo, on_event=on_event)
    merged = merge_collections(
        DiagnosticCollection.from_mapping(result.diagnostics) for result in (transpiler, analyzer)
    )
    if sink is not None:
        apply_collection(merged, sink)
    return ParseOutcome(transpiler=transpiler, analyzer=analyzer, diagnostics=merged)


async def check_model(
    runner: ToolRunner,
    context: CheckContext,
    spec: SpecFiles,
    *,
    extra_args: Sequence[str] = (),
    sink: DiagnosticSink | None = None,
    echo: LineSink | None = None,
    on_event: EventSink | None = None,
) -> ModelCheckResult:
    """Run the model checker on ``spec`` while holding the exclusive slot.

    Args:
        runner: Tool launcher.
        context: Slot owner; a second concurrent check is rejected.
        spec: Module and model to check.
        extra_args: Options appended after the configured ones.
        sink: Consumer receiving the final diagnostics.
        echo: Optional sink for cleaned raw output.
        on_event: Optional consumer of decoded events, including snapshots.

    Returns:
        ModelCheckResult: Final result; ``STOPPED`` when the run was cancelled.

    Raises:
        CheckAlreadyRunningError: If another check is running.
        ToolingFailureError: If the checker exits with a tooling failure.
    """

    active = context.acquire(CheckRequest(spec=spec, extra_args=tuple(extra_args)))
    try:
        handle = await runner.run_tool(ToolKind.MODEL_CHECKER, spec, extra_args)
        context.attach(active, handle)
        try:
            parser = ModelCheckerOutputParser(spec.tla_path, echo=echo, stopped=lambda: handle.cancelled)
            if runner.config.create_out_files:
                with OutputFileSaver(out_file_for(spec.tla_path)) as saver:
                    result = await parser.read_all(saver.tee(handle.stdout), on_event)
            else:
                result = await parser.read_all(handle.stdout, on_event)
        except BaseException:
            handle.cancel()
            raise
        exit_info = await handle.wait()
    finally:
        context.release(active)
    if sink is not None:
        apply_collection(DiagnosticCollection.from_mapping(result.diagnostics), sink)
    exit_info.raise_for_tooling_failure(ToolKind.MODEL_CHECKER.display_name)
    return result


def stop_model_check(context: CheckContext) -> bool:
    """Cancel the running check.

    Returns:
        bool: ``False`` when nothing was running.
    """

    active = context.active
    if active is None:
        LOGGER.debug("stop requested with no model check running")
        return False
    active.cancel()
    return True


async def run_last_check_again(
    runner: ToolRunner,
    context: CheckContext,
    *,
    sink: DiagnosticSink | None = None,
    echo: LineSink | None = None,
    on_event: EventSink | None = None,
) -> ModelCheckResult | None:
    """Repeat the most recent check request, returning ``None`` if there is none."""

    request = context.last_request
    if request is None:
        return None
    return await check_model(
        runner,
        context,
        request.spec,
        extra_args=request.extra_args,
        sink=sink,
        echo=echo,
        on_event=on_event,
    )


__all__ = ["ParseOutcome", "check_model", "parse_module", "run_last_check_again", "stop_model_check"]
