# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Persist the raw model checker output next to the specification."""

from __future__ import annotations

from collections.abc import AsyncIterable, AsyncIterator
from pathlib import Path
from types import TracebackType
from typing import BinaryIO, Final

OUT_SUFFIX: Final[str] = ".out"


def out_file_for(spec_path: Path) -> Path:
    """Return the ``.out`` file written for ``spec_path``."""

    return spec_path.with_suffix(OUT_SUFFIX)


class OutputFileSaver:
    """Context manager writing raw stdout chunks, markers included, to a file."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._handle: BinaryIO | None = None

    def __enter__(self) -> OutputFileSaver:
        self._handle = self.path.open("wb")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def write(self, chunk: bytes | str) -> None:
        if self._handle is None:
            raise ValueError(f"{self.path} is not open for writing")
        self._handle.write(chunk.encode() if isinstance(chunk, str) else chunk)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    async def tee(self, stream: AsyncIterable[bytes | str]) -> AsyncIterator[bytes | str]:
        """Yield ``stream`` unchanged while copying every chunk to the file."""

        async for chunk in stream:
            self.write(chunk)
            yield chunk


__all__ = ["OUT_SUFFIX", "OutputFileSaver", "out_file_for"]
