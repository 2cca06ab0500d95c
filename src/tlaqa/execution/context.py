# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Exclusive model-check slot and the last request it served."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from ..core.models import SpecFiles
from ..core.runtime.process import ProcessHandle
from ..errors import CheckAlreadyRunningError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CheckRequest:
    """Inputs needed to start (or repeat) a model check."""

    spec: SpecFiles
    extra_args: tuple[str, ...] = ()


@dataclass(slots=True)
class ActiveCheck:
    """The model check currently occupying the slot."""

    request: CheckRequest
    started: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    handle: ProcessHandle | None = None
    stop_requested: bool = False

    def cancel(self) -> None:
        """Interrupt the run, or mark it for interruption once spawned."""

        self.stop_requested = True
        if self.handle is not None:
            self.handle.cancel()


class CheckContext:
    """Own the single model checking run allowed at a time.

    All access happens on the event loop thread, so no locking is needed.
    """

    def __init__(self) -> None:
        self._active: ActiveCheck | None = None
        self._last_request: CheckRequest | None = None

    @property
    def active(self) -> ActiveCheck | None:
        """Return the running check, if any."""

        return self._active

    @property
    def last_request(self) -> CheckRequest | None:
        """Return the most recently started check request."""

        return self._last_request

    def acquire(self, request: CheckRequest) -> ActiveCheck:
        """Reserve the slot for ``request``.

        Raises:
            CheckAlreadyRunningError: If another check holds the slot.
        """

        if self._active is not None:
            raise CheckAlreadyRunningError(self._active)
        self._active = ActiveCheck(request=request)
        self._last_request = request
        return self._active

    def attach(self, active: ActiveCheck, handle: ProcessHandle) -> None:
        """Bind the spawned process to ``active``, honouring an earlier stop."""

        active.handle = handle
        if active.stop_requested:
            handle.cancel()

    def release(self, active: ActiveCheck) -> None:
        """Free the slot if ``active`` still holds it."""

        if self._active is active:
            self._active = None
        else:
            LOGGER.debug("ignoring release of a check that no longer holds the slot")


__all__ = ["ActiveCheck", "CheckContext", "CheckRequest"]
