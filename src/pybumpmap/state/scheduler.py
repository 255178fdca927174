"""Debounced repaint scheduling.

A burst of point insertions inside one debounce window produces exactly
one repaint. The delay primitive is pluggable so the scheduler works with
plain threads or with an asyncio loop.
"""

from __future__ import annotations

import asyncio
import functools
import logging
import threading
from collections.abc import Callable
from enum import StrEnum
from typing import Any, Protocol

from pybumpmap._constants import DEFAULT_DEBOUNCE_DELAY

_logger = logging.getLogger(__name__)


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


TimerFactory = Callable[[float, Callable[[], None]], Cancellable]
"""Schedule ``callback`` after ``delay`` seconds and return a cancel handle."""


def threading_timer(delay: float, callback: Callable[[], None]) -> Cancellable:
    """Run *callback* on a daemon :class:`threading.Timer` thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


def asyncio_timer(loop: asyncio.AbstractEventLoop | None = None) -> TimerFactory:
    """Timer factory backed by ``loop.call_later``.

    Without an explicit *loop* the running loop at scheduling time is used,
    so requests must then come from inside that loop.
    """

    def factory(delay: float, callback: Callable[[], None]) -> Cancellable:
        target = loop or asyncio.get_running_loop()
        return target.call_later(delay, callback)

    return factory


class SchedulerState(StrEnum):
    IDLE = "idle"
    PENDING_REPAINT = "pending_repaint"


class UpdateScheduler:
    """Coalesces repaint requests into one delayed trigger.

    Parameters
    ----------
    repaint : callable
        Host hook invoked when the trigger fires.
    delay : float
        Seconds between the first request of a burst and the repaint.
    timer_factory : TimerFactory
        Delay primitive; defaults to :func:`threading_timer`.
    """

    def __init__(
        self,
        repaint: Callable[[], None],
        *,
        delay: float = DEFAULT_DEBOUNCE_DELAY,
        timer_factory: TimerFactory = threading_timer,
    ) -> None:
        self._repaint = repaint
        self._delay = delay
        self._timer_factory = timer_factory
        self._state = SchedulerState.IDLE
        self._handle: Cancellable | None = None
        # Bumped on every schedule/cancel; a trigger only fires for its own generation.
        self._generation = 0
        self._active = True
        self._lock = threading.RLock()

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._active

    def request_repaint(self) -> bool:
        """Schedule a repaint unless one is already pending.

        Returns ``True`` when this call scheduled a new trigger.
        """
        with self._lock:
            if not self._active:
                _logger.debug("Repaint request ignored; scheduler stopped")
                return False
            if self._state == SchedulerState.PENDING_REPAINT:
                return False
            self._generation += 1
            generation = self._generation
            self._state = SchedulerState.PENDING_REPAINT
            handle = self._timer_factory(self._delay, functools.partial(self._fire, generation))
            # A synchronous timer may already have fired.
            if self._generation == generation and self._state == SchedulerState.PENDING_REPAINT:
                self._handle = handle
        _logger.debug("Repaint scheduled in %.3fs", self._delay)
        return True

    def cancel(self) -> None:
        """Drop any pending trigger without firing it."""
        with self._lock:
            handle = self._handle
            self._handle = None
            self._generation += 1
            was_pending = self._state == SchedulerState.PENDING_REPAINT
            self._state = SchedulerState.IDLE
            if handle is not None:
                handle.cancel()
        if was_pending:
            _logger.debug("Pending repaint cancelled")

    def start(self) -> None:
        with self._lock:
            self._active = True

    def stop(self) -> None:
        """Cancel the pending trigger and ignore requests until ``start()``."""
        with self._lock:
            self._active = False
            self.cancel()

    def _fire(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._state != SchedulerState.PENDING_REPAINT:
                return
            self._state = SchedulerState.IDLE
            self._handle = None
        self._repaint()
