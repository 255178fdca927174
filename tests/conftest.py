"""Shared fixtures: a manual timer factory for debounce tests."""

from __future__ import annotations

from collections.abc import Callable

import pytest


class ManualTimer:
    def __init__(self, delay: float, callback: Callable[[], None]) -> None:
        self.delay = delay
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualTimerFactory:
    """Records scheduled callbacks; tests fire them explicitly."""

    def __init__(self) -> None:
        self.timers: list[ManualTimer] = []

    def __call__(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(delay, callback)
        self.timers.append(timer)
        return timer

    def fire_all(self) -> None:
        for timer in list(self.timers):
            if not timer.cancelled:
                timer.callback()


@pytest.fixture
def timers() -> ManualTimerFactory:
    return ManualTimerFactory()
