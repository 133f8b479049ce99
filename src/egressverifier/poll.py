# SPDX-FileCopyrightText: 2025 Theori Inc.
# SPDX-License-Identifier: AGPL-3.0-or-later

"""
Bounded polling primitive.

``poll_immediate`` invokes a condition right away and then on a fixed interval
until the condition reports done, raises, or the deadline passes. The loop has
no domain knowledge: the condition decides whether an observation is terminal
(raise) or worth another look (return False). Time is read through an
injectable clock so tests can simulate elapsed time without sleeping.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from typing import Protocol

from .errors import PollCancelledError, PollTimeoutError

Condition = Callable[[], bool]


class Clock(Protocol):
    """Minimal time source used by the polling loop."""

    def monotonic(self) -> float: ...

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> None: ...


class SystemClock:
    """Real wall-clock time; sleeps wake early when ``cancel`` is set."""

    def monotonic(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> None:
        if seconds <= 0:
            return
        if cancel is not None:
            cancel.wait(seconds)
        else:
            time.sleep(seconds)


class ManualClock:
    """Deterministic clock for tests: sleeping advances time instantly."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def monotonic(self) -> float:
        return self.now

    def sleep(self, seconds: float, cancel: threading.Event | None = None) -> None:  # noqa: ARG002
        self.sleeps.append(seconds)
        self.now += max(0.0, seconds)

    def advance(self, seconds: float) -> None:
        self.now += seconds


def _check_cancel(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise PollCancelledError()


def poll_immediate(
    condition: Condition,
    interval: float,
    timeout: float,
    *,
    clock: Clock | None = None,
    cancel: threading.Event | None = None,
) -> None:
    """
    Run ``condition`` until it returns True.

    Raises whatever ``condition`` raises (errors are never retried),
    ``PollTimeoutError`` once ``timeout`` seconds have elapsed, and
    ``PollCancelledError`` when ``cancel`` is set.
    """
    if interval <= 0:
        raise ValueError("interval must be positive")
    clock = clock or SystemClock()
    deadline = clock.monotonic() + max(0.0, timeout)

    while True:
        _check_cancel(cancel)
        if condition():
            return

        remaining = deadline - clock.monotonic()
        if remaining <= 0:
            raise PollTimeoutError(f"timed out after {timeout:g}s waiting for the condition", timeout=timeout)

        _check_cancel(cancel)
        # Never overshoot the deadline; the final check lands on it.
        clock.sleep(min(interval, remaining), cancel)


__all__ = ["Clock", "Condition", "ManualClock", "SystemClock", "poll_immediate"]
