# src/blockwalker/run_state.py
"""
Run flag for a single RunController.

Only one run may be active at a time. try_start() is an atomic
compare-and-set that hands out a run token; the worker keeps polling
should_continue(token), so a stale run can never pick up the flag of a
newer one.
"""

from __future__ import annotations

import threading
from typing import Optional


class RunState:
    """Lock-guarded running flag with cooperative, interruptible waits."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._running = False
        self._generation = 0
        # Set whenever stop() is called, so pacing waits return early.
        self._wake = threading.Event()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._running

    def try_start(self) -> Optional[int]:
        """Start a run if none is active. Returns its token, or None."""
        with self._lock:
            if self._running:
                return None
            self._running = True
            self._generation += 1
            self._wake.clear()
            return self._generation

    def stop(self) -> None:
        """Request cancellation of the active run (no-op when idle)."""
        with self._lock:
            self._running = False
            self._wake.set()

    def finish(self, token: int) -> None:
        """Clear the flag at the end of run `token`, if it is still current."""
        with self._lock:
            if self._generation == token:
                self._running = False

    def should_continue(self, token: int) -> bool:
        with self._lock:
            return self._running and self._generation == token

    def wait(self, seconds: float, token: int) -> bool:
        """
        Sleep up to `seconds`, waking early on stop().

        Returns should_continue(token) afterwards.
        """
        if seconds > 0 and self.should_continue(token):
            self._wake.wait(seconds)
        return self.should_continue(token)
