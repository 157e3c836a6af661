# src/blockwalker/context.py
"""
Request/response channel between the walker worker and the environment.

The environment (game client, simulator) owns world and agent state and
may only touch it from its own thread. The worker never reads or writes
that state directly; it posts a request here and waits for the response
with a timeout. The environment drains the queue from its own loop by
calling pump() once per tick.

Also defines the walker's domain errors:
    - WalkerError: base, carries a code and details
    - StepTimeoutError: a round-trip did not complete in time
    - EnvironmentUnavailableError: no world or no agent to talk to
"""

from __future__ import annotations

import logging
import queue
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Optional, Tuple, TypeVar

from contracts.types import CellKind, Coord
from contracts.world import GridView


log = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Domain errors
# ---------------------------------------------------------------------------


@dataclass
class WalkerError(RuntimeError):
    """
    Domain-level error raised at the environment boundary.

    The run controller catches these at the narrowest scope that can
    recover: a single access-point attempt, or the whole run.
    """

    code: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return f"{type(self).__name__}(code={self.code!r}, details={self.details!r})"


@dataclass
class StepTimeoutError(WalkerError):
    code: str = "step_timeout"


@dataclass
class EnvironmentUnavailableError(WalkerError):
    code: str = "environment_unavailable"


# ---------------------------------------------------------------------------
# Contexts
# ---------------------------------------------------------------------------


class EnvironmentContext:
    """
    Queue of callables executed on the environment's thread.

    Worker side:
        submit(fn) -> Future       schedule, do not wait
        post(fn)                   schedule, fire-and-forget
        call(fn, timeout) -> T     schedule and wait, StepTimeoutError on expiry

    Environment side:
        pump()                     run everything queued so far
        start_pump_thread()        for offline use, pump from a daemon thread
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Tuple[Callable[[], Any], Future]]" = queue.Queue()
        self._pump_thread: Optional[threading.Thread] = None
        self._pump_stop = threading.Event()

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def submit(self, fn: Callable[[], T]) -> "Future[T]":
        fut: "Future[T]" = Future()
        self._queue.put((fn, fut))
        return fut

    def post(self, fn: Callable[[], Any]) -> None:
        """Schedule `fn` without waiting; failures are logged, never raised."""
        self.submit(fn).add_done_callback(_log_posted_failure)

    def call(self, fn: Callable[[], T], timeout: Optional[float]) -> T:
        """
        Run `fn` on the environment thread and return its result.

        A zero or None timeout waits indefinitely. Exceptions raised by
        `fn` are re-raised here unchanged.
        """
        fut = self.submit(fn)
        wait = timeout if timeout else None
        try:
            return fut.result(timeout=wait)
        except FutureTimeoutError as exc:
            # A request still queued is dropped; one already running
            # completes on the environment side and its result is discarded.
            fut.cancel()
            raise StepTimeoutError(details={"timeout_s": timeout}) from exc

    # ------------------------------------------------------------------
    # Environment side
    # ------------------------------------------------------------------

    def pump(self, max_items: Optional[int] = None) -> int:
        """
        Execute queued requests on the calling thread.

        Returns the number of requests processed. Must be called from the
        environment's own thread.
        """
        processed = 0
        while max_items is None or processed < max_items:
            try:
                fn, fut = self._queue.get_nowait()
            except queue.Empty:
                break
            processed += 1
            _run_request(fn, fut)
        return processed

    def start_pump_thread(self, interval_s: float = 0.005) -> None:
        """Pump from a background daemon thread (offline tools and tests)."""
        if self._pump_thread is not None:
            return
        self._pump_stop.clear()

        def _loop() -> None:
            while not self._pump_stop.is_set():
                if self.pump() == 0:
                    self._pump_stop.wait(interval_s)

        self._pump_thread = threading.Thread(
            target=_loop, name="blockwalker-env-pump", daemon=True
        )
        self._pump_thread.start()

    def stop_pump_thread(self, timeout: Optional[float] = 1.0) -> None:
        thread = self._pump_thread
        if thread is None:
            return
        self._pump_stop.set()
        thread.join(timeout)
        self._pump_thread = None


class InlineContext(EnvironmentContext):
    """
    Context for environments that already run on the caller's thread.

    Requests execute immediately inside submit(); pump() has nothing to do.
    Used by the offline CLI and by deterministic tests.
    """

    def submit(self, fn: Callable[[], T]) -> "Future[T]":
        fut: "Future[T]" = Future()
        _run_request(fn, fut)
        return fut


def _run_request(fn: Callable[[], Any], fut: Future) -> None:
    if not fut.set_running_or_notify_cancel():
        return
    try:
        result = fn()
    except BaseException as exc:
        fut.set_exception(exc)
    else:
        fut.set_result(result)


def _log_posted_failure(fut: Future) -> None:
    if fut.cancelled():
        return
    exc = fut.exception()
    if exc is not None:
        log.warning("posted environment request failed: %r", exc)


# ---------------------------------------------------------------------------
# Grid view routed through a context
# ---------------------------------------------------------------------------


class RemoteGridView:
    """
    GridView that reads the real grid through an EnvironmentContext.

    Lookups are memoised for the lifetime of the view; the walker never
    mutates the grid, so one view per run is safe. Failed or timed-out reads
    return UNKNOWN and are not cached.
    """

    def __init__(
        self,
        grid: GridView,
        context: EnvironmentContext,
        *,
        timeout_s: Optional[float],
    ) -> None:
        self._grid = grid
        self._context = context
        self._timeout_s = timeout_s
        self._cache: Dict[Coord, CellKind] = {}

    def cell_kind_at(self, coord: Coord) -> CellKind:
        cached = self._cache.get(coord)
        if cached is not None:
            return cached
        try:
            kind = self._context.call(
                lambda: self._grid.cell_kind_at(coord), self._timeout_s
            )
        except StepTimeoutError:
            log.warning("cell lookup timed out at %s", coord)
            return CellKind.UNKNOWN
        except Exception:
            log.exception("cell lookup failed at %s", coord)
            return CellKind.UNKNOWN

        if kind is CellKind.UNKNOWN or not isinstance(kind, CellKind):
            return CellKind.UNKNOWN
        self._cache[coord] = kind
        return kind

    def prefetch(self, coords: Iterable[Coord], timeout_s: Optional[float]) -> int:
        """
        Read many cells in a single round-trip.

        Returns the number of resolved cells cached. Raises StepTimeoutError
        or whatever the grid raised; callers decide whether that matters.
        """
        wanted = [c for c in coords if c not in self._cache]

        def _read() -> Dict[Coord, CellKind]:
            return {c: self._grid.cell_kind_at(c) for c in wanted}

        kinds = self._context.call(_read, timeout_s)
        resolved = {
            c: k for c, k in kinds.items()
            if isinstance(k, CellKind) and k is not CellKind.UNKNOWN
        }
        self._cache.update(resolved)
        return len(resolved)

    def clear(self) -> None:
        self._cache.clear()
