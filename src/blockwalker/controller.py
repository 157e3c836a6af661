# src/blockwalker/controller.py
"""
Run controller: scan -> order -> plan -> execute -> report.

One RunController owns one RunState, one single-thread worker, and the
collaborators of one environment. A run:

    IDLE -> SCANNING -> PROCESSING
         -> (FINDING_ACCESS -> PLANNING -> EXECUTING) per target
         -> IDLE

Design constraints:
- The worker never touches world or agent state directly; every read and
  every move is a round-trip through the EnvironmentContext.
- Targets are visited nearest-first from the agent's position at scan
  time; access points nearest-first from the agent's current position.
- Per-target and per-attempt failures are caught at their own scope and
  turn into "try next access point" or "unreachable". Only cancellation
  or an unavailable environment ends a run early.
- Exactly one completion notice per run, however it ends.
"""

from __future__ import annotations

import logging
import math
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter
from typing import Any, List, Optional, Sequence, Tuple

from contracts.types import Coord, MoveResult
from contracts.world import AgentPose, GridView, Notifier, PathExecutor
from env.schema import WalkerConfig
from monitoring.bus import EventBus
from monitoring.events import EventType
from monitoring.logger import log_event

from .context import (
    EnvironmentContext,
    EnvironmentUnavailableError,
    RemoteGridView,
    StepTimeoutError,
    WalkerError,
)
from .nav import NavGrid, access_points_for, find_path
from .run_state import RunState
from .scanner import scan_targets
from .tracing import MoveTracer


log = logging.getLogger(__name__)

NOTICE_PREFIX = "[BlockWalker] "

Position = Tuple[float, float, float]


class RunPhase(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    PROCESSING = "processing"
    FINDING_ACCESS = "finding_access"
    PLANNING = "planning"
    EXECUTING = "executing"


@dataclass
class RunReport:
    """Outcome of one run."""

    run_id: str
    target_count: int = 0
    visited: List[Coord] = field(default_factory=list)
    unreachable: List[Coord] = field(default_factory=list)
    cancelled: bool = False
    aborted_reason: Optional[str] = None
    duration_s: float = 0.0

    @property
    def processed(self) -> int:
        return len(self.visited) + len(self.unreachable)


# ---------------------------------------------------------------------------
# Distance helpers
# ---------------------------------------------------------------------------


def distance_sq(pos: Position, cell: Coord) -> float:
    """Squared distance from a world position to where an agent would stand on `cell`."""
    dx = pos[0] - (cell.x + 0.5)
    dy = pos[1] - cell.y
    dz = pos[2] - (cell.z + 0.5)
    return dx * dx + dy * dy + dz * dz


def sort_by_distance(cells: Sequence[Coord], pos: Position) -> List[Coord]:
    """Nearest first; sorted() is stable, so equal distances keep input order."""
    return sorted(cells, key=lambda c: distance_sq(pos, c))


def cell_of(pos: Position) -> Coord:
    """Discretize a world position to the cell containing it."""
    return Coord(math.floor(pos[0]), math.floor(pos[1]), math.floor(pos[2]))


# ---------------------------------------------------------------------------
# Controller
# ---------------------------------------------------------------------------


class RunController:
    """
    Orchestrates walker runs for one environment.

    Collaborators (all environment-owned, reached only via `context`):
        grid      GridView over the world
        agent     AgentPose for the walking agent
        executor  PathExecutor that moves the agent one cell
        notifier  Notifier for operator notices
    """

    def __init__(
        self,
        grid: GridView,
        agent: AgentPose,
        executor: PathExecutor,
        notifier: Notifier,
        *,
        config: Optional[WalkerConfig] = None,
        context: Optional[EnvironmentContext] = None,
        bus: Optional[EventBus] = None,
        tracer: Optional[MoveTracer] = None,
    ) -> None:
        self._grid = grid
        self._agent = agent
        self._executor = executor
        self._notifier = notifier
        self._cfg = config if config is not None else WalkerConfig()
        self._context = context if context is not None else EnvironmentContext()
        self._bus = bus
        self._tracer: MoveTracer = tracer or MoveTracer()

        self._state = RunState()
        self._phase = RunPhase.IDLE
        self._worker = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="blockwalker-worker"
        )
        self._current: Optional["Future[RunReport]"] = None
        self.last_report: Optional[RunReport] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def config(self) -> WalkerConfig:
        return self._cfg

    @property
    def context(self) -> EnvironmentContext:
        return self._context

    @property
    def phase(self) -> RunPhase:
        return self._phase

    @property
    def running(self) -> bool:
        return self._state.running

    @property
    def tracer(self) -> MoveTracer:
        return self._tracer

    def trigger(self) -> bool:
        """
        Start a run on the worker thread.

        Returns False (and does nothing) if a run is already active.
        """
        token = self._state.try_start()
        if token is None:
            log.info("trigger ignored: a run is already active")
            return False
        try:
            self._current = self._worker.submit(self._run, token)
        except RuntimeError:
            # worker already shut down; release the flag for this token
            self._state.finish(token)
            raise
        return True

    def run_blocking(self) -> Optional[RunReport]:
        """Run on the calling thread. Returns None if a run is already active."""
        token = self._state.try_start()
        if token is None:
            log.info("run_blocking ignored: a run is already active")
            return None
        return self._run(token)

    def wait(self, timeout: Optional[float] = None) -> Optional[RunReport]:
        """Block until the run started by trigger() ends and return its report."""
        if self._current is None:
            return self.last_report
        return self._current.result(timeout=timeout)

    def stop(self) -> None:
        """Request cancellation; takes effect at the next target or path step."""
        if self._state.running:
            log.info("stop requested")
        self._state.stop()

    def shutdown(self, wait: bool = True) -> None:
        self.stop()
        self._worker.shutdown(wait=wait)

    # ------------------------------------------------------------------
    # Run body
    # ------------------------------------------------------------------

    def _run(self, token: int) -> RunReport:
        report = RunReport(run_id=uuid.uuid4().hex[:12])
        started = perf_counter()
        try:
            self._run_targets(token, report)
        except EnvironmentUnavailableError as exc:
            self._abort(report, "environment_unavailable", exc)
        except StepTimeoutError as exc:
            self._abort(report, "environment_timeout", exc)
        except Exception as exc:
            log.exception("run %s failed unexpectedly", report.run_id)
            self._abort(report, "internal_error", exc)
        finally:
            self._state.finish(token)
            self._set_phase(RunPhase.IDLE)
            report.duration_s = perf_counter() - started
            self.last_report = report
            self._notify("finished/stop.")
            self._emit(
                EventType.RUN_FINISHED,
                "run finished",
                report.run_id,
                visited=len(report.visited),
                unreachable=len(report.unreachable),
                targets=report.target_count,
                cancelled=report.cancelled,
                aborted_reason=report.aborted_reason,
                duration_s=round(report.duration_s, 3),
            )
            log.info(
                "run %s done: %d visited, %d unreachable of %d, cancelled=%s, aborted=%s",
                report.run_id,
                len(report.visited),
                len(report.unreachable),
                report.target_count,
                report.cancelled,
                report.aborted_reason,
            )
        return report

    def _run_targets(self, token: int, report: RunReport) -> None:
        cfg = self._cfg
        run_id = report.run_id

        self._notify("starting scan...")
        self._emit(EventType.RUN_STARTED, "run started", run_id,
                   region=[list(cfg.region.min_corner), list(cfg.region.max_corner)])

        self._set_phase(RunPhase.SCANNING)
        origin = self._agent_position()
        targets = self._scan()
        targets = sort_by_distance(targets, origin)
        report.target_count = len(targets)
        self._emit(EventType.TARGETS_SCANNED, f"{len(targets)} targets", run_id,
                   count=len(targets))
        log.info("run %s: %d targets in %s", run_id, len(targets), cfg.region)

        # One cached view per run; the walker never changes the grid.
        view = RemoteGridView(self._grid, self._context, timeout_s=cfg.per_step_timeout_s)
        self._prefetch(view)
        nav = NavGrid(grid=view, region=cfg.region, max_drop=cfg.max_drop)

        self._set_phase(RunPhase.PROCESSING)
        for index, target in enumerate(targets):
            if index > 0 and not self._state.wait(cfg.inter_target_delay_ms / 1000.0, token):
                report.cancelled = True
                break
            if not self._state.should_continue(token):
                report.cancelled = True
                break

            if self._visit(nav, target, token, run_id):
                report.visited.append(target)
                self._notify(f"visited {target.short_str()}")
                self._emit(EventType.TARGET_VISITED, f"visited {target.short_str()}",
                           run_id, target=list(target))
            elif not self._state.should_continue(token):
                # cancelled mid-target: neither visited nor unreachable
                report.cancelled = True
                break
            else:
                report.unreachable.append(target)
                self._notify(f"unreachable: {target.short_str()}")
                self._emit(EventType.TARGET_UNREACHABLE,
                           f"unreachable {target.short_str()}", run_id,
                           target=list(target))

    def _visit(self, nav: NavGrid, target: Coord, token: int, run_id: str) -> bool:
        """Try each access point of `target` until one is walked to."""
        self._set_phase(RunPhase.FINDING_ACCESS)
        pos = self._target_start_position(target, token)
        if pos is None:
            return False
        points = sort_by_distance(access_points_for(nav, target), pos)
        log.debug("target %s: %d access points", target, len(points))

        for point in points:
            if not self._state.should_continue(token):
                return False
            try:
                if self._attempt(nav, target, point, token, run_id):
                    return True
            except EnvironmentUnavailableError:
                raise
            except WalkerError as exc:
                log.warning("attempt %s -> %s failed: %s", target, point, exc)
            except Exception:
                log.exception("attempt %s -> %s raised", target, point)
        return False

    def _attempt(
        self,
        nav: NavGrid,
        target: Coord,
        point: Coord,
        token: int,
        run_id: str,
    ) -> bool:
        self._set_phase(RunPhase.PLANNING)
        start = cell_of(self._agent_position())
        result = find_path(nav, start, point, max_steps=self._cfg.iteration_cap)
        if not result.success:
            log.debug(
                "no path %s -> %s (%s, %d expanded)",
                start, point, result.reason, result.expanded,
            )
            return False

        self._set_phase(RunPhase.EXECUTING)
        return self._follow_path(result.path, token, run_id, target)

    def _follow_path(
        self,
        path: Sequence[Coord],
        token: int,
        run_id: str,
        target: Coord,
    ) -> bool:
        """Move along `path` one step at a time; the first element is the start."""
        cfg = self._cfg
        for i, step in enumerate(path[1:]):
            if i > 0 and not self._state.wait(cfg.step_delay_ms / 1000.0, token):
                return False
            if not self._state.should_continue(token):
                return False

            t0 = perf_counter()
            try:
                moved = bool(self._context.call(
                    lambda s=step: self._executor.move_to(s),
                    cfg.per_step_timeout_s,
                ))
                result = MoveResult(
                    success=moved,
                    error=None if moved else "move_refused",
                    details={},
                )
            except StepTimeoutError:
                result = MoveResult(success=False, error="step_timeout", details={})
            except Exception as exc:
                log.exception("move_to %s raised", step)
                result = MoveResult(
                    success=False, error="move_exception", details={"exception": repr(exc)}
                )

            self._tracer.record(
                step=step,
                result=result,
                duration_s=perf_counter() - t0,
                run_id=run_id,
                target=target,
            )
            if not result.success:
                return False
        return True

    # ------------------------------------------------------------------
    # Environment round-trips
    # ------------------------------------------------------------------

    def _agent_position(self) -> Position:
        pos = self._context.call(self._agent.position, self._cfg.per_step_timeout_s)
        if pos is None:
            raise EnvironmentUnavailableError(details={"reason": "no_agent"})
        return (float(pos[0]), float(pos[1]), float(pos[2]))

    def _target_start_position(self, target: Coord, token: int) -> Optional[Position]:
        """
        Pose read at the start of a target, retried once after a step delay.

        A timed-out step can still be running on the environment thread and
        hold up this read. Returns None if both reads time out, which fails
        only this target; a missing agent still raises.
        """
        try:
            return self._agent_position()
        except StepTimeoutError:
            log.warning("pose read timed out before %s; retrying once", target)
        if not self._state.wait(self._cfg.step_delay_ms / 1000.0, token):
            return None
        try:
            return self._agent_position()
        except StepTimeoutError:
            log.warning("pose read timed out again; giving up on %s", target)
            return None

    def _scan(self) -> List[Coord]:
        region = self._cfg.region
        try:
            return self._context.call(
                lambda: scan_targets(self._grid, region), self._cfg.scan_timeout_s
            )
        except StepTimeoutError:
            log.warning("scan of %s timed out; treating as no targets", region)
            return []

    def _prefetch(self, view: RemoteGridView) -> None:
        # Planning looks a few cells past the region: neighbors, step-ups, drops.
        margin = self._cfg.max_drop + 2
        try:
            count = view.prefetch(self._cfg.region.expanded(margin), self._cfg.scan_timeout_s)
        except Exception as exc:
            log.warning("grid prefetch failed (%r); falling back to per-cell reads", exc)
            return
        log.debug("prefetched %d cells", count)

    # ------------------------------------------------------------------
    # Notices, events, phase
    # ------------------------------------------------------------------

    def _abort(self, report: RunReport, reason: str, exc: BaseException) -> None:
        report.aborted_reason = reason
        log.warning("run %s aborted: %s (%s)", report.run_id, reason, exc)
        if reason in ("environment_unavailable", "environment_timeout"):
            self._notify("environment unavailable")
            self._emit(EventType.ENVIRONMENT_UNAVAILABLE, "environment unavailable",
                       report.run_id, reason=reason)

    def _notify(self, text: str) -> None:
        message = NOTICE_PREFIX + text
        self._context.post(lambda: self._notifier.notify(message))

    def _emit(self, event_type: EventType, message: str, run_id: str, **payload: Any) -> None:
        if self._bus is None:
            return
        log_event(
            bus=self._bus,
            module="blockwalker.controller",
            event_type=event_type,
            message=message,
            payload=dict(payload),
            correlation_id=run_id,
        )

    def _set_phase(self, phase: RunPhase) -> None:
        if phase is not self._phase:
            log.debug("phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase
