# tests/test_environment_context.py
"""
EnvironmentContext round-trips and the RemoteGridView cache.
"""

from __future__ import annotations

import threading
import time

import pytest

from contracts.types import CellKind, Coord, Region
from blockwalker.context import (
    EnvironmentContext,
    InlineContext,
    RemoteGridView,
    StepTimeoutError,
    WalkerError,
)
from blockwalker.offline import InMemoryGrid


def test_requests_run_only_when_pumped():
    ctx = EnvironmentContext()
    ran = []

    fut = ctx.submit(lambda: ran.append(threading.current_thread().name) or 7)

    assert ran == []
    assert not fut.done()
    assert ctx.pump() == 1
    assert fut.result(timeout=0) == 7
    assert ran == [threading.current_thread().name]


def test_pump_respects_max_items():
    ctx = EnvironmentContext()
    for n in range(3):
        ctx.post(lambda n=n: n)

    assert ctx.pump(max_items=2) == 2
    assert ctx.pump() == 1
    assert ctx.pump() == 0


def test_call_runs_on_pump_thread():
    ctx = EnvironmentContext()
    ctx.start_pump_thread()
    try:
        name = ctx.call(lambda: threading.current_thread().name, timeout=2.0)
    finally:
        ctx.stop_pump_thread()

    assert name == "blockwalker-env-pump"


def test_call_times_out_when_nobody_pumps():
    ctx = EnvironmentContext()

    with pytest.raises(StepTimeoutError) as info:
        ctx.call(lambda: 1, timeout=0.05)

    assert info.value.code == "step_timeout"
    assert isinstance(info.value, WalkerError)
    # the abandoned request was cancelled and is skipped by pump
    assert ctx.pump() == 1


def test_call_reraises_environment_exception():
    ctx = InlineContext()

    def boom():
        raise KeyError("no such block")

    with pytest.raises(KeyError):
        ctx.call(boom, timeout=1.0)


def test_post_failure_is_logged_not_raised(caplog):
    ctx = InlineContext()

    def boom():
        raise RuntimeError("chat closed")

    ctx.post(boom)

    assert "posted environment request failed" in caplog.text


def test_inline_context_runs_immediately():
    ctx = InlineContext()
    seen = []

    ctx.post(lambda: seen.append(1))

    assert seen == [1]
    assert ctx.pump() == 0


def test_stopped_pump_thread_can_restart():
    ctx = EnvironmentContext()
    ctx.start_pump_thread()
    ctx.stop_pump_thread()
    ctx.start_pump_thread()
    try:
        assert ctx.call(lambda: "ok", timeout=2.0) == "ok"
    finally:
        ctx.stop_pump_thread()


# ---------------------------------------------------------------------------
# RemoteGridView
# ---------------------------------------------------------------------------


def test_remote_view_caches_lookups():
    grid = InMemoryGrid({Coord(1, 0, 1): CellKind.SOLID})
    view = RemoteGridView(grid, InlineContext(), timeout_s=1.0)

    assert view.cell_kind_at(Coord(1, 0, 1)) is CellKind.SOLID
    assert view.cell_kind_at(Coord(1, 0, 1)) is CellKind.SOLID
    assert view.cell_kind_at(Coord(0, 0, 0)) is CellKind.EMPTY
    assert grid.lookups == 2


def test_remote_view_failure_is_unknown_and_not_cached():
    grid = InMemoryGrid({Coord(1, 0, 1): CellKind.SOLID})
    view = RemoteGridView(grid, InlineContext(), timeout_s=1.0)

    grid.available = False
    assert view.cell_kind_at(Coord(1, 0, 1)) is CellKind.UNKNOWN

    grid.available = True
    assert view.cell_kind_at(Coord(1, 0, 1)) is CellKind.SOLID


def test_remote_view_timeout_is_unknown():
    view = RemoteGridView(InMemoryGrid(), EnvironmentContext(), timeout_s=0.05)

    started = time.monotonic()
    assert view.cell_kind_at(Coord(0, 0, 0)) is CellKind.UNKNOWN
    assert time.monotonic() - started < 2.0


def test_prefetch_reads_region_in_one_round_trip():
    grid = InMemoryGrid({Coord(1, 1, 1): CellKind.CLIMBABLE})
    ctx = EnvironmentContext()
    ctx.start_pump_thread()
    calls = []
    original_call = ctx.call

    def counting_call(fn, timeout):
        calls.append(fn)
        return original_call(fn, timeout)

    ctx.call = counting_call
    try:
        view = RemoteGridView(grid, ctx, timeout_s=1.0)
        region = Region(Coord(0, 0, 0), Coord(2, 2, 2))

        assert view.prefetch(region, timeout_s=2.0) == 27
        assert len(calls) == 1
        assert view.cell_kind_at(Coord(1, 1, 1)) is CellKind.CLIMBABLE
        assert len(calls) == 1
    finally:
        ctx.stop_pump_thread()


def test_prefetch_propagates_grid_failure():
    grid = InMemoryGrid()
    grid.available = False
    view = RemoteGridView(grid, InlineContext(), timeout_s=1.0)

    with pytest.raises(RuntimeError):
        view.prefetch([Coord(0, 0, 0)], timeout_s=1.0)


def test_clear_drops_cached_cells():
    grid = InMemoryGrid()
    view = RemoteGridView(grid, InlineContext(), timeout_s=1.0)
    view.cell_kind_at(Coord(0, 0, 0))

    view.clear()
    view.cell_kind_at(Coord(0, 0, 0))

    assert grid.lookups == 2
