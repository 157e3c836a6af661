# tests/test_types_and_tracing.py

from __future__ import annotations

import logging

import pytest

from contracts.types import CellKind, Coord, MoveResult, Region
from blockwalker.controller import cell_of, sort_by_distance
from blockwalker.logging_config import resolve_level
from blockwalker.tracing import MoveTracer


def test_region_rejects_inverted_corners():
    with pytest.raises(ValueError):
        Region(Coord(1, 0, 0), Coord(0, 0, 0))


def test_region_len_and_contains():
    region = Region(Coord(0, 0, 0), Coord(2, 1, 0))

    assert len(region) == 6
    assert len(list(region)) == 6
    assert region.contains(Coord(2, 1, 0))
    assert not region.contains(Coord(3, 0, 0))
    assert region.expanded(1).contains(Coord(3, -1, 1))


def test_occupied_excludes_empty_and_unknown():
    assert not CellKind.EMPTY.is_occupied
    assert not CellKind.UNKNOWN.is_occupied
    assert all(k.is_occupied for k in (CellKind.SOLID, CellKind.CLIMBABLE, CellKind.OTHER_SOLID))


def test_cell_of_floors_negative_positions():
    assert cell_of((-0.2, 64.0, -3.7)) == Coord(-1, 64, -4)
    assert cell_of((1.99, 0.5, 0.0)) == Coord(1, 0, 0)


def test_sort_by_distance_is_stable_for_ties():
    a, b, c = Coord(1, 0, 0), Coord(-1, 0, 0), Coord(3, 0, 0)

    # a and b are equidistant from the centre of (0, 0, 0)
    assert sort_by_distance([c, a, b], (0.5, 0.0, 0.5)) == [a, b, c]
    assert sort_by_distance([c, b, a], (0.5, 0.0, 0.5)) == [b, a, c]


def test_tracer_keeps_bounded_history(caplog):
    tracer = MoveTracer(max_records=2)
    caplog.set_level(logging.INFO, logger="blockwalker.move")

    for x in range(3):
        tracer.record(
            step=Coord(x, 0, 0),
            result=MoveResult(success=x != 1, error=None if x != 1 else "move_refused", details={}),
            duration_s=0.01,
            run_id="r1",
            target=Coord(5, 0, 0),
        )

    records = tracer.get_records()
    assert [r.step for r in records] == [Coord(1, 0, 0), Coord(2, 0, 0)]
    assert records[0].error == "move_refused"
    assert "move_step run=r1 target=5, 0, 0 step=(2,0,0)" in caplog.text


def test_resolve_level():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(logging.WARNING) == logging.WARNING
    with pytest.raises(ValueError):
        resolve_level("chatty")
