# tests/test_nav_access_points.py
"""Access point derivation around single targets."""

from __future__ import annotations

from contracts.types import CellKind, Coord, Region
from blockwalker.nav import NavGrid, access_points_for
from blockwalker.offline import InMemoryGrid
from blockwalker.testing.fakes import flat_world


SCENARIO_REGION = Region(Coord(0, 0, 0), Coord(2, 0, 2))


def scenario_nav() -> NavGrid:
    grid = flat_world(SCENARIO_REGION)
    grid.set((1, 0, 1), CellKind.SOLID)
    return NavGrid(grid=grid, region=SCENARIO_REGION)


def test_single_block_yields_four_horizontal_access_points() -> None:
    nav = scenario_nav()

    points = access_points_for(nav, Coord(1, 0, 1))

    assert sorted(points) == sorted([
        Coord(0, 0, 1),
        Coord(2, 0, 1),
        Coord(1, 0, 0),
        Coord(1, 0, 2),
    ])


def test_stand_on_top_needs_occupied_cell_two_above() -> None:
    nav = scenario_nav()
    nav.grid.set((1, 2, 1), CellKind.SOLID)

    points = access_points_for(nav, Coord(1, 0, 1))

    assert Coord(1, 1, 1) in points
    assert len(points) == 5


def test_cell_below_a_floating_target() -> None:
    grid = flat_world(SCENARIO_REGION)
    grid.set((1, 0, 1), CellKind.SOLID)     # pedestal
    grid.set((1, 2, 1), CellKind.SOLID)     # target, one gap above the pedestal
    nav = NavGrid(grid=grid, region=Region(Coord(0, 0, 0), Coord(2, 2, 2)))

    assert access_points_for(nav, Coord(1, 2, 1)) == [Coord(1, 1, 1)]


def test_climbable_support_inside_region_excludes_neighbor() -> None:
    region = Region(Coord(0, -1, 0), Coord(2, 0, 2))
    grid = flat_world(SCENARIO_REGION)
    grid.set((1, 0, 1), CellKind.SOLID)
    grid.set((0, -1, 1), CellKind.CLIMBABLE)
    nav = NavGrid(grid=grid, region=region)

    points = access_points_for(nav, Coord(1, 0, 1))

    assert Coord(0, 0, 1) not in points
    assert len(points) == 3


def test_every_non_top_access_point_is_standable() -> None:
    nav = scenario_nav()
    nav.grid.set((1, 2, 1), CellKind.SOLID)
    nav.grid.set((2, 0, 1), CellKind.OTHER_SOLID)
    target = Coord(1, 0, 1)

    for p in access_points_for(nav, target):
        if p == target.up():
            assert nav.kind_at(target.up()) is CellKind.EMPTY
            assert nav.kind_at(target.up(2)).is_occupied
        else:
            assert nav.can_stand(p)


def test_unavailable_world_yields_no_access_points() -> None:
    grid = InMemoryGrid({Coord(1, 0, 1): CellKind.SOLID})
    grid.available = False
    nav = NavGrid(grid=grid, region=SCENARIO_REGION)

    assert access_points_for(nav, Coord(1, 0, 1)) == []
