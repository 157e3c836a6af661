# standability rule and movement graph over a GridView
# src/blockwalker/nav/grid.py
"""
NavGrid: standability and movement rules over a read-only GridView.

This module does not know block identities. It only sees CellKind values
produced by the GridView adapter, and it never mutates the world.

Movement model (no flight, no gap jumping):
- walk: same-height move into a standable horizontal neighbor
- step up: onto the cell above a horizontal neighbor, if that cell is
  standable and there is head clearance above the current cell
- drop: 1..max_drop levels, straight down or off an edge into a
  horizontal neighbor column, landing on the first standable cell

In practice every descent is an edge drop. Any cell the search reaches is
standable, so the cell below it is occupied and the straight-down column
never yields a landing; that branch only matters for a start cell the
agent occupies mid-air.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from contracts.types import CellKind, Coord, Region
from contracts.world import GridView


log = logging.getLogger(__name__)

# Offsets in x-z plane
HORIZONTAL_OFFSETS = ((1, 0), (-1, 0), (0, 1), (0, -1))


@dataclass
class NavGrid:
    """
    Navigation rules built on top of a GridView.

    Responsibilities:
    - Decide whether the agent can stand in a cell (can_stand).
    - Enumerate legal single-move neighbors for pathfinding.

    `region` is the working region; climbable cells inside it do not count
    as floor, so ladders that belong to the explored structure are never
    treated as somewhere to stand.
    """

    grid: GridView
    region: Region
    max_drop: int = 3

    # ------------------------------------------------------------------
    # Core queries
    # ------------------------------------------------------------------

    def kind_at(self, coord: Coord) -> CellKind:
        """
        Classify a cell, mapping any lookup failure to UNKNOWN.

        This is the only place GridView -> CellKind happens for navigation.
        """
        try:
            kind = self.grid.cell_kind_at(coord)
        except Exception:
            log.debug("cell lookup failed at %s", coord, exc_info=True)
            return CellKind.UNKNOWN
        if not isinstance(kind, CellKind):
            return CellKind.UNKNOWN
        return kind

    def can_stand(self, pos: Coord) -> bool:
        """
        Determine if the agent can occupy `pos`.

        Rule:
        - cell at pos is EMPTY
        - cell below is resolved and not EMPTY
        - cell below is not a climbable inside the working region
        """
        if self.kind_at(pos) is not CellKind.EMPTY:
            return False

        below = pos.down()
        below_kind = self.kind_at(below)
        if not below_kind.is_occupied:
            return False
        if below_kind is CellKind.CLIMBABLE and self.region.contains(below):
            return False
        return True

    def neighbors(self, pos: Coord) -> List[Coord]:
        """Return every cell reachable from `pos` in exactly one move."""
        out: List[Coord] = []
        head_clear = self.kind_at(pos.up()) is CellKind.EMPTY

        for dx, dz in HORIZONTAL_OFFSETS:
            horiz = pos.offset(dx=dx, dz=dz)
            if self.can_stand(horiz):
                out.append(horiz)
                continue

            up1 = horiz.up()
            if head_clear and self.can_stand(up1):
                out.append(up1)
                continue

            # Walking off an edge: the body must fit through the neighbor cell.
            if self.kind_at(horiz) is CellKind.EMPTY:
                landing = self._find_fall_target(horiz)
                if landing is not None:
                    out.append(landing)

        landing = self._find_fall_target(pos)
        if landing is not None:
            out.append(landing)

        return out

    def is_single_move(self, a: Coord, b: Coord) -> bool:
        """True if `b` is reachable from `a` by exactly one legal move."""
        return b in self.neighbors(a)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _find_fall_target(self, column_top: Coord) -> Optional[Coord]:
        """
        Find the landing cell when dropping down from `column_top`.

        Scans column_top.down(1) .. column_top.down(max_drop) and stops at
        the first standable cell. Never falls through a non-empty cell.
        """
        for depth in range(1, self.max_drop + 1):
            cell = column_top.down(depth)
            if self.can_stand(cell):
                return cell
            if self.kind_at(cell) is not CellKind.EMPTY:
                return None
        return None
