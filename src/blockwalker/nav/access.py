# access points around a target cell
# src/blockwalker/nav/access.py
"""
Access point derivation.

An access point is a cell from which the agent can be next to a target:
- a horizontal neighbor or the cell below the target, when standable
- the cell on top of the target ("stand on top"), when the cell above the
  target is empty and the cell two above is occupied

Order of the result is unspecified; the run controller re-sorts by distance.
"""

from __future__ import annotations

from typing import List

from contracts.types import CellKind, Coord
from .grid import HORIZONTAL_OFFSETS, NavGrid


def access_points_for(nav: NavGrid, target: Coord) -> List[Coord]:
    """
    Return every access point for `target`, possibly none.

    World lookup failures surface as UNKNOWN through NavGrid.kind_at and
    simply exclude the affected cells.
    """
    candidates = [target.offset(dx=dx, dz=dz) for dx, dz in HORIZONTAL_OFFSETS]
    candidates.append(target.down())

    points: List[Coord] = [
        c for c in candidates
        if nav.kind_at(c) is CellKind.EMPTY and nav.can_stand(c)
    ]

    above = target.up()
    if nav.kind_at(above) is CellKind.EMPTY and nav.kind_at(target.up(2)).is_occupied:
        points.append(above)

    return points
