# src/blockwalker/scanner.py
"""Target discovery: every occupied cell inside a region."""

from __future__ import annotations

import logging
from typing import List

from contracts.types import CellKind, Coord, Region
from contracts.world import GridView


log = logging.getLogger(__name__)


def scan_targets(grid: GridView, region: Region) -> List[Coord]:
    """
    Return the occupied cells of `region` in x, y, z order.

    Unresolved (UNKNOWN) cells are skipped. If the world cannot be read at
    all, the scan yields an empty list instead of failing the run.
    """
    targets: List[Coord] = []
    skipped = 0
    try:
        for coord in region:
            kind = grid.cell_kind_at(coord)
            if kind is CellKind.UNKNOWN:
                skipped += 1
            elif kind.is_occupied:
                targets.append(coord)
    except Exception:
        log.warning("world unavailable during scan of %s", region, exc_info=True)
        return []

    if skipped:
        log.info("scan skipped %d unresolved cells", skipped)
    log.debug("scan found %d targets in %d cells", len(targets), len(region))
    return targets
