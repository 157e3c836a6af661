# src/blockwalker/testing/fakes.py
"""
Test helpers for BlockWalker.

Provides:
- RecordingNotifier: keeps every notice, optional callback per notice
- StallingExecutor: PathExecutor whose moves block until released
- flat_world: InMemoryGrid with a solid floor under a region
"""

from __future__ import annotations

import threading
from typing import Callable, List, Optional

from contracts.types import CellKind, Coord, Region
from ..offline import InMemoryGrid


class RecordingNotifier:
    """In-memory Notifier used for unit and integration tests."""

    def __init__(self, on_notice: Optional[Callable[[str], None]] = None) -> None:
        self.messages: List[str] = []
        self._on_notice = on_notice

    def notify(self, message: str) -> None:
        self.messages.append(message)
        if self._on_notice is not None:
            self._on_notice(message)

    # ------------------------------------------------------------------
    # Test-only helpers
    # ------------------------------------------------------------------

    def containing(self, text: str) -> List[str]:
        return [m for m in self.messages if text in m]


class StallingExecutor:
    """
    PathExecutor that blocks inside move_to until `release` is set.

    Lets tests drive a per-step timeout on a threaded EnvironmentContext.
    """

    def __init__(self) -> None:
        self.release = threading.Event()
        self.calls: List[Coord] = []

    def move_to(self, coord: Coord) -> bool:
        self.calls.append(Coord(*coord))
        self.release.wait(5.0)
        return True


def flat_world(region: Region, floor_y: Optional[int] = None, margin: int = 2) -> InMemoryGrid:
    """
    Solid floor one below `region` (or at `floor_y`), extended by `margin`
    cells around the region's x-z footprint.
    """
    lo, hi = region.min_corner, region.max_corner
    y = lo.y - 1 if floor_y is None else floor_y
    grid = InMemoryGrid()
    grid.floor(y, (lo.x - margin, lo.z - margin), (hi.x + margin, hi.z + margin), CellKind.SOLID)
    return grid
