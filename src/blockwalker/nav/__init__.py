# src/blockwalker/nav/__init__.py
"""
Navigation subsystem for BlockWalker.

Provides:
- NavGrid: standability and single-move neighbors over a GridView
- access_points_for: cells from which a target can be reached
- A* pathfinding: find_path
"""

from __future__ import annotations

from .grid import NavGrid
from .access import access_points_for
from .pathfinder import DEFAULT_MAX_STEPS, PathfindingResult, find_path

__all__ = [
    "NavGrid",
    "access_points_for",
    "DEFAULT_MAX_STEPS",
    "PathfindingResult",
    "find_path",
]
