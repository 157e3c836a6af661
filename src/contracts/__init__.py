# src/contracts/__init__.py

from __future__ import annotations

"""
Shared types and collaborator interfaces for BlockWalker.

Re-exports:
  - grid primitives (Coord, Region, CellKind)
  - MoveResult for per-step execution outcomes
  - environment Protocols (GridView, AgentPose, PathExecutor, Notifier)
"""

from .types import CellKind, Coord, MoveResult, Region
from .world import AgentPose, GridView, Notifier, PathExecutor

__all__ = [
    "CellKind",
    "Coord",
    "MoveResult",
    "Region",
    "AgentPose",
    "GridView",
    "Notifier",
    "PathExecutor",
]
