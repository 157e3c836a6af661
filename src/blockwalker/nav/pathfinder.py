# A* pathfinding over NavGrid
# src/blockwalker/nav/pathfinder.py
"""
A* pathfinding over NavGrid.

- Step cost: squared Euclidean length of the move.
- Heuristic: Euclidean distance to the goal.
- Moves: walk, step up, bounded drop (see NavGrid.neighbors).
- max_steps caps node expansions; hitting it is a failed search.

The two metrics differ, so the heuristic is not strictly admissible
against the accumulated cost on multi-level moves. Path choice at ties can
differ from a true shortest path; every returned step is still a legal move.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Set, Tuple

from contracts.types import CellKind, Coord
from .grid import NavGrid


log = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 20_000


@dataclass
class PathfindingResult:
    """Structured result for a pathfinding attempt."""

    path: List[Coord]
    success: bool
    reason: str | None = None
    expanded: int = 0


def _heuristic(a: Coord, b: Coord) -> float:
    """Euclidean distance heuristic for A*."""
    return math.sqrt(_step_cost(a, b))


def _step_cost(a: Coord, b: Coord) -> float:
    dx = a.x - b.x
    dy = a.y - b.y
    dz = a.z - b.z
    return float(dx * dx + dy * dy + dz * dz)


def _failed(reason: str, expanded: int = 0) -> PathfindingResult:
    return PathfindingResult(path=[], success=False, reason=reason, expanded=expanded)


def find_path(
    nav: NavGrid,
    start: Coord,
    goal: Coord,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> PathfindingResult:
    """
    A* search for a path from start to goal on NavGrid.

    Returns a PathfindingResult with:
      - path: start..goal inclusive on success, empty otherwise
      - success: bool
      - reason: if not success, one of
          start_unresolved, goal_unresolved, goal_not_standable,
          no_path_found, max_steps_exhausted

    This function does not move the agent or mutate world state.
    """
    if nav.kind_at(start) is CellKind.UNKNOWN:
        return _failed("start_unresolved")
    if nav.kind_at(goal) is CellKind.UNKNOWN:
        return _failed("goal_unresolved")
    if not nav.can_stand(goal):
        return _failed("goal_not_standable")
    if start == goal:
        return PathfindingResult(path=[start], success=True)

    # (f, insertion order, coord); the counter keeps ties stable.
    counter = itertools.count()
    open_heap: List[Tuple[float, int, Coord]] = []
    heapq.heappush(open_heap, (_heuristic(start, goal), next(counter), start))

    came_from: Dict[Coord, Coord] = {}
    g_score: Dict[Coord, float] = {start: 0.0}
    closed: Set[Coord] = set()

    expanded = 0

    while open_heap:
        if expanded >= max_steps:
            log.debug("find_path %s -> %s hit cap after %d expansions", start, goal, expanded)
            return _failed("max_steps_exhausted", expanded)

        _, _, current = heapq.heappop(open_heap)
        if current in closed:
            # stale heap entry superseded by a cheaper push
            continue

        if current == goal:
            return PathfindingResult(
                path=_reconstruct_path(came_from, current),
                success=True,
                expanded=expanded,
            )

        closed.add(current)
        expanded += 1

        for nxt in nav.neighbors(current):
            if nxt in closed:
                continue
            tentative_g = g_score[current] + _step_cost(current, nxt)

            if tentative_g < g_score.get(nxt, math.inf):
                came_from[nxt] = current
                g_score[nxt] = tentative_g
                f_score = tentative_g + _heuristic(nxt, goal)
                heapq.heappush(open_heap, (f_score, next(counter), nxt))

    return _failed("no_path_found", expanded)


def _reconstruct_path(
    came_from: Dict[Coord, Coord],
    current: Coord,
) -> List[Coord]:
    """Reconstruct full path from came_from map."""
    path: List[Coord] = [current]
    while current in came_from:
        current = came_from[current]
        path.append(current)
    path.reverse()
    return path
