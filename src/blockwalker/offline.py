# src/blockwalker/offline.py
"""
In-memory environment for running the walker without a game client.

Provides:
- InMemoryGrid: GridView backed by a dict of non-empty cells
- SimulatedAgent: AgentPose + PathExecutor that teleports between cells
- load_scene / scene_from_mapping: build both from a YAML scene

Scene format:

    agent: [0.5, 0, 0.5]           # world position
    floor: {y: -1, min: [-2, -2], max: [4, 4]}   # optional solid slab (x, z)
    blocks:
      - {at: [1, 0, 1], kind: solid}
      - {from: [3, 0, 0], to: [3, 2, 0], kind: climbable}
    walker:                        # optional, same keys as a walker.yaml profile
      region: {min: [0, 0, 0], max: [2, 0, 2]}
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from contracts.types import CellKind, Coord, Region
from env.loader import config_from_mapping
from env.schema import WalkerConfig


log = logging.getLogger(__name__)


class InMemoryGrid:
    """
    Dict-backed GridView. Cells not listed are EMPTY.

    Setting `available = False` makes every lookup raise, which is how an
    unloaded world looks to the walker.
    """

    def __init__(self, cells: Optional[Mapping[Coord, CellKind]] = None) -> None:
        self._cells: Dict[Coord, CellKind] = dict(cells or {})
        self.available = True
        self.lookups = 0

    def cell_kind_at(self, coord: Coord) -> CellKind:
        if not self.available:
            raise RuntimeError("world not loaded")
        self.lookups += 1
        return self._cells.get(Coord(*coord), CellKind.EMPTY)

    def set(self, coord: Tuple[int, int, int], kind: CellKind) -> None:
        c = Coord(*coord)
        if kind is CellKind.EMPTY:
            self._cells.pop(c, None)
        else:
            self._cells[c] = kind

    def fill(self, region: Region, kind: CellKind) -> None:
        for c in region:
            self.set(c, kind)

    def floor(self, y: int, min_xz: Tuple[int, int], max_xz: Tuple[int, int],
              kind: CellKind = CellKind.SOLID) -> None:
        """Lay a one-cell-thick slab at height `y`."""
        self.fill(
            Region.from_corners((min_xz[0], y, min_xz[1]), (max_xz[0], y, max_xz[1])),
            kind,
        )

    def occupied(self) -> List[Coord]:
        return sorted(self._cells)


@dataclass
class SimulatedAgent:
    """
    Agent that jumps straight to each requested cell.

    `refuse` holds cells the agent will not enter (move_to returns False).
    `on_move` is called after every accepted move, e.g. to stop a run.
    """

    pos: Optional[Tuple[float, float, float]] = (0.5, 0.0, 0.5)
    refuse: set = field(default_factory=set)
    on_move: Optional[Callable[[Coord], None]] = None
    moves: List[Coord] = field(default_factory=list)

    def position(self) -> Optional[Tuple[float, float, float]]:
        return self.pos

    def move_to(self, coord: Coord) -> bool:
        coord = Coord(*coord)
        if self.pos is None or coord in self.refuse:
            return False
        self.pos = (coord.x + 0.5, float(coord.y), coord.z + 0.5)
        self.moves.append(coord)
        if self.on_move is not None:
            self.on_move(coord)
        return True

    def place_at(self, coord: Tuple[int, int, int]) -> None:
        c = Coord(*coord)
        self.pos = (c.x + 0.5, float(c.y), c.z + 0.5)


# ---------------------------------------------------------------------------
# Scenes
# ---------------------------------------------------------------------------

_KINDS = {k.value: k for k in CellKind if k is not CellKind.EMPTY}


def _parse_kind(raw: Any) -> CellKind:
    key = str(raw or "solid").lower()
    if key not in _KINDS:
        raise ValueError(f"Unknown block kind {raw!r}; expected one of {sorted(_KINDS)}")
    return _KINDS[key]


def scene_from_mapping(
    raw: Mapping[str, Any],
    base: Optional[WalkerConfig] = None,
) -> Tuple[InMemoryGrid, SimulatedAgent, WalkerConfig]:
    """Build (grid, agent, config) from a parsed scene."""
    grid = InMemoryGrid()

    floor = raw.get("floor")
    if floor:
        grid.floor(int(floor["y"]), tuple(floor["min"]), tuple(floor["max"]),
                   _parse_kind(floor.get("kind")))

    for entry in raw.get("blocks") or []:
        kind = _parse_kind(entry.get("kind"))
        if "at" in entry:
            grid.set(tuple(entry["at"]), kind)
        elif "from" in entry and "to" in entry:
            grid.fill(Region.from_corners(entry["from"], entry["to"]), kind)
        else:
            raise ValueError(f"Block entry needs 'at' or 'from'/'to': {entry!r}")

    agent_raw = raw.get("agent", [0.5, 0.0, 0.5])
    agent = SimulatedAgent(pos=(float(agent_raw[0]), float(agent_raw[1]), float(agent_raw[2])))

    walker_raw = raw.get("walker")
    if walker_raw:
        config = config_from_mapping(walker_raw, name="scene")
    else:
        config = base or WalkerConfig()

    log.debug("scene loaded: %d occupied cells", len(grid.occupied()))
    return grid, agent, config


def load_scene(
    path: Path,
    base: Optional[WalkerConfig] = None,
) -> Tuple[InMemoryGrid, SimulatedAgent, WalkerConfig]:
    if not path.exists():
        raise FileNotFoundError(f"Missing scene file: {path}")
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(raw)}")
    return scene_from_mapping(raw, base)
