# core shared types: Coord, Region, CellKind, MoveResult
# src/contracts/types.py

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterator, NamedTuple, Optional, Sequence


# ---------------------------------------------------------------------------
# Grid primitives
# ---------------------------------------------------------------------------

class Coord(NamedTuple):
    """Integer grid cell coordinate. Hashable, compared by value."""
    x: int
    y: int
    z: int

    def offset(self, dx: int = 0, dy: int = 0, dz: int = 0) -> "Coord":
        return Coord(self.x + dx, self.y + dy, self.z + dz)

    def up(self, n: int = 1) -> "Coord":
        return Coord(self.x, self.y + n, self.z)

    def down(self, n: int = 1) -> "Coord":
        return Coord(self.x, self.y - n, self.z)

    def short_str(self) -> str:
        """Render as "x, y, z" for chat-style notices."""
        return f"{self.x}, {self.y}, {self.z}"


class CellKind(Enum):
    """Classification of a queried cell.

    Produced by the GridView adapter; the core never looks at raw block
    identities. UNKNOWN covers unloaded chunks and failed reads and is
    never standable.
    """
    EMPTY = "empty"
    SOLID = "solid"
    CLIMBABLE = "climbable"          # ladder-like
    OTHER_SOLID = "other_solid"
    UNKNOWN = "unknown"

    @property
    def is_empty(self) -> bool:
        return self is CellKind.EMPTY

    @property
    def is_occupied(self) -> bool:
        """Resolved and non-empty."""
        return self not in (CellKind.EMPTY, CellKind.UNKNOWN)


@dataclass(frozen=True)
class Region:
    """Inclusive axis-aligned box of cells.

    Invariant: min_corner <= max_corner on every axis. Use from_corners()
    when the corners come from user input in arbitrary order.
    """
    min_corner: Coord
    max_corner: Coord

    def __post_init__(self) -> None:
        for lo, hi in zip(self.min_corner, self.max_corner):
            if lo > hi:
                raise ValueError(
                    f"Region min {tuple(self.min_corner)} exceeds max "
                    f"{tuple(self.max_corner)}"
                )

    @classmethod
    def from_corners(cls, a: Sequence[int], b: Sequence[int]) -> "Region":
        if len(a) != 3 or len(b) != 3:
            raise ValueError(f"Region corners must be (x, y, z) triples, got {a!r}, {b!r}")
        lo = Coord(*(min(int(p), int(q)) for p, q in zip(a, b)))
        hi = Coord(*(max(int(p), int(q)) for p, q in zip(a, b)))
        return cls(lo, hi)

    def contains(self, c: Coord) -> bool:
        lo, hi = self.min_corner, self.max_corner
        return (
            lo.x <= c.x <= hi.x
            and lo.y <= c.y <= hi.y
            and lo.z <= c.z <= hi.z
        )

    def expanded(self, margin: int) -> "Region":
        """Grow the box by `margin` cells on every side."""
        return Region(
            self.min_corner.offset(-margin, -margin, -margin),
            self.max_corner.offset(margin, margin, margin),
        )

    def __iter__(self) -> Iterator[Coord]:
        """Yield every cell, x outermost, then y, then z."""
        lo, hi = self.min_corner, self.max_corner
        for x in range(lo.x, hi.x + 1):
            for y in range(lo.y, hi.y + 1):
                for z in range(lo.z, hi.z + 1):
                    yield Coord(x, y, z)

    def __len__(self) -> int:
        lo, hi = self.min_corner, self.max_corner
        return (hi.x - lo.x + 1) * (hi.y - lo.y + 1) * (hi.z - lo.z + 1)


# ---------------------------------------------------------------------------
# Execution results
# ---------------------------------------------------------------------------

@dataclass
class MoveResult:
    """Result of moving the agent one path step."""
    success: bool                           # did the agent arrive?
    error: Optional[str]                    # error code if not
    details: Dict[str, Any]                 # optional extra info (e.g. duration)
