# Environment collaborator interfaces
# src/contracts/world.py

from __future__ import annotations

from typing import Optional, Protocol, Tuple

from .types import CellKind, Coord


class GridView(Protocol):
    """Read-only view over the voxel world.

    Implementations are owned by the environment and must only be called
    on its own thread; the walker reaches them through an EnvironmentContext.
    """

    def cell_kind_at(self, coord: Coord) -> CellKind:
        """Classify the cell at `coord`. Unloaded cells return UNKNOWN."""
        ...


class AgentPose(Protocol):
    """Where the agent currently is."""

    def position(self) -> Optional[Tuple[float, float, float]]:
        """
        Return the agent's (x, y, z) in world units, or None when there is
        no agent (not in a world, disconnected, respawning).
        """
        ...


class PathExecutor(Protocol):
    """Physically moves the agent."""

    def move_to(self, coord: Coord) -> bool:
        """
        Move the agent onto cell `coord` (standing at its horizontal centre).

        Returns True once the move has been applied, False if refused.
        """
        ...


class Notifier(Protocol):
    """One-way text notices for the human operator."""

    def notify(self, message: str) -> None:
        """Show `message`. Must not block waiting for acknowledgement."""
        ...
