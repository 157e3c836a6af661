# WalkerConfig dataclass
# src/env/schema.py

from __future__ import annotations

from dataclasses import dataclass

from contracts.types import Coord, Region


# Cube the walker was first built around.
DEFAULT_REGION = Region(Coord(13, 29, -166), Coord(33, 41, -146))


@dataclass(frozen=True)
class WalkerConfig:
    """Resolved tunables for one walker profile."""
    name: str = "default"
    start_token: str = ".start"
    region: Region = DEFAULT_REGION
    max_drop: int = 3                     # levels the agent may fall in one move
    iteration_cap: int = 20_000           # A* expansions per search
    inter_target_delay_ms: int = 300      # pacing between targets
    per_step_timeout_ms: int = 2_000      # wait for one environment round-trip
    step_delay_ms: int = 150              # pacing between path steps
    scan_timeout_ms: int = 10_000         # wait for the batched region scan

    @property
    def per_step_timeout_s(self) -> float:
        return self.per_step_timeout_ms / 1000.0

    @property
    def scan_timeout_s(self) -> float:
        return self.scan_timeout_ms / 1000.0
