# tests/conftest.py

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Callable

import pytest

# Ensure src/ is on sys.path for test imports like `import blockwalker`, `import env`.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_ROOT = PROJECT_ROOT / "src"

if str(SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(SRC_ROOT))

from contracts.types import Coord, Region  # noqa: E402
from env.schema import WalkerConfig  # noqa: E402


@pytest.fixture
def project_root() -> Path:
    return PROJECT_ROOT


@pytest.fixture
def fast_config() -> Callable[..., WalkerConfig]:
    """WalkerConfig factory with pacing turned off."""

    def _make(region: Region, **overrides) -> WalkerConfig:
        values = dict(region=region, inter_target_delay_ms=0, step_delay_ms=0)
        values.update(overrides)
        return WalkerConfig(**values)

    return _make


def wait_for(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
    """Poll `predicate` until true or `timeout` seconds pass."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


def line_region(x_max: int) -> Region:
    return Region(Coord(0, 0, 0), Coord(x_max, 0, 0))
