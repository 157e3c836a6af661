# src/blockwalker/logging_config.py
"""
Logging setup for BlockWalker entrypoints.

Library modules only ever call logging.getLogger(__name__). Entrypoints
(the offline CLI, a game-client bridge) call configure_logging() once:

    from blockwalker.logging_config import configure_logging
    configure_logging("DEBUG")
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def resolve_level(level: Union[int, str]) -> int:
    """Accept logging.DEBUG or "debug"; unknown names raise ValueError."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    stream: Optional[IO[str]] = None,
    quiet_moves: bool = False,
) -> None:
    """
    Attach a stdout handler to the root logger unless one already exists.

    quiet_moves raises the per-step "blockwalker.move" trace logger to
    WARNING, which keeps long runs readable at INFO.
    """
    root = logging.getLogger()
    resolved = resolve_level(level)

    if not root.handlers:
        handler = logging.StreamHandler(stream=stream or sys.stdout)
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
        root.addHandler(handler)
    root.setLevel(resolved)

    if quiet_moves:
        logging.getLogger("blockwalker.move").setLevel(logging.WARNING)
