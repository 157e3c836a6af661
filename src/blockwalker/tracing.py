# src/blockwalker/tracing.py
"""
Tracing for path execution.

A thin, structured logging layer around every path step the walker sends
to the environment, so monitoring tools can see what was actually moved.

It does NOT:
- Decide whether a path succeeded
- Retry moves
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Optional

from contracts.types import Coord, MoveResult


@dataclass
class MoveTraceRecord:
    """Structured record of a single path step."""

    timestamp: float           # wall-clock time (time.time())
    duration_s: float          # round-trip duration in seconds

    run_id: Optional[str]
    target: Optional[Coord]
    step: Coord

    success: bool
    error: Optional[str]


class MoveTracer:
    """
    In-memory move tracer with logging.

    Responsibilities:
    - Keep a rolling buffer of recent MoveTraceRecord entries.
    - Emit a single structured log line per step (info level).
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 10_000,
    ) -> None:
        self._logger = logger or logging.getLogger("blockwalker.move")
        self._records: Deque[MoveTraceRecord] = deque(maxlen=max_records)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(
        self,
        *,
        step: Coord,
        result: MoveResult,
        duration_s: float,
        run_id: Optional[str] = None,
        target: Optional[Coord] = None,
    ) -> None:
        """
        Record a trace for a finished step.

        Called on failures too; `success` and `error` capture the outcome.
        """
        record = MoveTraceRecord(
            timestamp=time.time(),
            duration_s=duration_s,
            run_id=run_id,
            target=target,
            step=step,
            success=bool(result.success),
            error=result.error,
        )
        self._records.append(record)

        self._logger.info(
            "move_step run=%s target=%s step=(%d,%d,%d) success=%s error=%s "
            "duration=%.4fs",
            record.run_id,
            target.short_str() if target is not None else None,
            step.x,
            step.y,
            step.z,
            record.success,
            record.error,
            record.duration_s,
        )

    def get_records(self) -> List[MoveTraceRecord]:
        """Return a snapshot of all currently buffered records."""
        return list(self._records)
