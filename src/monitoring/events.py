# path: src/monitoring/events.py
"""
Event schema for BlockWalker monitoring.

This module defines:
- EventType enum
- MonitoringEvent (structured run events)

All events are JSON-serializable via `.to_dict()` and are intended for
use with monitoring.bus.EventBus and monitoring.logger.JsonFileLogger.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional


# ============================================================
# Event Types
# ============================================================

class EventType(Enum):
    """Typed monitoring events emitted by the walker."""

    # Run lifecycle
    RUN_STARTED = auto()
    TARGETS_SCANNED = auto()
    RUN_FINISHED = auto()

    # Per-target outcome
    TARGET_VISITED = auto()
    TARGET_UNREACHABLE = auto()

    # World or agent could not be resolved; the run aborts
    ENVIRONMENT_UNAVAILABLE = auto()

    # Generic log messages
    LOG = auto()


# ============================================================
# Monitoring Event Structure
# ============================================================

@dataclass
class MonitoringEvent:
    """
    Runtime event emitted by the run controller.

    All fields must be JSON-safe.
    """

    ts: float                   # UNIX timestamp (seconds)
    module: str                 # Source module string ("blockwalker.controller", ...)
    event_type: EventType       # Enum describing the event class
    message: str                # Short human-readable description
    payload: Dict[str, Any]     # Structured data (target, counts, reason)
    correlation_id: Optional[str] = None  # Run id grouping events of one run

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-safe dict for loggers."""
        data = asdict(self)
        data["event_type"] = self.event_type.name  # store name, not enum
        return data
