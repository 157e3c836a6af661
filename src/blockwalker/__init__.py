# blockwalker package
# src/blockwalker/__init__.py
"""
BlockWalker: visit every block of a region on foot.

Exports:
    - RunController / RunReport / RunPhase: the scan -> plan -> walk loop
    - ChatTrigger: start-token adapter for a chat hook
    - EnvironmentContext / InlineContext: request channel to the environment
    - WalkerError and its subclasses
"""

from __future__ import annotations

from .context import (
    EnvironmentContext,
    EnvironmentUnavailableError,
    InlineContext,
    StepTimeoutError,
    WalkerError,
)
from .controller import RunController, RunPhase, RunReport
from .trigger import ChatTrigger

__all__ = [
    "RunController",
    "RunPhase",
    "RunReport",
    "ChatTrigger",
    "EnvironmentContext",
    "InlineContext",
    "WalkerError",
    "StepTimeoutError",
    "EnvironmentUnavailableError",
]
