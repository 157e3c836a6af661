# src/blockwalker/trigger.py
"""Chat-command trigger: an exact start token starts a run."""

from __future__ import annotations

import logging
from typing import Optional

from .controller import RunController


log = logging.getLogger(__name__)


class ChatTrigger:
    """
    Adapter from outgoing chat messages to RunController.trigger().

    The game-client bridge registers on_message() with its chat hook.
    Only an exact match (surrounding whitespace ignored) counts.
    """

    def __init__(self, controller: RunController, token: Optional[str] = None) -> None:
        self._controller = controller
        self._token = (token or controller.config.start_token).strip()

    @property
    def token(self) -> str:
        return self._token

    def on_message(self, text: str) -> bool:
        """Return True only if this message started a new run."""
        if text.strip() != self._token:
            return False
        started = self._controller.trigger()
        log.info("start token received; run %s", "started" if started else "already active")
        return started
