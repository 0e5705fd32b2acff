"""Decide whether a message comes from a bot that posts unsynced notifications."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

logger = logging.getLogger(__name__)


class OriginFilter:
    """Allow-list check on the sender (bot) id of an inbound message."""

    def __init__(self, allowed_sender_ids: Iterable[str]) -> None:
        self.allowed_sender_ids = frozenset(sid for sid in allowed_sender_ids if sid)
        if not self.allowed_sender_ids:
            logger.warning("No unsynced emitter ids configured; every message will be ignored")

    def is_eligible(self, sender_id: Optional[str]) -> bool:
        """Return True if the sender is one of the configured notification bots."""
        if not sender_id:
            return False
        return sender_id in self.allowed_sender_ids
