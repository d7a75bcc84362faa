from __future__ import annotations

import logging

from .config import PRESENCE_TIMEOUT_MS


logger = logging.getLogger(__name__)


class PresenceTracker:
    """
    Turns landmark arrival times into a paused/running flag.

    The game starts paused. Any landmark resumes it immediately; it pauses again once
    more than `timeout_ms` has passed since the last landmark. Both methods return True
    only on the edge they cause, so callers can hang side effects off the transition.
    """

    def __init__(self, timeout_ms: float = PRESENCE_TIMEOUT_MS) -> None:
        self.timeout_ms = timeout_ms
        self.last_seen_ms = 0.0
        self.paused = True

    def on_landmark(self, timestamp_ms: float) -> bool:
        self.last_seen_ms = timestamp_ms
        if self.paused:
            self.paused = False
            logger.info("hand detected at %.0f ms, resuming", timestamp_ms)
            return True
        return False

    def tick(self, now_ms: float) -> bool:
        if self.paused:
            return False
        if now_ms - self.last_seen_ms > self.timeout_ms:
            self.paused = True
            logger.info("no hand since %.0f ms, pausing at %.0f ms", self.last_seen_ms, now_ms)
            return True
        return False
