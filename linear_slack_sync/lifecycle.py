"""Process lifecycle: readiness state, in-flight drain, Slack connect/close."""

from __future__ import annotations

import asyncio
import logging
import threading
import time
from contextlib import asynccontextmanager, contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


class ServiceState:
    """Readiness and uptime, shared with the health surface only."""

    def __init__(self) -> None:
        self.started_at = time.monotonic()
        self._ready = threading.Event()

    @property
    def slack_connected(self) -> bool:
        return self._ready.is_set()

    def mark_ready(self) -> None:
        self._ready.set()

    def mark_not_ready(self) -> None:
        self._ready.clear()

    @property
    def uptime_seconds(self) -> int:
        return int(time.monotonic() - self.started_at)


class InFlightTracker:
    """Count pipeline runs in progress so shutdown can wait for them."""

    def __init__(self) -> None:
        self._count = 0
        self._idle = threading.Condition()

    @property
    def in_flight(self) -> int:
        with self._idle:
            return self._count

    @contextmanager
    def track(self) -> Iterator[None]:
        with self._idle:
            self._count += 1
        try:
            yield
        finally:
            with self._idle:
                self._count -= 1
                if self._count == 0:
                    self._idle.notify_all()

    def wait_idle(self, timeout: float) -> bool:
        """Block until no run is in flight; False if the timeout elapsed first."""
        with self._idle:
            return self._idle.wait_for(lambda: self._count == 0, timeout=timeout)


def slack_lifespan(handler, state: ServiceState, tracker: InFlightTracker, grace_seconds: float):
    """Build a FastAPI lifespan that owns the Socket Mode connection.

    A connection failure propagates out of startup, which makes uvicorn exit
    with a non-zero status.
    """

    @asynccontextmanager
    async def lifespan(app):
        logger.info("Connecting to Slack (Socket Mode)")
        await asyncio.to_thread(handler.connect)
        state.mark_ready()
        logger.info("Linear-Slack sync bot fully operational")
        try:
            yield
        finally:
            logger.info("Shutting down gracefully")
            state.mark_not_ready()
            await asyncio.to_thread(handler.close)
            logger.info("Slack connection closed")
            drained = await asyncio.to_thread(tracker.wait_idle, grace_seconds)
            if not drained:
                logger.warning(
                    "Forcing shutdown with %s sync run(s) still in flight after %ss",
                    tracker.in_flight,
                    grace_seconds,
                )

    return lifespan
