"""
Keep-alive heartbeat for the PDF service.

Some hosting platforms idle out containers that produce no output. The
heartbeat writes a periodic log line with uptime and memory so the
process stays visibly alive and its footprint can be tracked over time.
"""

import asyncio
import logging
from typing import Optional

from .process_stats import memory_usage, uptime_seconds

logger = logging.getLogger(__name__)


class KeepAlive:
    """Periodic heartbeat task bound to the running event loop."""

    def __init__(self, interval_seconds: float):
        self.interval_seconds = interval_seconds
        self.beats = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Schedule the heartbeat. No-op when disabled or already running."""
        if self.interval_seconds <= 0:
            logger.info("Keep-alive heartbeat disabled")
            return
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="keepalive-heartbeat")
        logger.info(f"Keep-alive heartbeat every {self.interval_seconds}s")

    async def stop(self) -> None:
        """Cancel the heartbeat and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    def beat(self) -> None:
        """Write one heartbeat line."""
        self.beats += 1
        rss_mb = memory_usage()["rss"] / (1024 * 1024)
        logger.info(
            f"Heartbeat #{self.beats}: uptime={uptime_seconds():.0f}s rss={rss_mb:.1f}MB"
        )

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.beat()
