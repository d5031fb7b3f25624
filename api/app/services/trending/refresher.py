"""
Background task that keeps trending rankings fresh.

When TRENDING_REFRESH_INTERVAL_SECONDS is positive, the refresher recomputes
every configured timeframe on that interval for as long as the application
runs. Deployments that schedule ``python -m app.scripts.compute_trending``
externally leave the interval at 0.
"""

import asyncio
import logging
from typing import Optional

from app.core.config import Settings
from app.services.trending.trending_service import TrendingService

logger = logging.getLogger(__name__)


class TrendingRefresher:
    """Periodically recomputes trending rankings in-process."""

    def __init__(self, trending_service: TrendingService, settings: Settings):
        self.trending_service = trending_service
        self.settings = settings
        self.interval = settings.TRENDING_REFRESH_INTERVAL_SECONDS
        self.refresh_task: Optional[asyncio.Task] = None
        self.is_running = False

    async def start(self) -> None:
        """Start the background refresh task."""
        if self.interval <= 0:
            logger.info("Periodic trending refresh disabled")
            return

        logger.info(
            f"Starting trending refresh every {self.interval}s for "
            f"{', '.join(self.settings.TRENDING_TIMEFRAMES)}"
        )
        self.is_running = True
        self.refresh_task = asyncio.create_task(self._refresh_loop())

    async def stop(self) -> None:
        """Stop the background refresh task."""
        self.is_running = False

        if self.refresh_task:
            logger.info("Stopping trending refresh")
            self.refresh_task.cancel()
            try:
                await self.refresh_task
            except asyncio.CancelledError:
                logger.debug("Refresh task cancelled successfully")
            self.refresh_task = None

    async def refresh_once(self) -> int:
        """Recompute each configured timeframe; returns how many succeeded.

        A failing timeframe is logged and does not stop the others.
        """
        succeeded = 0
        for timeframe in self.settings.TRENDING_TIMEFRAMES:
            try:
                await self.trending_service.compute_trending(timeframe)
                succeeded += 1
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Trending refresh failed for {timeframe}: {e}")
        return succeeded

    async def _refresh_loop(self) -> None:
        while self.is_running:
            try:
                await self.refresh_once()
                await asyncio.sleep(self.interval)
            except asyncio.CancelledError:
                logger.debug("Refresh loop cancelled")
                break
            except Exception as e:
                logger.error(f"Error in trending refresh loop: {e}", exc_info=True)
                await asyncio.sleep(self.interval)
