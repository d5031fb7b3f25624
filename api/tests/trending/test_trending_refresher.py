"""Tests for the periodic trending refresher."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from app.models.trending import TrendingComputeResponse
from app.services.trending.refresher import TrendingRefresher


def _make_refresher(test_settings, interval=0, side_effect=None):
    settings = test_settings.model_copy(
        update={"TRENDING_REFRESH_INTERVAL_SECONDS": interval}
    )
    service = MagicMock()
    service.compute_trending = AsyncMock(
        side_effect=side_effect
        or (lambda tf: TrendingComputeResponse(processed_count=0, timeframe=tf))
    )
    return TrendingRefresher(service, settings), service


class TestTrendingRefresher:
    @pytest.mark.asyncio
    async def test_disabled_when_interval_is_zero(self, test_settings):
        refresher, service = _make_refresher(test_settings, interval=0)

        await refresher.start()

        assert refresher.refresh_task is None
        assert not refresher.is_running
        await refresher.stop()
        service.compute_trending.assert_not_called()

    @pytest.mark.asyncio
    async def test_refresh_once_covers_every_timeframe(self, test_settings):
        refresher, service = _make_refresher(test_settings)

        succeeded = await refresher.refresh_once()

        assert succeeded == 4
        called = [c.args[0] for c in service.compute_trending.await_args_list]
        assert called == ["1h", "24h", "7d", "30d"]

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_other_timeframes(self, test_settings):
        def _compute(timeframe):
            if timeframe == "24h":
                raise RuntimeError("locked")
            return TrendingComputeResponse(processed_count=1, timeframe=timeframe)

        refresher, service = _make_refresher(test_settings, side_effect=_compute)

        succeeded = await refresher.refresh_once()

        assert succeeded == 3
        assert service.compute_trending.await_count == 4

    @pytest.mark.asyncio
    async def test_start_runs_immediately_and_stop_cancels(self, test_settings):
        refresher, service = _make_refresher(test_settings, interval=60)

        await refresher.start()
        assert refresher.is_running
        # Let the loop run its first pass, then it sleeps for the interval
        for _ in range(10):
            await asyncio.sleep(0)
            if service.compute_trending.await_count >= 4:
                break

        await refresher.stop()

        assert service.compute_trending.await_count == 4
        assert refresher.refresh_task is None
        assert not refresher.is_running
