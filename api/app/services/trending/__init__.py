"""Trending ranking package."""

from app.services.trending.ranking import score_tracks
from app.services.trending.refresher import TrendingRefresher
from app.services.trending.trending_service import TrendingService

__all__ = ["TrendingRefresher", "TrendingService", "score_tracks"]
