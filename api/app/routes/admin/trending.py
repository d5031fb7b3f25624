"""
Admin routes for running the trending ranker on demand.
"""

import logging
from typing import List, Optional

from app.core.security import verify_admin_access
from app.models.trending import TrendingComputeResponse
from app.services.trending.trending_service import (
    TrendingService,
    get_trending_service,
)
from fastapi import APIRouter, Depends, Query

# Setup logging
logger = logging.getLogger(__name__)

# Create admin router with authentication dependencies
router = APIRouter(
    prefix="/admin/trending",
    tags=["Admin Trending"],
    dependencies=[Depends(verify_admin_access)],
    responses={
        401: {"description": "Unauthorized - Invalid or missing API key"},
        403: {"description": "Forbidden - Insufficient permissions"},
    },
)


@router.post("/compute", response_model=TrendingComputeResponse)
async def compute_trending(
    timeframe: Optional[str] = Query(None, max_length=16),
    service: TrendingService = Depends(get_trending_service),
):
    """Recompute and replace the ranking for one timeframe (default 24h)."""
    timeframe = timeframe or service.settings.TRENDING_DEFAULT_TIMEFRAME
    logger.info(f"Admin requested trending computation for {timeframe}")
    return await service.compute_trending(timeframe)


@router.post("/compute-all", response_model=List[TrendingComputeResponse])
async def compute_all_trending(
    service: TrendingService = Depends(get_trending_service),
):
    """Recompute every configured timeframe."""
    return await service.compute_all()
