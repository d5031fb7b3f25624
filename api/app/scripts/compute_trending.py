#!/usr/bin/env python3
"""Recompute trending rankings once and exit.

Intended for cron or a container scheduler:

    python -m app.scripts.compute_trending              # every configured timeframe
    python -m app.scripts.compute_trending --timeframe 1h --timeframe 24h
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

# Add parent directory to path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "../..")))

from app.core.config import get_settings  # noqa: E402
from app.db.database import get_database  # noqa: E402
from app.services.trending.trending_service import TrendingService  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Recompute trending rankings")
    parser.add_argument(
        "--timeframe",
        action="append",
        dest="timeframes",
        help="Timeframe label to compute (repeatable; default: TRENDING_TIMEFRAMES)",
    )
    parser.add_argument("--data-dir", default=None, help="DATA_DIR override")
    return parser


async def run(timeframes: Optional[List[str]], data_dir: Optional[str] = None) -> int:
    """Compute each timeframe; returns the number of failed timeframes."""
    settings = get_settings()
    if data_dir:
        settings = settings.model_copy(update={"DATA_DIR": os.path.abspath(data_dir)})
    settings.ensure_data_dirs()

    database = get_database(settings.MUSIC_DB_PATH)
    await database.initialize()
    service = TrendingService(database, settings)

    failures = 0
    for timeframe in timeframes or settings.TRENDING_TIMEFRAMES:
        try:
            result = await service.compute_trending(timeframe)
        except Exception as e:
            failures += 1
            logger.error(f"Trending computation failed for {timeframe}: {e}")
            continue
        logger.info(
            f"Timeframe {result.timeframe}: {result.processed_count} tracks ranked"
        )
    return failures


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    failures = asyncio.run(run(args.timeframes, args.data_dir))
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
