#!/usr/bin/env python3
"""CLI script to sync Shopify orders into the order document store."""

import argparse
import asyncio
import sys
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import structlog

from order_sync_service.config import get_settings
from order_sync_service.logging_config import configure_logging
from order_sync_service.runtime import open_sync_service
from order_sync_service.services.job_tracker import new_job_id

logger = structlog.get_logger()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--full",
        action="store_true",
        help="Sync the entire order catalog instead of the latest open orders",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Open orders to fetch for a bounded sync",
    )
    return parser.parse_args()


async def main(args: argparse.Namespace) -> int:
    """Main sync function."""
    settings = get_settings()
    configure_logging(settings)

    async with open_sync_service(settings) as service:
        if not args.full:
            result = await service.run_bounded_sync(args.limit or settings.sync_bounded_limit)
            logger.info("Bounded sync finished", synced=result.synced, skipped=result.skipped, errors=result.errors)
            return 0

        job_id = new_job_id()
        await service.jobs.create(job_id)
        logger.info("Running full order sync", job_id=job_id)
        try:
            counters = await service.run_full_sync(job_id)
        except Exception:
            logger.exception("Full order sync failed", job_id=job_id)
            return 1
        logger.info("Full order sync finished", job_id=job_id, total=counters.total, errors=counters.errors)
        return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main(parse_args())))
