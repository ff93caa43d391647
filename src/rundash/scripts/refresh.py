"""
Refresh script: refetch running activities from Strava and rewrite the dataset.

Usage:
    python -m rundash refresh                 # all activities → running-data.json
    python -m rundash refresh --year 2025     # one year → running-data-2025.json
    python -m rundash refresh --merge         # keep manual runs already in the file

Requires STRAVA_CLIENT_ID, STRAVA_CLIENT_SECRET and STRAVA_REFRESH_TOKEN.
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


async def _refresh(year: Optional[int], merge: bool) -> int:
    from rundash.config import get_settings
    from rundash.dataset.store import load_gear_map
    from rundash.errors import PersistenceError
    from rundash.strava.client import StravaAuthError, StravaClient
    from rundash.strava.sync_service import DatasetRefreshService

    settings = get_settings()
    if not settings.has_strava_credentials:
        logger.error(
            "Strava credentials missing. Set STRAVA_CLIENT_ID, "
            "STRAVA_CLIENT_SECRET and STRAVA_REFRESH_TOKEN."
        )
        return 1

    try:
        service = DatasetRefreshService(
            client=StravaClient.from_settings(settings),
            data_dir=settings.data_dir,
            gear_map=load_gear_map(settings.gear_map_path),
            per_page=settings.fetch_per_page,
            max_pages=settings.fetch_max_pages,
            rolling_window=settings.rolling_window,
        )
        dataset = await service.refresh(year=year, merge=merge)
    except (StravaAuthError, PersistenceError) as exc:
        logger.error("Refresh failed: %s", exc)
        return 1

    logger.info(
        "Refresh complete: %d activities, %s km total",
        dataset.total_activities,
        dataset.summary.total_distance,
    )
    return 0


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Refetch running activities from Strava")
    parser.add_argument("--year", type=int, default=None, help="Only fetch this calendar year")
    parser.add_argument(
        "--merge",
        action="store_true",
        help="Upsert into the existing dataset instead of replacing it",
    )
    args = parser.parse_args(argv)
    sys.exit(asyncio.run(_refresh(args.year, args.merge)))


if __name__ == "__main__":
    main()
