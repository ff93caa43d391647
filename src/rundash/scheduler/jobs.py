"""
APScheduler jobs for background refresh.

The nightly refresh merges the last year's Strava runs into the per-year
dataset so that late uploads and edits made on Strava show up without a
manual run of the refresh script.
"""
import logging
from datetime import datetime, timezone

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from rundash.config import get_settings

logger = logging.getLogger(__name__)


def build_scheduler() -> AsyncIOScheduler:
    """
    Create and configure the APScheduler.

    Returns:
        Configured AsyncIOScheduler (not yet started).
    """
    settings = get_settings()
    scheduler = AsyncIOScheduler()

    scheduler.add_job(
        _nightly_refresh,
        trigger="cron",
        hour=settings.refresh_hour,
        minute=0,
        id="nightly_refresh",
        replace_existing=True,
    )

    return scheduler


async def _nightly_refresh() -> None:
    """
    Nightly job: merge this year's Strava runs into running-data-<year>.json.

    Merge mode keeps manually added runs. It also keys on the date, so a day
    with two Strava runs keeps the last one fetched; a plain `rundash-refresh`
    without --merge keeps both. Failures are logged, never raised, so one bad
    night doesn't stop the scheduler.
    """
    from rundash.dataset.store import load_gear_map
    from rundash.strava.client import StravaClient
    from rundash.strava.sync_service import DatasetRefreshService

    settings = get_settings()
    now = datetime.now(timezone.utc)
    logger.info("Nightly refresh starting at %s", now.isoformat())

    if not settings.has_strava_credentials:
        logger.warning("Nightly refresh skipped: Strava credentials not configured")
        return

    try:
        service = DatasetRefreshService(
            client=StravaClient.from_settings(settings),
            data_dir=settings.data_dir,
            gear_map=load_gear_map(settings.gear_map_path),
            per_page=settings.fetch_per_page,
            max_pages=settings.fetch_max_pages,
            rolling_window=settings.rolling_window,
        )
        dataset = await service.refresh(year=now.year, merge=True, now=now)
        logger.info("Nightly refresh done: %d activities", dataset.total_activities)
    except Exception as exc:
        logger.error("Nightly refresh failed: %s", exc)
