"""
Add-activity script: put one missing run into a per-year dataset file.

Usage:
    python -m rundash add --date 2025-03-14 --distance 10.2 --time 3420
    ACTIVITY_DATE=2025-03-14 ACTIVITY_DISTANCE=10.2 ACTIVITY_TIME=3420 python -m rundash add

Lookup order:
  1. Strava, if credentials are configured (the recorded run wins)
  2. The manual values passed on the command line / environment

An existing run on the same date is replaced, never duplicated. Every flag
falls back to the matching ACTIVITY_* environment variable.
"""
import argparse
import asyncio
import logging
import os
import sys
from datetime import date, datetime
from pathlib import Path
from typing import List, Optional, Union

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def _parse_date(value: Optional[str]) -> date:
    from rundash.errors import ValidationError

    if not value:
        raise ValidationError("date", "Missing required field: date (--date / ACTIVITY_DATE)")
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("date", f"Invalid date {value!r}, expected YYYY-MM-DD")


def _manual_activity(
    day: date,
    distance_km: Optional[float],
    moving_time: Optional[int],
    elevation: Optional[float],
    average_hr: Optional[float],
    max_hr: Optional[float],
):
    from rundash.errors import ValidationError
    from rundash.models.activity import ManualEntry
    from rundash.strava.normalizer import build_manual_activity

    missing = []
    if distance_km is None:
        missing.append("ACTIVITY_DISTANCE")
    if moving_time is None:
        missing.append("ACTIVITY_TIME")
    if missing:
        raise ValidationError(
            ", ".join(missing),
            "No Strava activity found and manual input incomplete. "
            f"Required: {', '.join(missing)}",
        )

    entry = ManualEntry(
        date=day,
        distance_km=distance_km,
        moving_time=moving_time,
        total_elevation_gain=elevation or 0.0,
        average_heartrate=average_hr,
        max_heartrate=max_hr,
    )
    return build_manual_activity(entry)


async def add_activity(
    day: date,
    year: Optional[int] = None,
    distance_km: Optional[float] = None,
    moving_time: Optional[int] = None,
    elevation: Optional[float] = None,
    average_hr: Optional[float] = None,
    max_hr: Optional[float] = None,
    data_dir: Optional[Union[str, Path]] = None,
    service=None,
    now: Optional[datetime] = None,
):
    """
    Upsert one run into running-data-<year>.json and save it.

    Args:
        day: Date of the run.
        year: Dataset year; defaults to the run's year.
        service: DatasetRefreshService for the Strava lookup. Built from
                 settings when omitted and credentials are configured.

    Returns:
        The saved Dataset.

    Raises:
        ValidationError: no Strava match and distance/time not given.
        PersistenceError: the existing file is unreadable or the save failed.
    """
    from rundash.config import get_settings
    from rundash.dataset.merge import empty_dataset, upsert_activity
    from rundash.dataset.store import dataset_path, load_dataset, load_gear_map, save_dataset
    from rundash.strava.client import StravaClient
    from rundash.strava.sync_service import DatasetRefreshService

    settings = get_settings()
    year = year or day.year
    data_dir = data_dir or settings.data_dir

    if service is None and settings.has_strava_credentials:
        service = DatasetRefreshService(
            client=StravaClient.from_settings(settings),
            data_dir=data_dir,
            gear_map=load_gear_map(settings.gear_map_path),
        )

    activity = None
    if service is not None:
        logger.info("Searching Strava for activities on %s...", day.isoformat())
        activity = await service.find_activity_on(day)
    else:
        logger.info("Strava credentials not available. Using manual input.")

    if activity is not None:
        logger.info(
            "Using data from Strava: %s km in %d s", activity.distance_km, activity.moving_time
        )
    else:
        activity = _manual_activity(day, distance_km, moving_time, elevation, average_hr, max_hr)
        logger.info("Using manual input: %s km in %d s", activity.distance_km, activity.moving_time)

    path = dataset_path(data_dir, year)
    if path.exists():
        dataset = load_dataset(path)
    else:
        logger.info("Creating new dataset %s", path)
        dataset = empty_dataset(year=year, now=now)

    if dataset.find_by_date(day) is not None:
        logger.info("Activity for %s already exists. Replacing...", day.isoformat())

    dataset = upsert_activity(dataset, activity, now=now, rolling_window=settings.rolling_window)
    save_dataset(dataset, path)
    logger.info(
        "Activity added for %s to %s (%d activities)",
        day.isoformat(),
        path.name,
        dataset.total_activities,
    )
    return dataset


def _env(name: str) -> Optional[str]:
    # Empty strings from CI inputs count as unset
    return os.environ.get(name) or None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Add a missing run to a yearly dataset")
    parser.add_argument("--year", type=int, default=_env("ACTIVITY_YEAR"), help="Dataset year (default: year of --date)")
    parser.add_argument("--date", default=_env("ACTIVITY_DATE"), help="Run date, YYYY-MM-DD (required)")
    parser.add_argument("--distance", type=float, default=_env("ACTIVITY_DISTANCE"), help="Distance in km")
    parser.add_argument("--time", type=int, default=_env("ACTIVITY_TIME"), help="Moving time in seconds")
    parser.add_argument("--elevation", type=float, default=_env("ACTIVITY_ELEVATION"), help="Elevation gain in meters")
    parser.add_argument("--hr", type=float, default=_env("ACTIVITY_HR"), help="Average heart rate")
    parser.add_argument("--max-hr", type=float, default=_env("ACTIVITY_MAX_HR"), help="Max heart rate")
    parser.add_argument("--data-dir", default=None, help="Dataset directory (default: DATA_DIR)")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    from rundash.errors import PersistenceError, ValidationError

    args = build_parser().parse_args(argv)
    try:
        day = _parse_date(args.date)
        asyncio.run(
            add_activity(
                day,
                year=args.year,
                distance_km=args.distance,
                moving_time=args.time,
                elevation=args.elevation,
                average_hr=args.hr,
                max_hr=args.max_hr,
                data_dir=args.data_dir,
            )
        )
    except (ValidationError, PersistenceError) as exc:
        logger.error("Failed to add activity: %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
