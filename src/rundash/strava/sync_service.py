"""
DatasetRefreshService: pulls activities from Strava and rewrites a dataset file.

Flow for a refresh:
  1. Page through /athlete/activities until a short page (or max_pages)
  2. Keep running activities, normalize them (invalid records are skipped)
  3. Build a fresh dataset, or upsert into the existing one in merge mode
  4. Save to running-data.json / running-data-<year>.json

The normalizer and the merge engine are pure; this service is the only place
that combines them with network and file I/O.
"""
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from rundash.dataset.merge import build_dataset, empty_dataset, upsert_activities
from rundash.dataset.store import dataset_path, load_dataset, save_dataset
from rundash.errors import PersistenceError, ValidationError
from rundash.models.activity import Activity
from rundash.models.dataset import Dataset
from rundash.strava.client import StravaAuthError
from rundash.strava.normalizer import is_run, normalize_activities, normalize_activity

logger = logging.getLogger(__name__)


class DatasetRefreshService:
    """Orchestrates Strava → JSON dataset refreshes."""

    def __init__(
        self,
        client,
        data_dir: Union[str, Path],
        gear_map: Optional[Mapping[str, str]] = None,
        per_page: int = 100,
        max_pages: int = 10,
        rolling_window: int = 5,
    ):
        """
        Args:
            client: StravaClient instance (or AsyncMock in tests).
            data_dir: Directory holding the dataset JSON files.
            gear_map: gear_id → name map handed to the normalizer.
        """
        self.client = client
        self.data_dir = Path(data_dir)
        self.gear_map = dict(gear_map or {})
        self.per_page = per_page
        self.max_pages = max_pages
        self.rolling_window = rolling_window

    async def fetch_raw(self, year: Optional[int] = None) -> List[Dict[str, Any]]:
        """All raw activities (any sport), optionally limited to one calendar year."""
        after = datetime(year, 1, 1) if year is not None else None
        before = datetime(year + 1, 1, 1) if year is not None else None

        raws: List[Dict[str, Any]] = []
        for page in range(1, self.max_pages + 1):
            batch = await self.client.get_activities(
                page=page, per_page=self.per_page, after=after, before=before
            )
            raws.extend(batch)
            if len(batch) < self.per_page:
                break
        else:
            logger.warning("Stopped after %d pages; older activities not fetched", self.max_pages)
        return raws

    async def refresh(
        self,
        year: Optional[int] = None,
        merge: bool = False,
        now: Optional[datetime] = None,
    ) -> Dataset:
        """
        Refetch activities and write the dataset file.

        Args:
            year: Limit to one year and write running-data-<year>.json.
            merge: Upsert fetched runs into the existing file instead of
                   replacing it (keeps manually added runs).
            now: Timestamp override for lastUpdated.

        Returns:
            The saved Dataset.
        """
        now = now or datetime.now(timezone.utc)
        raws = await self.fetch_raw(year)
        activities = normalize_activities(raws, gear_map=self.gear_map)
        logger.info("Found %d running activities", len(activities))

        path = dataset_path(self.data_dir, year)
        if merge:
            try:
                existing = load_dataset(path)
            except PersistenceError:
                logger.info("No usable dataset at %s; starting a new one", path)
                existing = empty_dataset(year=year, now=now)
            dataset = upsert_activities(
                existing, activities, now=now, rolling_window=self.rolling_window
            )
        else:
            dataset = build_dataset(
                activities, year=year, now=now, rolling_window=self.rolling_window
            )

        save_dataset(dataset, path)
        return dataset

    async def find_activity_on(self, day: date) -> Optional[Activity]:
        """
        Look up the run recorded on `day` in Strava.

        Returns None when credentials are missing, the request fails, there
        is no run that day, or the record can't be normalized. Lookup is
        best-effort: the add script falls back to manual values.
        """
        try:
            raws = await self.client.get_activities_on(day)
        except StravaAuthError as exc:
            logger.info("Strava unavailable: %s", exc)
            return None
        except Exception as exc:
            logger.warning("Error fetching from Strava: %s", exc)
            return None

        runs = [r for r in raws if is_run(r)]
        if not runs:
            logger.info("No running activities found on %s", day.isoformat())
            return None
        if len(runs) > 1:
            logger.warning("Multiple running activities found on %s, using first one", day.isoformat())

        try:
            return normalize_activity(runs[0], gear_map=self.gear_map)
        except ValidationError as exc:
            logger.warning("Strava activity on %s is incomplete: %s", day.isoformat(), exc)
            return None
