"""
Dataset construction and the merge/upsert engine.

Activities are keyed by date: upserting an activity whose date is already
present replaces that entry instead of adding a second one.

Every function returns a NEW Dataset. Summary, analytics, data range,
totalActivities and lastUpdated are rebuilt from the full activity list on
each call, never patched incrementally. Reading and writing files is the
store's job (rundash.dataset.store).
"""
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional, Sequence

from rundash.analysis.analytics import compute_analytics
from rundash.analysis.summary import compute_data_range, compute_summary
from rundash.analysis.trends import DEFAULT_ROLLING_WINDOW
from rundash.models.activity import Activity
from rundash.models.dataset import Dataset


def _now(now: Optional[datetime]) -> datetime:
    return now or datetime.now(timezone.utc)


def sort_newest_first(activities: Iterable[Activity]) -> List[Activity]:
    return sorted(activities, key=lambda a: (a.date, str(a.id)), reverse=True)


def build_dataset(
    activities: Sequence[Activity],
    year: Optional[int] = None,
    now: Optional[datetime] = None,
    rolling_window: int = DEFAULT_ROLLING_WINDOW,
) -> Dataset:
    """
    Build a complete Dataset from a list of activities.

    Args:
        activities: Activities in any order. Assumed unique by date.
        year: Year label for the dataset; defaults to now's year.
        now: Timestamp for lastUpdated and the year-to-date window.
        rolling_window: Width of the pace/HR rolling averages.
    """
    now = _now(now)
    ordered = sort_newest_first(activities)
    return Dataset(
        last_updated=now,
        total_activities=len(ordered),
        year_to_date=year if year is not None else now.year,
        data_range=compute_data_range(ordered),
        activities=ordered,
        summary=compute_summary(ordered, as_of=now.date()),
        analytics=compute_analytics(ordered, rolling_window=rolling_window),
    )


def empty_dataset(year: Optional[int] = None, now: Optional[datetime] = None) -> Dataset:
    return build_dataset([], year=year, now=now)


def _rebuild(
    dataset: Dataset,
    activities: Sequence[Activity],
    now: Optional[datetime],
    rolling_window: int,
) -> Dataset:
    return build_dataset(
        activities,
        year=dataset.year_to_date,
        now=now,
        rolling_window=rolling_window,
    )


def _replace_or_append(activities: List[Activity], activity: Activity) -> List[Activity]:
    """Put `activity` where the first same-date entry was; drop any other same-date entries."""
    merged: List[Activity] = []
    replaced = False
    for existing in activities:
        if existing.date != activity.date:
            merged.append(existing)
        elif not replaced:
            merged.append(activity)
            replaced = True
    if not replaced:
        merged.append(activity)
    return merged


def upsert_activity(
    dataset: Dataset,
    activity: Activity,
    now: Optional[datetime] = None,
    rolling_window: int = DEFAULT_ROLLING_WINDOW,
) -> Dataset:
    """
    Insert `activity`, or replace the existing activity on the same date.

    Returns:
        A new Dataset, re-sorted newest first, with every aggregate rebuilt.
        The input dataset is left untouched.
    """
    merged = _replace_or_append(list(dataset.activities), activity)
    return _rebuild(dataset, merged, now, rolling_window)


def upsert_activities(
    dataset: Dataset,
    activities: Iterable[Activity],
    now: Optional[datetime] = None,
    rolling_window: int = DEFAULT_ROLLING_WINDOW,
) -> Dataset:
    """Upsert many activities with a single rebuild at the end. Later entries win on date clashes."""
    merged = list(dataset.activities)
    for activity in activities:
        merged = _replace_or_append(merged, activity)
    return _rebuild(dataset, merged, now, rolling_window)


def remove_activity(
    dataset: Dataset,
    day: date,
    now: Optional[datetime] = None,
    rolling_window: int = DEFAULT_ROLLING_WINDOW,
) -> Dataset:
    """Drop every activity on `day`. Removing a missing date still rebuilds (no-op on the list)."""
    remaining = [a for a in dataset.activities if a.date != day]
    return _rebuild(dataset, remaining, now, rolling_window)


def recompute(
    dataset: Dataset,
    now: Optional[datetime] = None,
    rolling_window: int = DEFAULT_ROLLING_WINDOW,
) -> Dataset:
    """Rebuild aggregates for an unchanged activity list (e.g. after loading an old file)."""
    return _rebuild(dataset, list(dataset.activities), now, rolling_window)
