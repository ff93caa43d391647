"""Activity routes: list, lookup by date, manual add and removal."""
from datetime import date
from pathlib import Path
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from rundash.api.deps import get_data_dir, load_or_404
from rundash.config import get_settings
from rundash.dataset.merge import empty_dataset, remove_activity, upsert_activity
from rundash.dataset.store import dataset_path, load_dataset, save_dataset
from rundash.errors import PersistenceError, ValidationError
from rundash.models.activity import Activity, ManualEntry
from rundash.strava.normalizer import build_manual_activity

router = APIRouter()


@router.get("", response_model=List[Activity])
def list_activities(
    limit: int = 20,
    offset: int = 0,
    year: Optional[int] = None,
    data_dir: Path = Depends(get_data_dir),
):
    """List activities, newest first."""
    activities = load_or_404(data_dir, year).activities[offset:offset + limit]
    return activities


@router.get("/{day}", response_model=Activity)
def get_activity(day: date, year: Optional[int] = None, data_dir: Path = Depends(get_data_dir)):
    """Fetch the run recorded on a date (YYYY-MM-DD)."""
    activity = load_or_404(data_dir, year).find_by_date(day)
    if not activity:
        raise HTTPException(status_code=404, detail=f"No activity on {day.isoformat()}")
    return activity


@router.post("", response_model=Activity, status_code=201)
def add_activity(
    entry: ManualEntry,
    year: Optional[int] = None,
    data_dir: Path = Depends(get_data_dir),
):
    """
    Add a manual run, replacing any run already stored on that date.
    Creates the dataset file if it doesn't exist yet.
    """
    try:
        activity = build_manual_activity(entry)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    path = dataset_path(data_dir, year)
    try:
        dataset = load_dataset(path) if path.exists() else empty_dataset(year=year)
        dataset = upsert_activity(dataset, activity, rolling_window=get_settings().rolling_window)
        save_dataset(dataset, path)
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))

    return activity


@router.delete("/{day}", status_code=204)
def delete_activity(day: date, year: Optional[int] = None, data_dir: Path = Depends(get_data_dir)):
    dataset = load_or_404(data_dir, year)
    if dataset.find_by_date(day) is None:
        raise HTTPException(status_code=404, detail=f"No activity on {day.isoformat()}")

    updated = remove_activity(dataset, day, rolling_window=get_settings().rolling_window)
    try:
        save_dataset(updated, dataset_path(data_dir, year))
    except PersistenceError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    return Response(status_code=204)
