"""Shared test fixtures."""
import json
from pathlib import Path
from typing import Any, Dict, Optional

import pytest

from rundash.config import Settings
from rundash.strava.normalizer import normalize_activity

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def strava_record(
    day: str,
    km: float,
    seconds: int,
    pace: Optional[int] = None,
    hr: Optional[float] = None,
    elevation: float = 0.0,
    activity_id: Optional[int] = None,
    name: Optional[str] = None,
    start_time: str = "07:30:00",
    sport: str = "Run",
) -> Dict[str, Any]:
    """
    Raw Strava activity dict.

    `pace` (seconds per km) fixes the floored km pace exactly: the speed is
    set half a second slower so float error can't push the floor down a second.
    Without it the pace follows from distance and time.
    """
    meters = km * 1000.0
    if pace is None:
        speed = meters / seconds if seconds else 0.0
    else:
        speed = 1000.0 / (pace + 0.5) if pace else 0.0
    return {
        "id": activity_id if activity_id is not None else int(day.replace("-", "")),
        "name": name or f"Run {day}",
        "type": sport,
        "sport_type": sport,
        "start_date": f"{day}T{start_time}Z",
        "start_date_local": f"{day}T{start_time}",
        "distance": meters,
        "moving_time": seconds,
        "elapsed_time": seconds + 30,
        "total_elevation_gain": elevation,
        "average_speed": speed,
        "max_speed": speed * 1.3,
        "average_heartrate": hr,
        "max_heartrate": hr + 20 if hr else None,
        "kudos_count": 2,
    }


@pytest.fixture(name="make_raw")
def make_raw_fixture():
    return strava_record


@pytest.fixture(name="make_run")
def make_run_fixture():
    """Factory: normalized Activity from strava_record() arguments."""

    def _make(day: str, km: float = 5.0, seconds: int = 1800, **kwargs):
        return normalize_activity(strava_record(day, km, seconds, **kwargs))

    return _make


@pytest.fixture(name="strava_fixture")
def strava_fixture_fixture():
    return json.loads((FIXTURES_DIR / "strava_activities.json").read_text())


@pytest.fixture(name="settings")
def settings_fixture(tmp_path, monkeypatch) -> Settings:
    """Settings without Strava credentials, pointed at a temporary data dir."""
    settings = Settings(
        strava_client_id="",
        strava_client_secret="",
        strava_refresh_token="",
        data_dir=str(tmp_path),
        gear_map_path=None,
    )
    monkeypatch.setattr("rundash.config._settings", settings)
    return settings
