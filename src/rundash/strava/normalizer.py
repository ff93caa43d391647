"""
Strava activity normalizer.

Converts raw Strava activity dicts (GET /athlete/activities items) into
canonical Activity models, and builds Activity models from hand-typed
ManualEntry input. No I/O here; callers (sync_service, the add script, the
API) handle fetching and persistence.

Every derived field is computed in this module exactly once. The aggregate
calculator only reads these fields.

The two entry paths differ:

  normalize_activity()      Strava record. Speed is trusted from the API,
                            paces are floored, unusable speed → "0:00".
  build_manual_activity()   Manual entry. Speed is derived from
                            distance / moving time, paces are rounded,
                            unusable speed → "N/A".
"""
import logging
import math
import random
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from rundash.analysis.units import (
    PaceMode,
    PaceUnit,
    format_distance,
    km_to_miles,
    meters_to_feet,
    meters_to_km,
    meters_to_miles,
    speed_ms_to_pace,
    speed_to_pace,
)
from rundash.errors import ValidationError
from rundash.models.activity import Activity, ManualEntry

logger = logging.getLogger(__name__)

RUN_TYPE = "Run"

# Manual entries have no recorded max speed; estimate it from the average
MANUAL_MAX_SPEED_FACTOR = 1.2
# Suffer score proxy for manual entries: average HR as a share of 200 bpm
MANUAL_SUFFER_HR_BASE = 200.0

_WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
_MONTHS = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


# ─── Calendar buckets ─────────────────────────────────────────────────────────

def season_for_month(month: int) -> str:
    """
    Map a calendar month (1-12) to a season name.

    Fixed Northern-Hemisphere months: Mar-May Spring, Jun-Aug Summer,
    Sep-Nov Fall, Dec-Feb Winter.
    """
    if 3 <= month <= 5:
        return "Spring"
    if 6 <= month <= 8:
        return "Summer"
    if 9 <= month <= 11:
        return "Fall"
    return "Winter"


def time_of_day(hour: int) -> str:
    """Bucket an hour of the day (0-23)."""
    if hour < 6:
        return "Early Morning"
    if hour < 12:
        return "Morning"
    if hour < 17:
        return "Afternoon"
    if hour < 20:
        return "Evening"
    return "Night"


def calendar_attributes(day: date) -> Dict[str, Any]:
    """
    Compute weekday / month / year / quarter / weekend / season for a date.

    The date is pinned to 12:00 UTC before bucketing so that a date-only
    string can never shift to the neighbouring day through a timezone offset.
    """
    noon = datetime(day.year, day.month, day.day, 12, 0, 0, tzinfo=timezone.utc)
    return {
        "weekday": _WEEKDAYS[noon.weekday()],
        "month": _MONTHS[noon.month - 1],
        "year": noon.year,
        "quarter_year": (noon.month - 1) // 3 + 1,
        "is_weekend": noon.weekday() >= 5,
        "season": season_for_month(noon.month),
    }


# ─── Per-activity rates ───────────────────────────────────────────────────────

def _rates(distance_meters: float, moving_time: int, elevation_meters: float) -> Dict[str, float]:
    """pace_per_mile (s/mi), elevation_per_mile (ft/mi), speed_mph. 0 where undefined."""
    miles = meters_to_miles(distance_meters)
    return {
        "pace_per_mile": moving_time / miles if miles > 0 else 0.0,
        "elevation_per_mile": meters_to_feet(elevation_meters) / miles if miles > 0 else 0.0,
        "speed_mph": miles * 3600.0 / moving_time if moving_time > 0 else 0.0,
    }


def _distance_fields(distance_meters: float) -> Dict[str, str]:
    return {
        "distance_km": format_distance(meters_to_km(distance_meters)),
        "distance_miles": format_distance(meters_to_miles(distance_meters)),
    }


# ─── Raw-field parsing ────────────────────────────────────────────────────────

def _require_number(raw: Mapping[str, Any], key: str) -> float:
    value = raw.get(key)
    if value is None or value == "":
        raise ValidationError(key)
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(key, f"Field {key} is not a number: {value!r}")
    if not math.isfinite(number):
        raise ValidationError(key, f"Field {key} must be finite, got {number}")
    if number < 0:
        raise ValidationError(key, f"Field {key} must be non-negative, got {number}")
    return number


def _optional_number(raw: Mapping[str, Any], key: str) -> Optional[float]:
    value = raw.get(key)
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _optional_int(raw: Mapping[str, Any], key: str) -> Optional[int]:
    number = _optional_number(raw, key)
    return int(number) if number is not None else None


def _parse_start(raw: Mapping[str, Any]) -> date:
    start = raw.get("start_date")
    if not start or not isinstance(start, str):
        raise ValidationError("start_date")
    try:
        return datetime.strptime(start.strip()[:10], "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError("start_date", f"Unparseable start_date: {start!r}")


def _start_hour(raw: Mapping[str, Any]) -> Optional[int]:
    """Local start hour if Strava supplied a full timestamp, else None."""
    stamp = raw.get("start_date_local") or raw.get("start_date")
    if not isinstance(stamp, str) or "T" not in stamp:
        return None
    try:
        return int(stamp.split("T", 1)[1][:2])
    except ValueError:
        return None


def is_run(raw: Mapping[str, Any]) -> bool:
    """Strava uses both `type` (legacy) and `sport_type`; either may say Run."""
    return raw.get("type") == RUN_TYPE or raw.get("sport_type") == RUN_TYPE


# ─── Bulk path ────────────────────────────────────────────────────────────────

def normalize_activity(
    raw: Mapping[str, Any],
    gear_map: Optional[Mapping[str, str]] = None,
) -> Activity:
    """
    Normalize one Strava activity dict into an Activity.

    Args:
        raw: Strava activity summary dict.
        gear_map: Optional gear_id → display name map. Passed explicitly;
                  unknown ids leave gear_name as None.

    Returns:
        Activity with every derived field filled in.

    Raises:
        ValidationError: distance, moving_time or start_date missing/invalid.
    """
    day = _parse_start(raw)
    distance = _require_number(raw, "distance")
    moving_time = int(_require_number(raw, "moving_time"))
    elapsed = _optional_int(raw, "elapsed_time")
    elevation = _optional_number(raw, "total_elevation_gain") or 0.0
    average_speed = _optional_number(raw, "average_speed") or 0.0
    gear_id = raw.get("gear_id")
    hour = _start_hour(raw)

    return Activity(
        id=raw.get("id") if raw.get("id") is not None else _generate_id(),
        name=raw.get("name"),
        date=day,
        distance=distance,
        **_distance_fields(distance),
        moving_time=moving_time,
        elapsed_time=elapsed if elapsed is not None else moving_time,
        total_elevation_gain=elevation,
        average_speed=average_speed,
        max_speed=_optional_number(raw, "max_speed") or 0.0,
        average_pace_min_mile=speed_ms_to_pace(average_speed, PaceUnit.MILE),
        average_pace_min_km=speed_ms_to_pace(average_speed, PaceUnit.KM),
        average_heartrate=_optional_number(raw, "average_heartrate"),
        max_heartrate=_optional_number(raw, "max_heartrate"),
        suffer_score=_optional_int(raw, "suffer_score"),
        kudos_count=_optional_int(raw, "kudos_count"),
        start_lat_lng=raw.get("start_latlng") or [],
        end_lat_lng=raw.get("end_latlng") or [],
        city=raw.get("location_city"),
        state=raw.get("location_state"),
        country=raw.get("location_country"),
        weather_temp=_optional_number(raw, "average_temp"),
        gear=gear_id,
        gear_name=(gear_map or {}).get(gear_id) if gear_id else None,
        **_rates(distance, moving_time, elevation),
        **calendar_attributes(day),
        time_of_day=time_of_day(hour) if hour is not None else None,
    )


def normalize_activities(
    raws: Iterable[Mapping[str, Any]],
    gear_map: Optional[Mapping[str, str]] = None,
) -> List[Activity]:
    """
    Normalize a batch of Strava records, keeping running activities only.

    A record that fails validation is logged and skipped; the rest of the
    batch still goes through.
    """
    activities = []
    skipped = 0
    for raw in raws:
        if not is_run(raw):
            continue
        try:
            activities.append(normalize_activity(raw, gear_map=gear_map))
        except ValidationError as exc:
            skipped += 1
            logger.warning("Skipping activity %s: %s", raw.get("id"), exc)
    if skipped:
        logger.info("Normalized %d activities, skipped %d invalid", len(activities), skipped)
    return activities


# ─── Manual path ──────────────────────────────────────────────────────────────

def _generate_id() -> int:
    return random.randrange(10**10)


def build_manual_activity(
    entry: ManualEntry,
    activity_id: Optional[Union[int, str]] = None,
) -> Activity:
    """
    Build an Activity from a hand-typed entry.

    Average speed is derived from distance / moving time (there is no
    device speed to trust). Paces use the manual "N/A" sentinel.

    Args:
        entry: ManualEntry with at least date, distance_km and moving_time.
        activity_id: Id to use; a random 10-digit id is generated if omitted.

    Raises:
        ValidationError: distance_km or moving_time missing or invalid.
    """
    if entry.distance_km is None:
        raise ValidationError("distance_km")
    if entry.moving_time is None:
        raise ValidationError("moving_time")
    if not math.isfinite(entry.distance_km) or entry.distance_km < 0:
        raise ValidationError("distance_km", "distance_km must be a non-negative number")
    if entry.moving_time < 0:
        raise ValidationError("moving_time", "moving_time must be non-negative")

    distance = entry.distance_km * 1000.0
    miles = km_to_miles(entry.distance_km)
    moving_time = int(entry.moving_time)
    hours = moving_time / 3600.0
    speed_kmh = entry.distance_km / hours if hours > 0 else 0.0
    speed_mph = miles / hours if hours > 0 else 0.0
    speed_ms = distance / moving_time if moving_time > 0 else 0.0
    avg_hr = entry.average_heartrate or None

    return Activity(
        id=activity_id if activity_id is not None else _generate_id(),
        name=entry.name,
        date=entry.date,
        distance=distance,
        distance_km=format_distance(entry.distance_km),
        distance_miles=format_distance(miles),
        moving_time=moving_time,
        elapsed_time=moving_time,
        total_elevation_gain=entry.total_elevation_gain or 0.0,
        average_speed=speed_ms,
        max_speed=speed_ms * MANUAL_MAX_SPEED_FACTOR,
        average_pace_min_mile=speed_to_pace(speed_mph, PaceMode.MANUAL),
        average_pace_min_km=speed_to_pace(speed_kmh, PaceMode.MANUAL),
        average_heartrate=avg_hr,
        max_heartrate=entry.max_heartrate or None,
        suffer_score=round(avg_hr / MANUAL_SUFFER_HR_BASE * 100) if avg_hr else 0,
        kudos_count=0,
        **_rates(distance, moving_time, entry.total_elevation_gain or 0.0),
        **calendar_attributes(entry.date),
    )
