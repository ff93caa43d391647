"""
Unit conversions and pace formatting.

Distances are stored canonically in meters; everything user-facing is derived
from that single value. Paces are "M:SS" strings (minutes per unit).

Two pace sentinels exist:

  PaceMode.BULK    "0:00"  activities normalized from the Strava API
  PaceMode.MANUAL  "N/A"   activities typed in by hand through the add CLI

Downstream consumers test for both strings, so callers pick the mode
explicitly instead of relying on a single canonical sentinel.
"""
import math
from enum import Enum
from typing import Optional, Union

METERS_TO_MILES = 0.000621371
METERS_TO_KM = 0.001
METERS_TO_FEET = 3.28084
KM_TO_MILES = 0.621371

# Meters per pace unit
METERS_PER_MILE = 1609.34
METERS_PER_KM = 1000.0

BULK_PACE_SENTINEL = "0:00"
MANUAL_PACE_SENTINEL = "N/A"


class PaceMode(str, Enum):
    BULK = "bulk"
    MANUAL = "manual"


class PaceUnit(str, Enum):
    MILE = "mile"
    KM = "km"


def _is_positive(value: Optional[float]) -> bool:
    return value is not None and math.isfinite(value) and value > 0


def _sentinel(mode: PaceMode) -> str:
    return MANUAL_PACE_SENTINEL if mode == PaceMode.MANUAL else BULK_PACE_SENTINEL


def _format_minutes_seconds(total_seconds: int) -> str:
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


# ─── Pace ─────────────────────────────────────────────────────────────────────

def speed_to_pace(
    speed_per_hour: Optional[float],
    mode: PaceMode = PaceMode.BULK,
) -> str:
    """
    Convert a speed already expressed in the target unit per hour (mph or
    km/h) into a "M:SS" pace per that unit.

    Args:
        speed_per_hour: speed in miles/hour or km/hour
        mode: BULK floors the seconds and returns "0:00" for unusable speed;
              MANUAL rounds the seconds and returns "N/A".

    Returns:
        Pace string, or the mode's sentinel for zero, negative, missing or
        non-finite speed. Never raises.
    """
    if not _is_positive(speed_per_hour):
        return _sentinel(mode)

    pace_seconds = 3600.0 / speed_per_hour
    if mode == PaceMode.MANUAL:
        # Round the total so 4:59.7 becomes 5:00, never 4:60
        return _format_minutes_seconds(int(round(pace_seconds)))
    return _format_minutes_seconds(int(math.floor(pace_seconds)))


def speed_ms_to_pace(speed_ms: Optional[float], unit: PaceUnit = PaceUnit.MILE) -> str:
    """Bulk-path pace from a Strava average speed in m/s. "0:00" if speed is unusable."""
    if not _is_positive(speed_ms):
        return BULK_PACE_SENTINEL
    meters_per_unit = METERS_PER_MILE if unit == PaceUnit.MILE else METERS_PER_KM
    return _format_minutes_seconds(int(math.floor(meters_per_unit / speed_ms)))


def pace_string_to_seconds(pace: Optional[str]) -> int:
    """
    Parse "M:SS" into whole seconds.

    Sentinels ("0:00", "N/A"), None and malformed strings all return 0.
    """
    if not pace or not isinstance(pace, str):
        return 0
    parts = pace.strip().split(":")
    if len(parts) != 2:
        return 0
    try:
        minutes = int(parts[0])
        seconds = int(parts[1])
    except ValueError:
        return 0
    if minutes < 0 or seconds < 0:
        return 0
    return minutes * 60 + seconds


def seconds_to_pace_string(seconds: Optional[float], round_seconds: bool = False) -> str:
    """
    Format seconds per unit as "M:SS". 0, None or non-finite → "0:00".

    Seconds are floored unless round_seconds is set, in which case the total
    is rounded first so the seconds field never reads 60.
    """
    if not _is_positive(seconds):
        return BULK_PACE_SENTINEL
    total = int(math.floor(seconds + 0.5)) if round_seconds else int(math.floor(seconds))
    return _format_minutes_seconds(total)


def is_valid_pace(pace: Optional[str]) -> bool:
    """True when the pace string parses to a positive number of seconds."""
    return pace_string_to_seconds(pace) > 0


# ─── Distance ─────────────────────────────────────────────────────────────────

def meters_to_miles(meters: float) -> float:
    return meters * METERS_TO_MILES


def meters_to_km(meters: float) -> float:
    return meters * METERS_TO_KM


def meters_to_feet(meters: float) -> float:
    return meters * METERS_TO_FEET


def km_to_miles(km: float) -> float:
    return km * KM_TO_MILES


def format_distance(value: Union[int, float]) -> str:
    """Fixed two-decimal string used for every stored distance field."""
    return f"{value:.2f}"


def parse_distance(value: Union[str, int, float, None]) -> float:
    """Read a stored two-decimal distance string back as float. Bad input → 0.0."""
    if value is None:
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0
