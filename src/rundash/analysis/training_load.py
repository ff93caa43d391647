"""
Weekly training load and recovery-risk classification.

Each run contributes distance_km × intensity multiplier, where intensity comes
from its per-km pace:

    pace ≤ 5:00/km   hard      ×3
    pace ≤ 6:00/km   moderate  ×2
    slower           easy      ×1
    no pace          moderate  ×1.5

Loads are summed per ISO week (Monday start) and each week is classified:

    total > 50 and hard > 20   High Risk
    total > 30                 Moderate
    otherwise                  Good

The thresholds are heuristics, not physiology; they live here as constants so
they can be tuned in one place.
"""
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, List, Sequence

from rundash.analysis.stats import chronological
from rundash.analysis.units import pace_string_to_seconds, parse_distance
from rundash.models.activity import Activity
from rundash.models.dataset import WeeklyLoad

HARD_PACE_MAX_SECONDS = 300  # 5:00/km
MODERATE_PACE_MAX_SECONDS = 360  # 6:00/km

HARD_MULTIPLIER = 3.0
MODERATE_MULTIPLIER = 2.0
EASY_MULTIPLIER = 1.0
UNKNOWN_PACE_MULTIPLIER = 1.5

HIGH_RISK_TOTAL_LOAD = 50.0
HIGH_RISK_HARD_LOAD = 20.0
MODERATE_TOTAL_LOAD = 30.0

HIGH_RISK = "High Risk"
MODERATE = "Moderate"
GOOD = "Good"


@dataclass(frozen=True)
class Intensity:
    bucket: str  # "easy", "moderate", "hard"
    multiplier: float


def intensity_for_pace(pace_seconds: int) -> Intensity:
    """Classify a per-km pace (seconds). 0 means the run has no usable pace."""
    if pace_seconds <= 0:
        return Intensity("moderate", UNKNOWN_PACE_MULTIPLIER)
    if pace_seconds <= HARD_PACE_MAX_SECONDS:
        return Intensity("hard", HARD_MULTIPLIER)
    if pace_seconds <= MODERATE_PACE_MAX_SECONDS:
        return Intensity("moderate", MODERATE_MULTIPLIER)
    return Intensity("easy", EASY_MULTIPLIER)


def classify_recovery(total_load: float, hard_load: float) -> str:
    if total_load > HIGH_RISK_TOTAL_LOAD and hard_load > HIGH_RISK_HARD_LOAD:
        return HIGH_RISK
    if total_load > MODERATE_TOTAL_LOAD:
        return MODERATE
    return GOOD


def week_start(day: date) -> date:
    """Monday of the ISO week containing `day`."""
    return day - timedelta(days=day.weekday())


def compute_weekly_training_load(activities: Sequence[Activity]) -> List[WeeklyLoad]:
    """
    Training load per ISO week, oldest week first.

    Weeks without runs are not emitted. Loads are rounded to two decimals in
    the output; classification uses the unrounded sums.
    """
    weeks: Dict[date, Dict[str, float]] = OrderedDict()
    for activity in chronological(activities):
        key = week_start(activity.date)
        totals = weeks.setdefault(
            key, {"runs": 0, "distance": 0.0, "easy": 0.0, "moderate": 0.0, "hard": 0.0}
        )
        distance = parse_distance(activity.distance_km)
        intensity = intensity_for_pace(pace_string_to_seconds(activity.average_pace_min_km))
        totals[intensity.bucket] += distance * intensity.multiplier
        totals["distance"] += distance
        totals["runs"] += 1

    result = []
    for monday, totals in weeks.items():
        total_load = totals["easy"] + totals["moderate"] + totals["hard"]
        result.append(WeeklyLoad(
            week=monday,
            runs=int(totals["runs"]),
            total_distance=round(totals["distance"], 2),
            easy_load=round(totals["easy"], 2),
            moderate_load=round(totals["moderate"], 2),
            hard_load=round(totals["hard"], 2),
            total_load=round(total_load, 2),
            recovery_status=classify_recovery(total_load, totals["hard"]),
        ))
    return result
