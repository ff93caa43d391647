"""
Trend analysis: recent-vs-early comparisons, training consistency, and the
rolling-average series behind the pace and heart-rate trend lines.

Average paces in this module are the plain arithmetic mean of per-run paces.
That is a different formula from the effort-weighted average in
summary.compute_summary.
"""
from typing import List, Sequence

from rundash.analysis.stats import chronological, mean_or_zero, rolling_average
from rundash.analysis.units import (
    format_distance,
    pace_string_to_seconds,
    parse_distance,
    seconds_to_pace_string,
)
from rundash.models.activity import Activity
from rundash.models.dataset import RollingPoint, Trends

TREND_WINDOW = 5
DEFAULT_ROLLING_WINDOW = 5

# Need at least a week's worth of runs before the gap average means anything
MIN_RUNS_FOR_CONSISTENCY = 7

# Average days between runs → rating; upper bounds are inclusive
_CONSISTENCY_LEVELS = [
    (2.0, "Very High"),
    (4.0, "High"),
    (7.0, "Moderate"),
]
_LOWEST_CONSISTENCY = "Low"
NOT_AVAILABLE = "N/A"


# ─── Consistency ──────────────────────────────────────────────────────────────

def classify_consistency(average_gap_days: float) -> str:
    """
    Bucket an average gap between runs into a rating.

    ≤2 days Very High, ≤4 High, ≤7 Moderate, otherwise Low.
    """
    for upper, label in _CONSISTENCY_LEVELS:
        if average_gap_days <= upper:
            return label
    return _LOWEST_CONSISTENCY


def average_gap_days(activities: Sequence[Activity]) -> float:
    """Mean number of days between consecutive runs (date-sorted). 0.0 for < 2 runs."""
    ordered = chronological(activities)
    gaps = [
        (later.date - earlier.date).days
        for earlier, later in zip(ordered, ordered[1:])
    ]
    return mean_or_zero(gaps)


def consistency_rating(activities: Sequence[Activity]) -> str:
    """Consistency label for a run history, or "N/A" with fewer than 7 runs."""
    if len(activities) < MIN_RUNS_FOR_CONSISTENCY:
        return NOT_AVAILABLE
    return classify_consistency(average_gap_days(activities))


# ─── Recent vs early ──────────────────────────────────────────────────────────

def _mean_pace_seconds(activities: Sequence[Activity]) -> float:
    paces = [pace_string_to_seconds(a.average_pace_min_km) for a in activities]
    return mean_or_zero([p for p in paces if p > 0])


def compute_trends(activities: Sequence[Activity]) -> Trends:
    """
    Compare the most recent runs against the earliest ones.

    Uses windows of min(5, n) runs at each end of the chronological history.
    Pace comparisons skip runs without a usable pace. With fewer than two
    runs there is nothing to compare and sentinel trends are returned.
    """
    if len(activities) < 2:
        return Trends()

    ordered = chronological(activities)
    window = min(TREND_WINDOW, len(ordered))
    recent = ordered[-window:]
    earlier = ordered[:window]

    recent_distance = mean_or_zero([parse_distance(a.distance_km) for a in recent])
    earlier_distance = mean_or_zero([parse_distance(a.distance_km) for a in earlier])
    recent_pace = _mean_pace_seconds(recent)
    earlier_pace = _mean_pace_seconds(earlier)

    if recent_pace > 0 and earlier_pace > 0:
        pace_trend = "improving" if recent_pace < earlier_pace else "declining"
    else:
        pace_trend = NOT_AVAILABLE

    return Trends(
        distance_trend="improving" if recent_distance > earlier_distance else "declining",
        pace_trend=pace_trend,
        recent_avg_distance=format_distance(recent_distance),
        recent_avg_pace=seconds_to_pace_string(recent_pace),
        consistency=consistency_rating(ordered),
    )


# ─── Rolling series ───────────────────────────────────────────────────────────

def rolling_pace_series(
    activities: Sequence[Activity],
    window: int = DEFAULT_ROLLING_WINDOW,
) -> List[RollingPoint]:
    """Per-km pace in seconds with its centered rolling mean. Runs without a pace are dropped."""
    points = [
        (a.date, float(pace_string_to_seconds(a.average_pace_min_km)))
        for a in chronological(activities)
    ]
    points = [(d, pace) for d, pace in points if pace > 0]
    averages = rolling_average([pace for _, pace in points], window)
    return [
        RollingPoint(date=d, value=pace, average=round(avg, 1))
        for (d, pace), avg in zip(points, averages)
    ]


def rolling_heart_rate_series(
    activities: Sequence[Activity],
    window: int = DEFAULT_ROLLING_WINDOW,
) -> List[RollingPoint]:
    """Average heart rate with its centered rolling mean. Runs without HR (None or 0) are dropped."""
    points = [
        (a.date, float(a.average_heartrate))
        for a in chronological(activities)
        if a.average_heartrate
    ]
    averages = rolling_average([hr for _, hr in points], window)
    return [
        RollingPoint(date=d, value=hr, average=round(avg, 1))
        for (d, hr), avg in zip(points, averages)
    ]
