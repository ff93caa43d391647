"""
Headline summary and data range for a list of activities.

compute_summary() is a pure function of its input: it sorts internally, so
the caller's ordering never matters, and an empty list yields the zero-valued
Summary instead of raising.

Average pace here is effort-weighted:

    total_moving_time / run_count / average_distance

which equals total time over total distance. It is NOT the mean of the
per-run paces (see trends.compute_trends for that one). The two differ when
run distances vary and both are kept.
"""
from datetime import date
from typing import List, Optional, Sequence

from rundash.analysis.stats import chronological, round_half_up
from rundash.analysis.units import (
    format_distance,
    meters_to_feet,
    parse_distance,
    seconds_to_pace_string,
)
from rundash.models.activity import Activity
from rundash.models.dataset import (
    DataRange,
    Summary,
    SummaryDateRange,
    TotalStats,
    YearToDateStats,
)

NO_PACE = "N/A"


def _inclusive_days(start: date, end: date) -> int:
    return (end - start).days + 1


def _distances_km(activities: Sequence[Activity]) -> List[float]:
    return [parse_distance(a.distance_km) for a in activities]


def compute_data_range(activities: Sequence[Activity]) -> DataRange:
    """Earliest and latest activity dates, with the inclusive day count between them."""
    if not activities:
        return DataRange()
    dates = [a.date for a in activities]
    start, end = min(dates), max(dates)
    return DataRange(start_date=start, end_date=end, total_days=_inclusive_days(start, end))


def year_to_date_days(as_of: date) -> int:
    """Days from January 1 of as_of's year through as_of, inclusive."""
    return _inclusive_days(date(as_of.year, 1, 1), as_of)


def compute_summary(activities: Sequence[Activity], as_of: Optional[date] = None) -> Summary:
    """
    Compute the dataset's headline Summary.

    Args:
        activities: Activities in any order.
        as_of: "Today" for the year-to-date day count. Defaults to date.today().

    Returns:
        Summary. Distances in km (two decimals), time in hours (one decimal),
        elevation in whole meters.
    """
    as_of = as_of or date.today()
    if not activities:
        return Summary(year_to_date_stats=YearToDateStats(total_days=year_to_date_days(as_of)))

    ordered = chronological(activities)
    count = len(ordered)
    distances = _distances_km(ordered)
    total_distance = sum(distances)
    total_time = sum(a.moving_time for a in ordered)
    total_elevation = sum(a.total_elevation_gain or 0.0 for a in ordered)
    average_distance = total_distance / count
    longest = max(distances)

    if average_distance > 0 and total_time > 0:
        average_pace = seconds_to_pace_string(
            total_time / count / average_distance, round_seconds=True
        )
    else:
        average_pace = NO_PACE

    first, last = ordered[0].date, ordered[-1].date
    weeks = max((last - first).days / 7.0, 1.0)
    active_days = len({a.date for a in ordered})

    return Summary(
        total_distance=format_distance(total_distance),
        total_time_hours=f"{total_time / 3600:.1f}",
        total_elevation_gain=str(round_half_up(total_elevation)),
        average_distance=format_distance(average_distance),
        average_pace=average_pace,
        activities_per_week=f"{count / weeks:.1f}",
        longest_run=format_distance(longest),
        active_days=active_days,
        date_range=SummaryDateRange(start=first, end=last),
        year_to_date_stats=YearToDateStats(
            total_days=year_to_date_days(as_of),
            active_days=active_days,
            average_distance_per_run=format_distance(average_distance),
            total_runs=count,
            longest_run=format_distance(longest),
        ),
    )


def compute_total_stats(activities: Sequence[Activity]) -> TotalStats:
    """Totals block of the analytics section (adds feet, shortest run, average minutes)."""
    if not activities:
        return TotalStats()
    count = len(activities)
    distances = _distances_km(activities)
    total_time = sum(a.moving_time for a in activities)
    total_feet = sum(meters_to_feet(a.total_elevation_gain or 0.0) for a in activities)
    return TotalStats(
        total_runs=count,
        total_distance=format_distance(sum(distances)),
        total_time_hours=f"{total_time / 3600:.1f}",
        total_elevation_feet=str(round_half_up(total_feet)),
        average_distance=format_distance(sum(distances) / count),
        average_time_minutes=str(round_half_up(total_time / count / 60)),
        longest_run=format_distance(max(distances)),
        shortest_run=format_distance(min(distances)),
    )
