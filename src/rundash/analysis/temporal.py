"""When the running happens: favourite day/time, weekend split, seasons, and
monthly / weekly rollups."""
from collections import Counter, OrderedDict
from typing import Dict, List, Optional, Sequence

from rundash.analysis.stats import chronological, mean_or_zero
from rundash.analysis.training_load import week_start
from rundash.analysis.units import format_distance, parse_distance
from rundash.models.activity import Activity
from rundash.models.dataset import (
    PeriodSummary,
    SeasonStats,
    Summaries,
    Temporal,
    WeekendSplit,
    WeeklySummary,
)

WEEKLY_SUMMARY_WEEKS = 12
NOT_AVAILABLE = "N/A"


def _most_common(values: Sequence[Optional[str]]) -> str:
    # Ties go to the value seen first, in chronological order
    counts = Counter(v for v in values if v)
    if not counts:
        return NOT_AVAILABLE
    return counts.most_common(1)[0][0]


def compute_temporal(activities: Sequence[Activity]) -> Temporal:
    ordered = chronological(activities)

    seasons: Dict[str, List[Activity]] = OrderedDict()
    for activity in ordered:
        seasons.setdefault(activity.season, []).append(activity)

    weekend = sum(1 for a in ordered if a.is_weekend)
    return Temporal(
        favorite_day=_most_common([a.weekday for a in ordered]),
        favorite_time=_most_common([a.time_of_day for a in ordered]),
        weekend_vs_weekday=WeekendSplit(weekend=weekend, weekday=len(ordered) - weekend),
        seasonal_breakdown={
            season: SeasonStats(
                count=len(runs),
                avg_distance=format_distance(
                    mean_or_zero([parse_distance(a.distance_km) for a in runs])
                ),
            )
            for season, runs in seasons.items()
        },
    )


def _period(runs: Sequence[Activity]) -> Dict[str, object]:
    return {
        "runs": len(runs),
        "distance": format_distance(sum(parse_distance(a.distance_km) for a in runs)),
        "time": f"{sum(a.moving_time for a in runs) / 3600:.1f}",
    }


def compute_monthly_summary(activities: Sequence[Activity]) -> Dict[str, PeriodSummary]:
    """Runs / km / hours per month, keyed "<year>-<MonthName>" in chronological order."""
    months: Dict[str, List[Activity]] = OrderedDict()
    for activity in chronological(activities):
        months.setdefault(f"{activity.year}-{activity.month}", []).append(activity)
    return {key: PeriodSummary(**_period(runs)) for key, runs in months.items()}


def compute_weekly_summary(
    activities: Sequence[Activity],
    weeks: int = WEEKLY_SUMMARY_WEEKS,
) -> List[WeeklySummary]:
    """Runs / km / hours for the most recent `weeks` ISO weeks that had runs, newest first."""
    grouped: Dict = {}
    for activity in activities:
        grouped.setdefault(week_start(activity.date), []).append(activity)
    newest = sorted(grouped, reverse=True)[:weeks]
    return [WeeklySummary(week=monday, **_period(grouped[monday])) for monday in newest]


def compute_summaries(activities: Sequence[Activity]) -> Summaries:
    return Summaries(
        monthly=compute_monthly_summary(activities),
        weekly=compute_weekly_summary(activities),
    )
