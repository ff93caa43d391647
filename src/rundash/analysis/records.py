"""
Personal records and pace/distance variability.

PR progression: for each standard race distance, take the runs whose
distance falls inside that distance's tolerance band, drop runs without a
usable pace, then walk them in date order and keep every run that is strictly
faster than everything before it. The result is the history of PRs, not just
the current best.
"""
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rundash.analysis.stats import standard_deviation
from rundash.analysis.units import (
    is_valid_pace,
    pace_string_to_seconds,
    parse_distance,
    seconds_to_pace_string,
)
from rundash.models.activity import Activity
from rundash.models.dataset import (
    Performance,
    PersonalRecord,
    PRHistoryEntry,
    RecordEntry,
    Records,
)


@dataclass(frozen=True)
class RaceDistance:
    distance_km: float
    label: str
    band: Tuple[float, float]  # inclusive km bounds


STANDARD_DISTANCES: List[RaceDistance] = [
    RaceDistance(5.0, "5K", (4.5, 5.5)),
    RaceDistance(10.0, "10K", (9.5, 10.5)),
    RaceDistance(15.0, "15K", (14.5, 15.5)),
    RaceDistance(21.1, "Half Marathon", (20.5, 21.6)),
]


def _in_band(activity: Activity, race: RaceDistance) -> bool:
    low, high = race.band
    return low <= parse_distance(activity.distance_km) <= high


def _history_entry(activity: Activity, pace_seconds: int) -> PRHistoryEntry:
    return PRHistoryEntry(
        date=activity.date,
        pace=activity.average_pace_min_km,
        pace_seconds=pace_seconds,
        distance_km=parse_distance(activity.distance_km),
        moving_time=activity.moving_time,
        activity_id=str(activity.id),
    )


def pr_progression(activities: Sequence[Activity], race: RaceDistance) -> Optional[PersonalRecord]:
    """
    PR history for one race distance, or None if no run qualifies.

    Runs on the same date are visited fastest first, so a slower run that day
    never appears as an intermediate PR.
    """
    qualifying = [
        a for a in activities
        if _in_band(a, race) and is_valid_pace(a.average_pace_min_km)
    ]
    if not qualifying:
        return None

    ordered = sorted(
        qualifying,
        key=lambda a: (a.date, pace_string_to_seconds(a.average_pace_min_km)),
    )
    history: List[PRHistoryEntry] = []
    best: Optional[int] = None
    for activity in ordered:
        pace = pace_string_to_seconds(activity.average_pace_min_km)
        if best is None or pace < best:
            best = pace
            history.append(_history_entry(activity, pace))

    return PersonalRecord(
        distance=race.distance_km,
        label=race.label,
        current_pr=history[-1],
        history=history,
        total_attempts=len(qualifying),
    )


def compute_personal_records(
    activities: Sequence[Activity],
    distances: Sequence[RaceDistance] = tuple(STANDARD_DISTANCES),
) -> List[PersonalRecord]:
    """PR progressions for every standard distance. Distances without a qualifying run are omitted."""
    records = (pr_progression(activities, race) for race in distances)
    return [r for r in records if r is not None]


# ─── Performance ──────────────────────────────────────────────────────────────

def _find_records(activities: Sequence[Activity]) -> Records:
    if not activities:
        return Records()

    longest = max(activities, key=lambda a: parse_distance(a.distance_km))
    records = Records(
        longest_run=RecordEntry(
            date=longest.date,
            distance_km=longest.distance_km,
            name=longest.name,
        )
    )

    paced = [a for a in activities if is_valid_pace(a.average_pace_min_km)]
    if paced:
        fastest = min(paced, key=lambda a: pace_string_to_seconds(a.average_pace_min_km))
        records.fastest_pace = RecordEntry(
            date=fastest.date,
            distance_km=fastest.distance_km,
            pace=fastest.average_pace_min_km,
            name=fastest.name,
        )
    return records


def compute_performance(activities: Sequence[Activity]) -> Performance:
    """Best/worst per-km pace, variability (population std-dev) and single-run records."""
    paces = [
        pace_string_to_seconds(a.average_pace_min_km)
        for a in activities
        if is_valid_pace(a.average_pace_min_km)
    ]
    distances = [parse_distance(a.distance_km) for a in activities]

    performance = Performance(
        distance_variability=f"{standard_deviation(distances):.2f} km",
        records=_find_records(activities),
    )
    if paces:
        performance.best_pace = seconds_to_pace_string(min(paces))
        performance.worst_pace = seconds_to_pace_string(max(paces))
        performance.pace_variability = f"{standard_deviation(paces):.0f} sec"
    return performance
