"""Small numeric helpers shared by the aggregate modules. All are empty-safe."""
import math
from statistics import fmean, pstdev
from typing import Iterable, List, Sequence

from rundash.models.activity import Activity


def mean_or_zero(values: Sequence[float]) -> float:
    return fmean(values) if values else 0.0


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def standard_deviation(values: Sequence[float]) -> float:
    """
    Population standard deviation (divides by N, not N-1).

    Returns 0.0 for an empty list, where pstdev would raise.
    """
    return pstdev(values) if values else 0.0


def rolling_average(values: Sequence[float], window: int = 5) -> List[float]:
    """
    Centered moving average.

    For index i the window spans [i - window//2, i + window//2], clipped to the
    sequence bounds; the window shrinks near the ends instead of padding or
    wrapping around.

    Args:
        values: Series in chronological order.
        window: Nominal window width (>= 1).

    Returns:
        List of the same length as `values`.
    """
    half = max(window, 1) // 2
    n = len(values)
    result = []
    for i in range(n):
        chunk = values[max(0, i - half):min(n, i + half + 1)]
        result.append(fmean(chunk))
    return result


def chronological(activities: Iterable[Activity]) -> List[Activity]:
    """Oldest first. Ties on the same date keep a stable order by id."""
    return sorted(activities, key=lambda a: (a.date, str(a.id)))
