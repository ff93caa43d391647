"""Bundle every aggregate into the Analytics block stored beside the Summary."""
from typing import Sequence

from rundash.analysis.records import compute_performance, compute_personal_records
from rundash.analysis.summary import compute_total_stats
from rundash.analysis.temporal import compute_summaries, compute_temporal
from rundash.analysis.training_load import compute_weekly_training_load
from rundash.analysis.trends import (
    DEFAULT_ROLLING_WINDOW,
    compute_trends,
    rolling_heart_rate_series,
    rolling_pace_series,
)
from rundash.models.activity import Activity
from rundash.models.dataset import Analytics


def compute_analytics(
    activities: Sequence[Activity],
    rolling_window: int = DEFAULT_ROLLING_WINDOW,
) -> Analytics:
    """Read-only over the activities' derived fields; safe for empty input."""
    return Analytics(
        total_stats=compute_total_stats(activities),
        trends=compute_trends(activities),
        performance=compute_performance(activities),
        temporal=compute_temporal(activities),
        summaries=compute_summaries(activities),
        personal_records=compute_personal_records(activities),
        training_load=compute_weekly_training_load(activities),
        rolling_pace=rolling_pace_series(activities, rolling_window),
        rolling_heart_rate=rolling_heart_rate_series(activities, rolling_window),
    )
