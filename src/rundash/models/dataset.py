"""
Dataset models: the persisted JSON document and everything derived from its
activity list.

Summary and Analytics are never edited by hand. They are rebuilt from
`activities` on every write (see rundash.dataset.merge).
"""
from datetime import date, datetime
from typing import Dict, List, Optional

from rundash.models.activity import Activity, CamelModel


# ─── Summary ──────────────────────────────────────────────────────────────────

class DataRange(CamelModel):
    """Span of the activity list, inclusive. Empty list → nulls and 0 days."""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_days: int = 0


class SummaryDateRange(CamelModel):
    start: Optional[date] = None
    end: Optional[date] = None


class YearToDateStats(CamelModel):
    total_days: int = 0  # Jan 1 of the current year through today, inclusive
    active_days: int = 0
    average_distance_per_run: str = "0.00"
    total_runs: int = 0
    longest_run: str = "0.00"


class Summary(CamelModel):
    """Headline numbers. Distances in km, elevation in meters."""
    total_distance: str = "0.00"
    total_time_hours: str = "0.0"
    total_elevation_gain: str = "0"
    average_distance: str = "0.00"
    average_pace: str = "N/A"  # per km, effort-weighted
    activities_per_week: str = "0.0"
    longest_run: str = "0.00"
    active_days: int = 0
    date_range: SummaryDateRange = SummaryDateRange()
    year_to_date_stats: YearToDateStats = YearToDateStats()


# ─── Analytics ────────────────────────────────────────────────────────────────

class TotalStats(CamelModel):
    total_runs: int = 0
    total_distance: str = "0.00"
    total_time_hours: str = "0.0"
    total_elevation_feet: str = "0"
    average_distance: str = "0.00"
    average_time_minutes: str = "0"
    longest_run: str = "0.00"
    shortest_run: str = "0.00"


class Trends(CamelModel):
    distance_trend: str = "N/A"  # "improving" / "declining"
    pace_trend: str = "N/A"
    recent_avg_distance: str = "0.00"
    recent_avg_pace: str = "0:00"
    consistency: str = "N/A"


class RecordEntry(CamelModel):
    date: date
    distance_km: str
    pace: Optional[str] = None
    name: Optional[str] = None


class Records(CamelModel):
    longest_run: Optional[RecordEntry] = None
    fastest_pace: Optional[RecordEntry] = None


class Performance(CamelModel):
    best_pace: str = "N/A"
    worst_pace: str = "N/A"
    pace_variability: str = "N/A"
    distance_variability: str = "0.00 km"
    records: Records = Records()


class PRHistoryEntry(CamelModel):
    date: date
    pace: str  # per km
    pace_seconds: int
    distance_km: float
    moving_time: int
    activity_id: Optional[str] = None


class PersonalRecord(CamelModel):
    """Progression of strictly improving paces at one race distance."""
    distance: float  # nominal km
    label: str
    current_pr: PRHistoryEntry
    history: List[PRHistoryEntry]
    total_attempts: int


class WeeklyLoad(CamelModel):
    week: date  # Monday of the ISO week
    runs: int = 0
    total_distance: float = 0.0
    easy_load: float = 0.0
    moderate_load: float = 0.0
    hard_load: float = 0.0
    total_load: float = 0.0
    recovery_status: str = "Good"


class WeekendSplit(CamelModel):
    weekend: int = 0
    weekday: int = 0


class SeasonStats(CamelModel):
    count: int
    avg_distance: str


class Temporal(CamelModel):
    favorite_day: str = "N/A"
    favorite_time: str = "N/A"
    weekend_vs_weekday: WeekendSplit = WeekendSplit()
    seasonal_breakdown: Dict[str, SeasonStats] = {}


class PeriodSummary(CamelModel):
    runs: int
    distance: str  # km
    time: str  # hours


class WeeklySummary(PeriodSummary):
    week: date


class Summaries(CamelModel):
    monthly: Dict[str, PeriodSummary] = {}
    weekly: List[WeeklySummary] = []


class RollingPoint(CamelModel):
    date: date
    value: float
    average: float


class Analytics(CamelModel):
    total_stats: TotalStats = TotalStats()
    trends: Trends = Trends()
    performance: Performance = Performance()
    temporal: Temporal = Temporal()
    summaries: Summaries = Summaries()
    personal_records: List[PersonalRecord] = []
    training_load: List[WeeklyLoad] = []
    rolling_pace: List[RollingPoint] = []
    rolling_heart_rate: List[RollingPoint] = []


# ─── Dataset ──────────────────────────────────────────────────────────────────

class Dataset(CamelModel):
    """The persisted document. `activities` is kept sorted newest first."""
    last_updated: datetime
    total_activities: int = 0
    year_to_date: int
    data_range: DataRange = DataRange()
    activities: List[Activity] = []
    summary: Summary = Summary()
    analytics: Optional[Analytics] = None

    def find_by_date(self, day: date) -> Optional[Activity]:
        return next((a for a in self.activities if a.date == day), None)
