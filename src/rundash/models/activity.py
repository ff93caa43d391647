"""Activity data models: the canonical normalized run and the manual-entry input."""
from datetime import date
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes in Python, camelCase keys in the JSON dataset."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


def _truncate_to_date(value):
    # "2025-01-15T07:30:00Z" and "2025-01-15" both become 2025-01-15
    if isinstance(value, str):
        return value.strip()[:10]
    return value


class Activity(CamelModel):
    """
    One normalized run.

    Derived fields (distance strings, paces, speed, calendar buckets) are
    computed once by the normalizer and never re-derived downstream.

    Missing-value conventions:
      - pace strings: "0:00" (bulk/Strava path) or "N/A" (manual path)
      - heart rate, suffer score, kudos: None when the source omits them
      - lat/lng pairs: empty list
    """

    id: Union[int, str]
    name: Optional[str] = None
    date: date

    # Distance / time
    distance: float  # meters, canonical
    distance_km: str
    distance_miles: str
    moving_time: int  # seconds
    elapsed_time: int  # seconds; may be < moving_time for manual entries
    total_elevation_gain: float = 0.0  # meters

    # Speed / pace
    average_speed: float = 0.0  # m/s
    max_speed: float = 0.0  # m/s
    average_pace_min_mile: str
    average_pace_min_km: str

    # Effort
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    suffer_score: Optional[int] = None
    kudos_count: Optional[int] = None

    # Location / equipment
    start_lat_lng: List[float] = []
    end_lat_lng: List[float] = []
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    weather_temp: Optional[float] = None
    gear: Optional[str] = None
    gear_name: Optional[str] = None

    # Per-activity rates
    pace_per_mile: float = 0.0  # seconds per mile
    elevation_per_mile: float = 0.0  # feet per mile
    speed_mph: float = 0.0

    # Calendar buckets
    weekday: str
    month: str
    year: int
    quarter_year: int
    is_weekend: bool
    season: str
    time_of_day: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def truncate_date(cls, value):
        return _truncate_to_date(value)

    @field_validator("start_lat_lng", "end_lat_lng", mode="before")
    @classmethod
    def none_to_empty(cls, value):
        return value or []


class ManualEntry(CamelModel):
    """
    A hand-typed run from the add CLI or the POST /activities route.

    distance_km and moving_time are required by the normalizer, but are
    Optional here so that the normalizer can report which one is missing.
    """

    date: date
    distance_km: Optional[float] = None
    moving_time: Optional[int] = None
    total_elevation_gain: float = 0.0
    average_heartrate: Optional[float] = None
    max_heartrate: Optional[float] = None
    name: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def truncate_date(cls, value):
        return _truncate_to_date(value)
