"""Tests for dataset construction and the upsert engine."""
import json
from datetime import date, datetime, timezone

import pytest

from rundash.dataset.merge import (
    build_dataset,
    empty_dataset,
    recompute,
    remove_activity,
    upsert_activities,
    upsert_activity,
)
from rundash.errors import ComputationError
from rundash.models.activity import ManualEntry
from rundash.strava.normalizer import build_manual_activity

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)
LATER = datetime(2025, 7, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture(name="dataset")
def dataset_fixture(make_run):
    runs = [
        make_run("2025-06-02", km=5.0, seconds=1500),
        make_run("2025-06-10", km=10.0, seconds=3300),
        make_run("2025-06-05", km=8.0, seconds=2700),
    ]
    return build_dataset(runs, year=2025, now=NOW)


class TestBuildDataset:
    def test_sorted_newest_first(self, dataset):
        assert [a.date for a in dataset.activities] == [
            date(2025, 6, 10), date(2025, 6, 5), date(2025, 6, 2),
        ]

    def test_metadata(self, dataset):
        assert dataset.total_activities == 3
        assert dataset.year_to_date == 2025
        assert dataset.last_updated == NOW
        assert dataset.data_range.start_date == date(2025, 6, 2)
        assert dataset.data_range.end_date == date(2025, 6, 10)
        assert dataset.summary.total_distance == "23.00"
        assert dataset.analytics.total_stats.total_runs == 3

    def test_empty_dataset_has_no_nan(self):
        dataset = empty_dataset(year=2025, now=NOW)
        text = json.dumps(dataset.to_json_dict())
        assert dataset.total_activities == 0
        assert dataset.summary.average_pace == "N/A"
        assert "NaN" not in text and "Infinity" not in text

    def test_year_defaults_to_now(self):
        assert empty_dataset(now=NOW).year_to_date == 2025


class TestUpsertActivity:
    def test_new_date_is_inserted(self, dataset, make_run):
        updated = upsert_activity(dataset, make_run("2025-06-12", km=6.0), now=LATER)
        assert updated.total_activities == 4
        assert updated.activities[0].date == date(2025, 6, 12)
        assert updated.last_updated == LATER

    def test_same_date_is_replaced(self, dataset, make_run):
        replacement = make_run("2025-06-05", km=12.0, seconds=3900, activity_id=999)
        updated = upsert_activity(dataset, replacement, now=LATER)

        assert updated.total_activities == 3
        on_day = [a for a in updated.activities if a.date == date(2025, 6, 5)]
        assert len(on_day) == 1
        assert on_day[0].id == 999
        assert updated.summary.total_distance == "27.00"

    def test_same_date_duplicates_collapse(self, make_run):
        dataset = build_dataset(
            [make_run("2025-06-05", activity_id=1), make_run("2025-06-05", activity_id=2)],
            now=NOW,
        )
        updated = upsert_activity(dataset, make_run("2025-06-05", activity_id=3), now=NOW)
        assert [a.id for a in updated.activities] == [3]

    def test_input_dataset_is_untouched(self, dataset, make_run):
        before = dataset.model_copy(deep=True)
        upsert_activity(dataset, make_run("2025-06-12"), now=LATER)
        assert dataset == before

    def test_year_label_is_kept(self, make_run):
        dataset = empty_dataset(year=2024, now=NOW)
        assert upsert_activity(dataset, make_run("2024-12-30"), now=NOW).year_to_date == 2024

    def test_aggregates_match_a_fresh_build(self, dataset, make_run):
        new_run = make_run("2025-06-12", km=6.0)
        updated = upsert_activity(dataset, new_run, now=LATER)
        rebuilt = build_dataset(list(dataset.activities) + [new_run], year=2025, now=LATER)
        assert updated == rebuilt


class TestUpsertActivities:
    def test_order_independent_for_distinct_dates(self, make_run):
        runs = [make_run("2025-06-01"), make_run("2025-06-03"), make_run("2025-06-02")]
        base = empty_dataset(year=2025, now=NOW)
        forward = upsert_activities(base, runs, now=NOW)
        backward = upsert_activities(base, list(reversed(runs)), now=NOW)
        assert forward.to_json_dict() == backward.to_json_dict()

    def test_idempotent(self, dataset, make_run):
        run = make_run("2025-06-12")
        once = upsert_activity(dataset, run, now=LATER)
        twice = upsert_activity(once, run, now=LATER)
        assert once == twice

    def test_later_entry_wins(self, make_run):
        base = empty_dataset(year=2025, now=NOW)
        updated = upsert_activities(
            base,
            [make_run("2025-06-01", activity_id=1), make_run("2025-06-01", activity_id=2)],
            now=NOW,
        )
        assert [a.id for a in updated.activities] == [2]


class TestRemoveAndRecompute:
    def test_remove(self, dataset):
        updated = remove_activity(dataset, date(2025, 6, 5), now=LATER)
        assert updated.total_activities == 2
        assert updated.find_by_date(date(2025, 6, 5)) is None
        assert updated.summary.total_distance == "15.00"

    def test_remove_missing_date_keeps_activities(self, dataset):
        updated = remove_activity(dataset, date(2020, 1, 1), now=NOW)
        assert updated.activities == dataset.activities

    def test_recompute_refreshes_stale_aggregates(self, dataset):
        stale = dataset.model_copy(update={"analytics": None, "total_activities": 0})
        fixed = recompute(stale, now=NOW)
        assert fixed.total_activities == 3
        assert fixed.analytics is not None


class TestNeverRaisesComputationError:
    @pytest.mark.parametrize("runs", [
        [],
        [("2025-01-01", 0.0, 0)],
        [("2025-01-01", 5.0, 0), ("2025-01-02", 0.0, 1200)],
        [("2025-01-01", 42.2, 14400)],
    ])
    def test_edge_inputs(self, runs):
        activities = [
            build_manual_activity(ManualEntry(date=d, distance_km=km, moving_time=t))
            for d, km, t in runs
        ]
        try:
            dataset = build_dataset(activities, now=NOW)
        except ComputationError:  # pragma: no cover
            pytest.fail("ComputationError raised for edge input")
        assert dataset.total_activities == len(runs)
