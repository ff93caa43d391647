"""Tests for the add / process / refresh scripts."""
import json
from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from rundash.dataset.merge import build_dataset
from rundash.dataset.store import dataset_path, load_dataset, save_dataset
from rundash.errors import ValidationError
from rundash.scripts import add_activity as add_script
from rundash.scripts import process as process_script
from rundash.scripts import refresh as refresh_script

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)

ACTIVITY_ENV = [
    "ACTIVITY_YEAR", "ACTIVITY_DATE", "ACTIVITY_DISTANCE", "ACTIVITY_TIME",
    "ACTIVITY_ELEVATION", "ACTIVITY_HR", "ACTIVITY_MAX_HR",
]


@pytest.fixture(autouse=True)
def clean_activity_env(monkeypatch):
    for name in ACTIVITY_ENV:
        monkeypatch.delenv(name, raising=False)


# ─── add ──────────────────────────────────────────────────────────────────────

class TestAddActivity:
    @pytest.mark.asyncio
    async def test_manual_values_without_credentials(self, settings, tmp_path):
        dataset = await add_script.add_activity(
            date(2025, 3, 14), distance_km=5.0, moving_time=1500, average_hr=150, now=NOW
        )

        path = dataset_path(tmp_path, 2025)
        assert load_dataset(path) == dataset
        [activity] = dataset.activities
        assert activity.average_pace_min_km == "5:00"
        assert activity.suffer_score == 75

    @pytest.mark.asyncio
    async def test_strava_activity_wins(self, settings, tmp_path, make_run):
        service = MagicMock()
        service.find_activity_on = AsyncMock(return_value=make_run("2025-03-14", km=10.0, seconds=3000))

        dataset = await add_script.add_activity(
            date(2025, 3, 14), distance_km=5.0, moving_time=1500, service=service, now=NOW
        )

        assert dataset.activities[0].distance_km == "10.00"
        service.find_activity_on.assert_awaited_once_with(date(2025, 3, 14))

    @pytest.mark.asyncio
    async def test_falls_back_when_strava_has_nothing(self, settings, tmp_path):
        service = MagicMock()
        service.find_activity_on = AsyncMock(return_value=None)

        dataset = await add_script.add_activity(
            date(2025, 3, 14), distance_km=5.0, moving_time=1500, service=service, now=NOW
        )

        assert dataset.activities[0].average_pace_min_km == "5:00"

    @pytest.mark.asyncio
    async def test_missing_manual_values(self, settings):
        with pytest.raises(ValidationError) as exc_info:
            await add_script.add_activity(date(2025, 3, 14), distance_km=5.0, now=NOW)
        assert "ACTIVITY_TIME" in str(exc_info.value)
        assert "ACTIVITY_DISTANCE" not in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_replaces_same_date(self, settings, tmp_path, make_run):
        path = dataset_path(tmp_path, 2025)
        save_dataset(
            build_dataset([make_run("2025-03-14", km=3.0), make_run("2025-03-10")], year=2025, now=NOW),
            path,
        )

        dataset = await add_script.add_activity(
            date(2025, 3, 14), distance_km=5.0, moving_time=1500, now=NOW
        )

        assert dataset.total_activities == 2
        assert dataset.find_by_date(date(2025, 3, 14)).distance_km == "5.00"

    @pytest.mark.asyncio
    async def test_explicit_year_file(self, settings, tmp_path):
        await add_script.add_activity(
            date(2024, 12, 31), year=2025, distance_km=5.0, moving_time=1500, now=NOW
        )
        assert dataset_path(tmp_path, 2025).exists()


class TestAddMain:
    def test_missing_fields_exit_one(self, settings, capsys):
        with pytest.raises(SystemExit) as exc_info:
            add_script.main(["--date", "2025-03-14"])
        assert exc_info.value.code == 1
        err = capsys.readouterr().err
        assert "ACTIVITY_DISTANCE" in err
        assert "ACTIVITY_TIME" in err

    def test_missing_date_exit_one(self, settings, capsys):
        with pytest.raises(SystemExit) as exc_info:
            add_script.main(["--distance", "5", "--time", "1500"])
        assert exc_info.value.code == 1
        assert "date" in capsys.readouterr().err

    def test_invalid_date_exit_one(self, settings):
        with pytest.raises(SystemExit) as exc_info:
            add_script.main(["--date", "14/03/2025", "--distance", "5", "--time", "1500"])
        assert exc_info.value.code == 1

    def test_reads_environment(self, settings, tmp_path, monkeypatch):
        monkeypatch.setenv("ACTIVITY_DATE", "2025-03-14")
        monkeypatch.setenv("ACTIVITY_DISTANCE", "8")
        monkeypatch.setenv("ACTIVITY_TIME", "2880")
        monkeypatch.setenv("ACTIVITY_ELEVATION", "")

        add_script.main([])

        raw = json.loads(dataset_path(tmp_path, 2025).read_text())
        assert raw["activities"][0]["averagePaceMinKm"] == "6:00"
        assert raw["activities"][0]["totalElevationGain"] == 0.0

    def test_flags_override_environment(self, settings, tmp_path, monkeypatch):
        monkeypatch.setenv("ACTIVITY_DISTANCE", "8")
        add_script.main(["--date", "2025-03-14", "--distance", "5", "--time", "1500"])
        dataset = load_dataset(dataset_path(tmp_path, 2025))
        assert dataset.activities[0].distance_km == "5.00"


# ─── process ──────────────────────────────────────────────────────────────────

class TestProcess:
    def test_recomputes_stale_file(self, settings, tmp_path, make_run):
        path = dataset_path(tmp_path)
        stale = build_dataset([make_run("2025-03-14"), make_run("2025-03-16")], now=NOW)
        save_dataset(stale.model_copy(update={"analytics": None}), path)

        process_script.main([])

        reloaded = load_dataset(path)
        assert reloaded.analytics is not None
        assert reloaded.total_activities == 2

    def test_year_and_data_dir_flags(self, settings, tmp_path, make_run):
        other = tmp_path / "other"
        save_dataset(build_dataset([make_run("2024-03-14")], year=2024, now=NOW),
                     dataset_path(other, 2024))

        dataset = process_script.process(year=2024, data_dir=str(other))

        assert dataset.year_to_date == 2024

    def test_missing_file_exit_one(self, settings):
        with pytest.raises(SystemExit) as exc_info:
            process_script.main(["--year", "1999"])
        assert exc_info.value.code == 1


# ─── refresh ──────────────────────────────────────────────────────────────────

class TestRefreshScript:
    def test_requires_credentials(self, settings):
        with pytest.raises(SystemExit) as exc_info:
            refresh_script.main([])
        assert exc_info.value.code == 1

    def test_runs_service(self, settings, monkeypatch):
        monkeypatch.setattr(settings, "strava_client_id", "1")
        monkeypatch.setattr(settings, "strava_client_secret", "s")
        monkeypatch.setattr(settings, "strava_refresh_token", "r")
        mock_service = MagicMock()
        mock_service.refresh = AsyncMock(return_value=MagicMock(total_activities=3))

        with patch("rundash.strava.sync_service.DatasetRefreshService", return_value=mock_service):
            with pytest.raises(SystemExit) as exc_info:
                refresh_script.main(["--year", "2025", "--merge"])

        assert exc_info.value.code == 0
        mock_service.refresh.assert_awaited_once_with(year=2025, merge=True)


# ─── python -m rundash ────────────────────────────────────────────────────────

class TestMainDispatch:
    def test_unknown_command(self):
        from rundash.__main__ import _run_command

        with pytest.raises(SystemExit) as exc_info:
            _run_command("bogus", [])
        assert exc_info.value.code == 2

    def test_dispatches_to_script(self):
        from rundash.__main__ import _run_command

        with patch("rundash.scripts.process.main") as mock_main:
            _run_command("process", ["--year", "2025"])
        mock_main.assert_called_once_with(["--year", "2025"])
