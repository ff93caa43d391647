"""Integration tests for the dataset and /activities routes."""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from rundash.api.deps import get_data_dir
from rundash.api.main import create_app
from rundash.dataset.merge import build_dataset
from rundash.dataset.store import dataset_path, load_dataset, save_dataset

NOW = datetime(2025, 6, 30, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(name="client")
def client_fixture(settings, tmp_path):
    app = create_app()
    app.dependency_overrides[get_data_dir] = lambda: tmp_path
    with TestClient(app) as c:
        yield c


@pytest.fixture(name="seeded_dataset")
def seeded_dataset_fixture(tmp_path, make_run):
    dataset = build_dataset(
        [
            make_run("2025-06-02", km=5.0, seconds=1500),
            make_run("2025-06-05", km=10.0, seconds=3300),
            make_run("2025-06-09", km=8.0, seconds=2700, hr=150),
        ],
        year=2025,
        now=NOW,
    )
    save_dataset(dataset, dataset_path(tmp_path))
    return dataset


class TestDatasetRoutes:
    def test_dataset_missing(self, client):
        resp = client.get("/dataset")
        assert resp.status_code == 404

    def test_dataset(self, client, seeded_dataset):
        resp = client.get("/dataset")
        assert resp.status_code == 200
        body = resp.json()
        assert body["totalActivities"] == 3
        assert body["lastUpdated"].startswith("2025-06-30T12:00:00")
        assert [a["date"] for a in body["activities"]] == ["2025-06-09", "2025-06-05", "2025-06-02"]

    def test_summary(self, client, seeded_dataset):
        body = client.get("/summary").json()
        assert body["totalDistance"] == "23.00"
        assert body["yearToDateStats"]["totalRuns"] == 3

    def test_analytics(self, client, seeded_dataset):
        body = client.get("/analytics").json()
        assert body["totalStats"]["totalRuns"] == 3
        assert [pr["label"] for pr in body["personalRecords"]] == ["5K", "10K"]
        assert body["trainingLoad"][0]["week"] == "2025-06-02"

    def test_year_selects_file(self, client, tmp_path, make_run):
        save_dataset(build_dataset([make_run("2024-05-01")], year=2024, now=NOW),
                     dataset_path(tmp_path, 2024))
        assert client.get("/summary", params={"year": 2024}).json()["totalDistance"] == "5.00"
        assert client.get("/summary").status_code == 404

    def test_openapi_describes_dataset_models(self, client):
        schema = client.get("/openapi.json").json()
        ref = schema["paths"]["/summary"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]["$ref"]
        summary_schema = schema["components"]["schemas"][ref.rsplit("/", 1)[-1]]
        assert "totalDistance" in summary_schema["properties"]
        assert "yearToDateStats" in summary_schema["properties"]


class TestActivityRoutes:
    def test_list_newest_first_with_paging(self, client, seeded_dataset):
        resp = client.get("/activities", params={"limit": 2, "offset": 1})
        assert resp.status_code == 200
        assert [a["date"] for a in resp.json()] == ["2025-06-05", "2025-06-02"]

    def test_get_by_date(self, client, seeded_dataset):
        resp = client.get("/activities/2025-06-09")
        assert resp.status_code == 200
        assert resp.json()["averageHeartrate"] == 150.0

    def test_get_missing_date(self, client, seeded_dataset):
        assert client.get("/activities/2025-06-10").status_code == 404

    def test_get_invalid_date(self, client, seeded_dataset):
        assert client.get("/activities/not-a-date").status_code == 422

    def test_post_manual_activity(self, client, seeded_dataset, tmp_path):
        resp = client.post("/activities", json={
            "date": "2025-06-12", "distanceKm": 5, "movingTime": 1500, "averageHeartrate": 150,
        })

        assert resp.status_code == 201
        body = resp.json()
        assert body["averagePaceMinKm"] == "5:00"
        assert body["sufferScore"] == 75
        assert load_dataset(dataset_path(tmp_path)).total_activities == 4

    def test_post_replaces_same_date(self, client, seeded_dataset, tmp_path):
        resp = client.post("/activities", json={"date": "2025-06-05", "distanceKm": 12, "movingTime": 3900})
        assert resp.status_code == 201
        stored = load_dataset(dataset_path(tmp_path))
        assert stored.total_activities == 3
        assert stored.summary.total_distance == "25.00"

    def test_post_creates_missing_file(self, client, tmp_path):
        resp = client.post(
            "/activities",
            params={"year": 2025},
            json={"date": "2025-06-12", "distanceKm": 5, "movingTime": 1500},
        )
        assert resp.status_code == 201
        assert dataset_path(tmp_path, 2025).exists()

    def test_post_missing_field_is_422(self, client, seeded_dataset):
        resp = client.post("/activities", json={"date": "2025-06-12", "distanceKm": 5})
        assert resp.status_code == 422
        assert "moving_time" in resp.json()["detail"]

    def test_delete(self, client, seeded_dataset, tmp_path):
        resp = client.delete("/activities/2025-06-05")
        assert resp.status_code == 204
        assert client.get("/activities/2025-06-05").status_code == 404
        assert load_dataset(dataset_path(tmp_path)).summary.total_distance == "13.00"

    def test_delete_missing_date(self, client, seeded_dataset):
        assert client.delete("/activities/2025-01-01").status_code == 404
