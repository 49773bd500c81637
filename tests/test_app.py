"""
Tests for the FastAPI web application.
"""

import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from trivault.app import app


@pytest.fixture
def temp_db(monkeypatch):
    """Point default storage at a temporary database."""
    with tempfile.TemporaryDirectory() as tmpdir:
        db_path = Path(tmpdir) / "storage.db"
        monkeypatch.setenv("TRIVAULT_DB_PATH", str(db_path))
        yield db_path


@pytest.fixture
def client(temp_db):
    """Create a test client for the FastAPI app."""
    return TestClient(app)


class TestHealthEndpoint:
    """Tests for the /health endpoint."""

    def test_health_returns_ok(self, client):
        """Health endpoint should return status ok."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestAchievementsEndpoint:
    """Tests for the /api/achievements endpoint."""

    def test_returns_expected_structure(self, client):
        response = client.get("/api/achievements")

        assert response.status_code == 200
        data = response.json()
        assert set(data) == {"achievements", "summary", "next", "new"}
        assert data["summary"] == {"total": 10, "unlocked": 0, "progress": 0}
        assert data["next"]["id"] == "first-seal"
        assert data["new"] == []

    def test_counts_unlocked(self, client):
        response = client.get("/api/achievements", params={"seals": 1})

        data = response.json()
        assert data["summary"]["unlocked"] == 2
        assert data["summary"]["progress"] == 20
        assert data["new"] == ["first-seal", "stability-master"]
        assert data["next"]["id"] == "half-way"

    def test_all_flags(self, client):
        response = client.get(
            "/api/achievements",
            params={
                "seals": 3,
                "has_all_seals": "true",
                "early_adopter": "true",
                "referrals": 25,
            },
        )

        data = response.json()
        assert data["summary"]["progress"] == 100
        assert data["next"] is None

    def test_negative_seals_rejected(self, client):
        response = client.get("/api/achievements", params={"seals": -1})
        assert response.status_code == 422

    def test_unusable_storage_still_answers(self, client, temp_db, monkeypatch):
        temp_db.write_text("not a directory")
        monkeypatch.setenv("TRIVAULT_DB_PATH", str(temp_db / "sub" / "storage.db"))

        response = client.get("/api/achievements", params={"seals": 1})

        assert response.status_code == 200
        assert response.json()["new"] == ["first-seal", "stability-master"]

    def test_configuration_error(self, client):
        with patch("trivault.app.validate_config", side_effect=ValueError("bad")):
            response = client.get("/api/achievements")
        assert response.status_code == 500
        assert "Configuration error" in response.json()["detail"]


class TestCheckEndpoint:
    """Tests for the /api/achievements/check endpoint."""

    def test_returns_diff(self, client):
        response = client.post(
            "/api/achievements/check",
            json={
                "previous": {"seals_collected": 1},
                "current": {"seals_collected": 3, "has_all_seals": True},
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "unlocked": ["half-way", "champion", "diamond-hands", "bridge-builder"]
        }

    def test_backwards_reports_nothing(self, client):
        response = client.post(
            "/api/achievements/check",
            json={"previous": {"seals_collected": 2}, "current": {"seals_collected": 0}},
        )
        assert response.json() == {"unlocked": []}

    def test_negative_referrals_rejected(self, client):
        response = client.post(
            "/api/achievements/check",
            json={"previous": {}, "current": {"referral_count": -3}},
        )
        assert response.status_code == 422


class TestViewedEndpoint:
    """Tests for the /api/achievements/viewed endpoint."""

    def test_marks_viewed(self, client):
        response = client.post("/api/achievements/viewed", json={"ids": ["first-seal"]})

        assert response.status_code == 200
        assert response.json() == {"viewed": ["first-seal"]}

    def test_merges_across_requests(self, client):
        client.post("/api/achievements/viewed", json={"ids": ["stability-master"]})
        response = client.post("/api/achievements/viewed", json={"ids": ["first-seal"]})
        assert response.json() == {"viewed": ["first-seal", "stability-master"]}

    def test_viewed_removed_from_new(self, client):
        client.post("/api/achievements/viewed", json={"ids": ["first-seal"]})

        response = client.get("/api/achievements", params={"seals": 1})

        data = response.json()
        assert data["new"] == ["stability-master"]
        first_seal = next(a for a in data["achievements"] if a["id"] == "first-seal")
        assert first_seal["unlocked"] is True
        assert first_seal["new"] is False

    def test_missing_ids_rejected(self, client):
        response = client.post("/api/achievements/viewed", json={})
        assert response.status_code == 422
