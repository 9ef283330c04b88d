"""Tests for error handling in the CoRate API.

Covers missing rating data, failing store lookups and unexpected errors,
and checks that each maps to a consistent JSON error response.
"""

import logging
from pathlib import Path

import pandas as pd
import pytest
from fastapi.testclient import TestClient

import src.api.dependencies as dependencies
import src.api.exceptions as api_exceptions
import src.recommender.exceptions as core_exceptions
from src.api.config import settings
from src.api.exceptions import StoreAccessError
from src.api.main import app
from src.recommender.store import InMemoryRatingStore

# Configure logging for tests
logging.basicConfig(level=logging.WARNING)


class UnreachableStore(InMemoryRatingStore):
    """Every per-user lookup fails as if the database went away."""

    def get_ratings_by_user(self, user_id):
        raise StoreAccessError("get_ratings_by_user", ConnectionError("connection refused"))


class BrokenStore(InMemoryRatingStore):
    """Fails with an error the store does not translate."""

    def get_ratings_by_product(self, product_id):
        raise RuntimeError("index corrupted")


@pytest.fixture
def bare_client(monkeypatch, tmp_path):
    """Client with no cached store and an empty data directory."""
    monkeypatch.setattr(settings, "data_dir", str(tmp_path))
    dependencies._store_cache = None
    try:
        yield TestClient(app)
    finally:
        dependencies._store_cache = None


def test_missing_data_returns_503(bare_client):
    response = bare_client.get("/recommendations/U1")

    assert response.status_code == 503
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "StoreUnavailableError"
    assert "not found" in data["message"]


def test_status_with_missing_data(bare_client):
    response = bare_client.get("/status")

    assert response.status_code == 200
    data = response.json()
    assert data["store_loaded"] is False
    assert data["error"]


def test_health_check_not_affected_by_missing_data(bare_client):
    response = bare_client.get("/ping")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_store_access_failure_returns_503(bare_client):
    store = UnreachableStore()
    dependencies._store_cache = store

    response = bare_client.get("/recommendations/U1")

    assert response.status_code == 503
    data = response.json()
    assert data["error"] == "StoreAccessError"
    assert data["details"]["operation"] == "get_ratings_by_user"


def test_unexpected_failure_returns_500(bare_client):
    dependencies._store_cache = BrokenStore()

    response = bare_client.get("/similar-products/P1")

    assert response.status_code == 500
    data = response.json()
    assert data["error"] == "RecommendationError"
    assert data["details"]["error_type"] == "RuntimeError"


def test_multiple_errors_consistency(bare_client):
    responses = [bare_client.get(f"/recommendations/{uid}") for uid in ("a", "b", "c")]

    assert {r.status_code for r in responses} == {503}
    for response in responses:
        assert "error" in response.json()


def test_reload_store_reads_csv(bare_client, tmp_path):
    pd.DataFrame([
        {"user_id": "U1", "product_id": "P1", "rating": 5},
        {"user_id": "U2", "product_id": "P1", "rating": 4},
    ]).to_csv(tmp_path / "ratings.csv", index=False)
    pd.DataFrame([{"product_id": "P1", "title": "Kettle"}]).to_csv(
        tmp_path / "products.csv", index=False
    )

    response = bare_client.post("/reload-store")

    assert response.status_code == 200
    status = bare_client.get("/status").json()
    assert status["store_loaded"] is True
    assert status["num_users"] == 2
    assert status["num_products"] == 1
    assert status["num_ratings"] == 2


def test_corrupt_csv_returns_503(bare_client, tmp_path):
    pd.DataFrame([{"user": "U1", "item": "P1"}]).to_csv(tmp_path / "ratings.csv", index=False)

    response = bare_client.get("/recommendations/U1")

    assert response.status_code == 503
    assert "missing required columns" in response.json()["details"]["error"]


def test_core_errors_are_shared_with_api():
    assert api_exceptions.InvalidRatingError is core_exceptions.InvalidRatingError
    assert api_exceptions.StoreAccessError is core_exceptions.StoreAccessError
    assert issubclass(api_exceptions.RatingNotFoundError, core_exceptions.CoRateException)


def test_recommender_does_not_import_api():
    package = Path(core_exceptions.__file__).parent
    for module in package.glob("*.py"):
        assert "src.api" not in module.read_text(), module.name
