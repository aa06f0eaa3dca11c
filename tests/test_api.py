"""
Tests for the analysis REST API (no database required).

Usage:
    pytest tests/test_api.py -v
"""

from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from src.api import db, review_routes
from src.api.main import app
from src.reviews.review_models import Review


def review_payload():
    return [
        {"rating": 5, "text": "Great coffee and friendly staff", "published_at": f"2024-05-0{d}T09:00:00"}
        for d in range(1, 8)
    ] + [
        {"rating": 1, "text": "Slow and rude service", "published_at": "2024-05-12T18:00:00",
         "theme_tags": "service; speed"}
        for _ in range(3)
    ]


@pytest.fixture
def client():
    # No lifespan: the pool is never created
    return TestClient(app)


class TestHealth:

    def test_degraded_without_database(self, client, monkeypatch):
        monkeypatch.setattr(db, "check_health", lambda: {"status": "disconnected", "error": "down"})
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.json()["status"] == "degraded"
        assert response.json()["database"] == "disconnected"


class TestPostAnalysis:

    def test_analysis(self, client):
        response = client.post("/api/reviews/analysis", json={"reviews": review_payload()})
        assert response.status_code == 200
        body = response.json()
        assert body["reviews_analyzed"] == 10
        clusters = {c["id"]: c for c in body["review_clusters"]}
        assert clusters["rating-low"]["sentiment"] == "negative"
        assert body["insights"]["opportunities"] == []

    def test_cluster_summary_and_staff(self, client):
        reviews = review_payload()
        for review in reviews[-3:]:
            review["staff_mentions"] = "Tom, Ana"
        reviews[-1]["staff_mentions"] = "Tom"

        response = client.post("/api/reviews/analysis", json={"reviews": reviews})
        assert response.status_code == 200
        body = response.json()
        assert body["cluster_summary"] == {
            "total_clusters": 4,
            "largest_cluster": "Delighted Customers",
            "most_positive_cluster": "Delighted Customers",
            "most_negative_cluster": "Dissatisfied Customers",
            "unclustered_reviews": 0,
        }
        clusters = {c["id"]: c for c in body["review_clusters"]}
        assert clusters["rating-low"]["staff"] == ["Tom", "Ana"]
        assert clusters["rating-5"]["staff"] == []

    def test_context(self, client):
        response = client.post("/api/reviews/analysis", json={
            "reviews": review_payload(),
            "context": {"business_type": "bar", "price_range": "luxury", "location": {"country": "Chile"}},
        })
        assert response.status_code == 200
        names = [c["name"] for c in response.json()["review_clusters"]]
        assert "Dissatisfied Patrons" in names
        assert any("luxury positioning" in r for r in response.json()["insights"]["risks"])

    def test_empty_reviews(self, client):
        response = client.post("/api/reviews/analysis", json={"reviews": []})
        assert response.status_code == 200
        assert response.json()["review_clusters"] == []
        assert response.json()["cluster_summary"]["total_clusters"] == 0

    def test_invalid_rating_rejected(self, client):
        response = client.post("/api/reviews/analysis", json={"reviews": [{"rating": 9}]})
        assert response.status_code == 422


class TestStoredAnalysis:

    def test_database_unavailable(self, client, monkeypatch):
        @contextmanager
        def unavailable():
            raise ConnectionError("Database pool not available")
            yield

        monkeypatch.setattr(db, "get_connection", unavailable)
        response = client.get("/api/reviews/Blue%20Door/analysis")
        assert response.status_code == 503

    def test_stored_reviews(self, client, monkeypatch):
        @contextmanager
        def connection():
            yield MagicMock()

        stored = [Review(rating=5, text="lovely", published_at="2024-05-01")] * 4
        monkeypatch.setattr(db, "get_connection", connection)
        monkeypatch.setattr(review_routes, "load_reviews_from_db", lambda conn, name, limit: stored)

        response = client.get("/api/reviews/Blue%20Door/analysis", params={"business_type": "cafe"})
        assert response.status_code == 200
        assert response.json()["reviews_analyzed"] == 4
        assert "Delighted Diners" in [c["name"] for c in response.json()["review_clusters"]]

    def test_unknown_business(self, client, monkeypatch):
        @contextmanager
        def connection():
            yield MagicMock()

        monkeypatch.setattr(db, "get_connection", connection)
        monkeypatch.setattr(review_routes, "load_reviews_from_db", lambda conn, name, limit: [])
        assert client.get("/api/reviews/Nowhere/analysis").status_code == 404
