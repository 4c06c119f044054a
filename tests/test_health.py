"""
Tests for health check endpoints.
"""

from unittest.mock import MagicMock

import redis

from pos_api.routers.public import health


class TestHealthEndpoints:
    """Test health check API endpoints."""

    def test_health_check(self, client):
        """Basic health check should return healthy status."""
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "pos-api"

    def test_detailed_health_degraded_when_redis_down(self, client, monkeypatch):
        """Redis outage degrades the status but keeps 200."""
        failing = MagicMock()
        failing.ping.side_effect = redis.ConnectionError("down")
        monkeypatch.setattr(health, "get_redis_sync_client", lambda: failing)
        monkeypatch.setattr(health, "check_postgresql_health", lambda: {"status": "healthy"})

        response = client.get("/api/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["dependencies"]["redis"]["status"] == "unhealthy"
        assert "event_circuit_breaker" in data

    def test_detailed_health_unavailable_when_database_down(self, client, monkeypatch):
        """PostgreSQL outage returns 503."""
        healthy = MagicMock()
        monkeypatch.setattr(health, "get_redis_sync_client", lambda: healthy)
        monkeypatch.setattr(
            health,
            "check_postgresql_health",
            lambda: {"status": "unhealthy", "error": "OperationalError"},
        )

        response = client.get("/api/health/detailed")

        assert response.status_code == 503
        assert response.json()["dependencies"]["postgresql"]["status"] == "unhealthy"
