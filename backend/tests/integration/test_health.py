"""tests/integration/test_health.py — GET /api/health."""

from __future__ import annotations


def test_health_is_public(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["status"] == "healthy"
    assert body["service"] == "group-expense-tracker"
    assert body["timestamp"]
