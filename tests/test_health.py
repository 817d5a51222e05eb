"""
tests/test_health.py -- Integration tests for GET /api/v1/health.
"""

from __future__ import annotations


def test_health_returns_200(api_client):
    client, _ = api_client
    resp = client.get("/api/v1/health")
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "healthy"
    assert "version" in data


def test_health_no_auth_required(api_client):
    """Health endpoint is accessible without any session cookie or header."""
    client, _ = api_client
    client.cookies.clear()
    assert client.get("/api/v1/health", headers={}).status_code == 200
