from __future__ import annotations

from fastapi.testclient import TestClient

from auth_service.main import app


def test_healthz_carries_security_headers():
    # no context manager: the lifespan (and its Postgres pool) is not started
    client = TestClient(app)

    response = client.get("/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
    assert response.headers["x-content-type-options"] == "nosniff"
    assert response.headers["x-frame-options"] == "DENY"
    assert "strict-transport-security" not in response.headers


def test_metrics_exposes_auth_counter():
    client = TestClient(app)

    response = client.get("/metrics")

    assert response.status_code == 200
    assert "auth_requests_total" in response.text
