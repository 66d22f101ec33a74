"""Tests for admin endpoints."""

from fastapi.testclient import TestClient

from fieldforce.api.app import create_app


def test_admin_requires_token(container) -> None:
    with TestClient(create_app(container)) as client:
        assert client.get("/admin/health").status_code == 401
        assert (
            client.get("/admin/overrides", headers={"X-Admin-Token": "wrong"})
        ).status_code == 401


def test_admin_health_and_overrides(container) -> None:
    container.audit_service.record_event(
        "tour_checkpoint", "TR-002", "checkpoint_override", None, {"distance_meters": 300}
    )
    with TestClient(create_app(container)) as client:
        health = client.get("/admin/health", headers={"X-Admin-Token": "admin-token"})
        overrides = client.get(
            "/admin/overrides", headers={"X-Admin-Token": "admin-token"}
        )

    assert health.json() == {"status": "ok", "checkpoint_busy": False}
    assert overrides.json()["overrides"][0]["entity_id"] == "TR-002"


def test_admin_ui_is_public(container) -> None:
    with TestClient(create_app(container)) as client:
        response = client.get("/admin/ui")

    assert response.status_code == 200
    assert "Fieldforce Admin" in response.text
