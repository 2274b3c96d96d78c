from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from event_registration.models.audit_log import AuditLog


def test_cleanup_requires_cron_secret(client: TestClient) -> None:
    assert client.get("/api/v1/cron/cleanup").status_code == 401
    response = client.get(
        "/api/v1/cron/cleanup", headers={"Authorization": "Bearer wrong-secret"}
    )
    assert response.status_code == 401


def test_cleanup_selected_categories(client: TestClient, db: Session) -> None:
    old = datetime.now(timezone.utc) - timedelta(days=120)
    db.add(AuditLog(action="event.updated", entity_type="event", entity_id="evt_1", timestamp=old))
    db.commit()

    response = client.get(
        "/api/v1/cron/cleanup",
        params={"categories": "oldAuditLogs"},
        headers={"Authorization": "Bearer test-cron-secret"},
    )

    assert response.status_code == 200
    assert response.json() == {"success": True, "results": {"oldAuditLogs": 1}, "errors": []}


def test_health(client: TestClient) -> None:
    assert client.get("/api/v1/health").json()["status"] == "healthy"
    assert client.get("/api/v1/health/db").status_code == 200
