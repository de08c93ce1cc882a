"""Tests for config, client and notification endpoints."""

from fastapi.testclient import TestClient

from fleetfox.api.app import create_app
from fleetfox.containers import AppContainer
from tests.conftest import WEBHOOK_URL

SECRET = {"X-Webhook-Secret": "hook-secret"}


def quality_check_row(**overrides) -> dict[str, object]:
    row = {
        "task_id": "TASK_20250101_AB12",
        "overall_status": "pass",
        "total_issues": 0,
        "client_id": "ACME",
        "fox_id": "user-1",
    }
    row.update(overrides)
    return row


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    assert client.get("/health").json() == {"status": "ok"}


def test_config_endpoint_exposes_public_values(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/api/config")

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["cache-control"] == "no-store"
    data = response.json()
    assert data["SUPABASE_URL"] == "https://example.supabase.co"
    assert data["N8N_WEBHOOK_URL"] == WEBHOOK_URL
    assert "error" not in data


def test_config_endpoint_reports_missing_values(container: AppContainer) -> None:
    container.settings = container.settings.model_copy(
        update={"supabase_anon_key": ""}
    )
    client = TestClient(create_app(container))

    data = client.get("/api/config").json()

    assert data["SUPABASE_ANON_KEY"] == ""
    assert data["error"].startswith("Missing environment variables")


def test_clients_endpoint_lists_active_clients(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    data = client.get("/clients").json()

    assert data == {
        "clients": [
            {"id": "0d6c1f7a-1111-4a2b-9c3d-000000000001", "label": "ACME"},
            {"id": "9f3e2b1c-2222-4a2b-9c3d-000000000002", "label": "9f3e2b1c"},
        ]
    }


def test_notification_requires_secret(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/notifications/quality-checks",
        json={
            "type": "INSERT",
            "table": "quality_checks",
            "record": quality_check_row(),
        },
    )

    assert response.status_code == 401


def test_notification_ignores_other_events(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    updated = client.post(
        "/notifications/quality-checks",
        json={
            "type": "UPDATE",
            "table": "quality_checks",
            "record": quality_check_row(),
        },
        headers=SECRET,
    )
    other_table = client.post(
        "/notifications/quality-checks",
        json={"type": "INSERT", "table": "qa_images", "record": {"image_id": "1"}},
        headers=SECRET,
    )
    malformed = client.post(
        "/notifications/quality-checks",
        json={"type": "INSERT", "table": "quality_checks", "record": {"task_id": "T"}},
        headers=SECRET,
    )

    assert updated.json() == {"status": "ignored"}
    assert other_table.json() == {"status": "ignored"}
    assert malformed.json() == {"status": "ignored"}


def test_notification_reaches_matching_sessions(container: AppContainer) -> None:
    with TestClient(create_app(container)) as client:
        client.get("/sessions/fox-van", headers={"Authorization": "Bearer fox-token"})
        client.get(
            "/sessions/client-desk", headers={"Authorization": "Bearer client-token"}
        )
        client.get("/sessions/guest")
        response = client.post(
            "/notifications/quality-checks",
            json={
                "type": "INSERT",
                "table": "quality_checks",
                "record": quality_check_row(),
            },
            headers=SECRET,
        )
        fox_session = client.get("/sessions/fox-van").json()

    assert response.json() == {"status": "ok", "delivered": 1}
    assert fox_session["notifications"][0]["title"] == "Quality Check PASSED"


def test_notification_with_null_issue_counts_is_delivered(
    container: AppContainer,
) -> None:
    with TestClient(create_app(container)) as client:
        client.get("/sessions/fox-van", headers={"Authorization": "Bearer fox-token"})
        response = client.post(
            "/notifications/quality-checks",
            json={
                "type": "INSERT",
                "table": "quality_checks",
                "record": quality_check_row(
                    total_issues=None,
                    critical_issues_count=None,
                    minor_issues_count=None,
                ),
            },
            headers=SECRET,
        )
        fox_session = client.get(
            "/sessions/fox-van", headers={"Authorization": "Bearer fox-token"}
        ).json()

    assert response.json() == {"status": "ok", "delivered": 1}
    assert fox_session["notifications"][0]["message"] == (
        "All photos look clean! Great job!"
    )
