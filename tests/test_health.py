import pytest

from freelancehub.services import notifications


@pytest.mark.anyio("asyncio")
async def test_healthcheck_reports_database_and_wallet_mode(client):
    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] in {"ok", "degraded"}
    assert payload["app"] == "freelancehub-backend"
    database = payload["database"]
    assert database["ok"] is True
    assert database["dialect"] == "sqlite"
    # SQLite has no row locks; the conditional updates carry concurrency there.
    assert database["row_locks"] is False
    assert database["migrations"] in {"up_to_date", "out_of_date", "unknown"}
    assert payload["notification_sink"] == "database_sink"
    assert isinstance(payload["settle_earnings_to_wallet"], bool)


@pytest.mark.anyio("asyncio")
async def test_health_degrades_when_database_is_down(monkeypatch, client):
    def broken_ping():
        raise RuntimeError("DB down")

    monkeypatch.setattr("freelancehub.db.ping", broken_ping)

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["database"] == {
        "ok": False,
        "dialect": None,
        "row_locks": False,
        "revision": None,
        "migrations": "unknown",
    }


@pytest.mark.anyio("asyncio")
async def test_health_reports_migration_drift(monkeypatch, client):
    from freelancehub.routers import health as health_module

    monkeypatch.setattr("freelancehub.db.current_revision", lambda: "0001_initial")
    monkeypatch.setattr(health_module, "_expected_migration_head", lambda: "not-a-real-head")

    payload = (await client.get("/health")).json()
    assert payload["database"]["ok"] is True
    assert payload["database"]["revision"] == "0001_initial"
    assert payload["database"]["migrations"] == "out_of_date"
    assert payload["status"] == "degraded"


@pytest.mark.anyio("asyncio")
async def test_health_names_a_replaced_notification_sink(client):
    def webhook_sink(db, recipient_id, kind, title, body, link):  # pragma: no cover - never called
        return None

    notifications.set_notification_sink(webhook_sink)
    try:
        payload = (await client.get("/health")).json()
    finally:
        notifications.set_notification_sink(None)
    assert payload["notification_sink"] == "webhook_sink"
