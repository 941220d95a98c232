import pytest


@pytest.mark.anyio("asyncio")
async def test_healthcheck(client):
    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] in {"ok", "degraded"}
    assert payload.get("db_status") in {"ok", "error"}
    assert payload.get("migrations_status") in {"up_to_date", "out_of_date", "unknown"}
    assert isinstance(payload.get("db_ok"), bool)
    assert isinstance(payload.get("migrations_ok"), bool)
    assert payload["site_timezone"]


@pytest.mark.anyio("asyncio")
async def test_health_degrades_on_db_failure(monkeypatch, client):
    class BrokenEngine:
        def connect(self):  # pragma: no cover - simple stub
            raise RuntimeError("DB down")

    monkeypatch.setattr("app.routers.health.get_engine", lambda: BrokenEngine())

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["db_status"] == "error"
    assert payload["migrations_status"] == "unknown"
    assert payload["db_ok"] is False
    assert payload["migrations_ok"] is False


@pytest.mark.anyio("asyncio")
async def test_health_status_degraded_when_db_status_error(monkeypatch, client):
    from app.routers import health as health_module

    monkeypatch.setattr(health_module, "_db_status", lambda: "error")

    response = await client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "degraded"
    assert payload["db_status"] == "error"


@pytest.mark.anyio("asyncio")
async def test_health_reports_alert_thresholds(client, db_session):
    from app.models import AdminSetting

    db_session.add(AdminSetting(setting_key="campaign_alert_warning", setting_value="95"))
    db_session.flush()

    response = await client.get("/health")
    assert response.status_code == 200
    thresholds = response.json()["alert_thresholds"]
    assert thresholds["campaign_warning_pct"] == 95
    assert thresholds["campaign_critical_pct"] == 90
    assert thresholds["campaign_tiers_ok"] is False
    assert thresholds["email_test_mode"] is False


@pytest.mark.anyio("asyncio")
async def test_health_skips_thresholds_when_db_down(monkeypatch, client):
    from app.routers import health as health_module

    monkeypatch.setattr(health_module, "_db_status", lambda: "error")

    response = await client.get("/health")
    assert response.json()["alert_thresholds"] is None
