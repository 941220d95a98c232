"""HTTP surface of the admin alert feed."""
from datetime import timedelta
from decimal import Decimal

import pytest
from sqlalchemy import select

from app.models import (
    AdCampaign,
    AdminRole,
    AdminSetting,
    AlertDismissal,
    AuditLog,
    CampaignStatus,
    PayoutQueueItem,
    RecurringExpense,
)
from app.schemas.alert import SEVERITY_RANK, AlertSeverity
from app.utils.time import utcnow


def _types(response) -> set[str]:
    return {alert["type"] for alert in response.json()["alerts"]}


@pytest.fixture
def deficit_with_backlog(db_session):
    db_session.add_all(
        [
            AdCampaign(amount_paid=Decimal("100.00"), status=CampaignStatus.ACTIVE, contracted_views=1000),
            RecurringExpense(name="Payroll", amount=Decimal("5000.00")),
            PayoutQueueItem(amount=Decimal("20.00")),
        ]
    )
    db_session.flush()


# -- authentication --------------------------------------------------------


@pytest.mark.anyio
async def test_feed_requires_credentials(client):
    response = await client.get("/admin/alerts")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "NOT_AUTHENTICATED"
    assert response.headers["WWW-Authenticate"] == "Bearer"


@pytest.mark.anyio
async def test_unknown_key_is_unauthorized(client):
    response = await client.get("/admin/alerts", headers={"Authorization": "Bearer ops_nope.nope"})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


@pytest.mark.anyio
async def test_expired_key_is_unauthorized(client, make_staff, make_api_key):
    token = make_api_key(make_staff(), expires_at=utcnow() - timedelta(minutes=1))

    response = await client.get("/admin/alerts", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


@pytest.mark.anyio
async def test_inactive_staff_is_unauthorized(client, headers_for):
    response = await client.get("/admin/alerts", headers=headers_for(AdminRole.admin, is_active=False))

    assert response.status_code == 401


@pytest.mark.anyio
async def test_non_admin_user_is_forbidden(client, headers_for):
    response = await client.get("/admin/alerts", headers=headers_for(None, is_admin=False))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "NOT_ADMIN"


@pytest.mark.anyio
async def test_unrecognised_role_is_forbidden(client, headers_for):
    response = await client.get("/admin/alerts", headers=headers_for("intern"))

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "UNKNOWN_ROLE"


@pytest.mark.anyio
async def test_x_api_key_header_is_accepted(client, make_staff, make_api_key):
    token = make_api_key(make_staff(AdminRole.admin))

    response = await client.get("/admin/alerts", headers={"X-API-Key": token})

    assert response.status_code == 200


@pytest.mark.anyio
async def test_session_cookie_transport(client, session_cookie_for):
    for name, value in session_cookie_for(AdminRole.manager).items():
        client.cookies.set(name, value)

    response = await client.get("/admin/alerts")

    assert response.status_code == 200
    assert _types(response) <= {"prize_pick_winner", "prize_notify_winner", "prize_pay_winner",
                                "prize_setup_missing", "campaign_critical", "campaign_warning"}


@pytest.mark.anyio
async def test_forged_session_cookie_is_unauthorized(client, make_staff):
    admin = make_staff(AdminRole.super_admin)
    client.cookies.set("admin_session", f"{admin.id}.forged")

    response = await client.get("/admin/alerts")

    assert response.status_code == 401


# -- feed ------------------------------------------------------------------


@pytest.mark.anyio
async def test_admin_feed_shape_and_order(client, admin_headers, deficit_with_backlog):
    response = await client.get("/admin/alerts", headers=admin_headers)

    assert response.status_code == 200
    payload = response.json()
    assert set(payload) == {"alerts", "count", "countBySeverity"}
    assert payload["count"] == len(payload["alerts"])
    assert {"health_critical", "payout_pending", "prize_setup_missing"} <= _types(response)

    ranks = [SEVERITY_RANK[AlertSeverity(alert["severity"])] for alert in payload["alerts"]]
    assert ranks == sorted(ranks)
    counts = payload["countBySeverity"]
    assert sum(counts.values()) == payload["count"]
    assert set(counts) == {"critical", "high", "medium", "low"}

    first = payload["alerts"][0]
    assert {"type", "key", "severity", "icon", "title", "description", "actionUrl", "actionLabel",
            "createdAt", "dismissable"} <= set(first)


@pytest.mark.anyio
async def test_support_never_sees_financial_alerts(client, support_headers, deficit_with_backlog):
    response = await client.get("/admin/alerts", headers=support_headers)

    assert response.status_code == 200
    assert _types(response) <= {"prize_pick_winner", "prize_notify_winner", "prize_pay_winner"}


@pytest.mark.anyio
async def test_missing_role_is_treated_as_support(client, headers_for, deficit_with_backlog):
    response = await client.get("/admin/alerts", headers=headers_for(None))

    assert response.status_code == 200
    assert "health_critical" not in _types(response)


# -- dismiss ---------------------------------------------------------------


@pytest.mark.anyio
async def test_dismiss_hides_alert_and_writes_audit(client, db_session, admin_headers, deficit_with_backlog):
    body = {"alertType": "payout_pending", "alertKey": "payout_queue_pending", "notes": "batching friday"}

    response = await client.post("/admin/alerts", json=body, headers=admin_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}

    feed = await client.get("/admin/alerts", headers=admin_headers)
    assert "payout_pending" not in _types(feed)
    assert "health_critical" in _types(feed)

    audit = db_session.scalars(select(AuditLog).where(AuditLog.action == "ALERT_DISMISSED")).one()
    assert audit.actor.startswith("user:")
    assert audit.entity_id == "payout_queue_pending"
    assert audit.data_json["notes"] == "batching friday"


@pytest.mark.anyio
async def test_dismiss_is_idempotent(client, db_session, admin_headers):
    body = {"alertType": "health_warning", "alertKey": "health_warning_current"}

    first = await client.post("/admin/alerts", json=body, headers=admin_headers)
    second = await client.post("/admin/alerts", json=body, headers=admin_headers)

    assert first.status_code == second.status_code == 200
    rows = db_session.scalars(select(AlertDismissal)).all()
    assert [(r.alert_type, r.alert_key) for r in rows] == [("health_warning", "health_warning_current")]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "body",
    [{}, {"alertType": "payout_pending"}, {"alertKey": "payout_queue_pending"}, {"alertType": "", "alertKey": "x"}],
)
async def test_dismiss_without_identity_is_rejected(client, db_session, admin_headers, body):
    response = await client.post("/admin/alerts", json=body, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "MISSING_FIELDS"
    assert db_session.scalars(select(AlertDismissal)).first() is None


@pytest.mark.anyio
async def test_email_test_mode_cannot_be_dismissed(client, db_session, admin_headers):
    db_session.add(AdminSetting(setting_key="email_test_mode", setting_value="true"))
    db_session.flush()

    response = await client.post(
        "/admin/alerts",
        json={"alertType": "email_test_mode", "alertKey": "email_test_mode_active"},
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "ALERT_NOT_DISMISSABLE"
    feed = await client.get("/admin/alerts", headers=admin_headers)
    assert "email_test_mode" in _types(feed)


@pytest.mark.anyio
async def test_support_cannot_dismiss_what_it_cannot_see(client, db_session, support_headers):
    response = await client.post(
        "/admin/alerts",
        json={"alertType": "health_critical", "alertKey": "health_critical_current"},
        headers=support_headers,
    )

    assert response.status_code == 403
    assert response.json()["error"]["code"] == "ALERT_TYPE_FORBIDDEN"
    assert db_session.scalars(select(AlertDismissal)).first() is None


@pytest.mark.anyio
async def test_dismiss_requires_credentials(client):
    response = await client.post("/admin/alerts", json={"alertType": "a", "alertKey": "b"})

    assert response.status_code == 401
