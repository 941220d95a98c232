from app.models.audit import AuditLog
from app.utils.audit import actor_for_user, log_audit


def test_audit_log_masks_sensitive_fields(db_session):
    payload = {
        "alert_type": "payout_pending",
        "email": "sensitive@example.com",
        "payout_handle": "venmo-handle-9876",
        "nested": [{"api_key": "ops_abc.secret"}],
    }

    log_audit(
        db_session,
        actor="test",
        action="MASK_TEST",
        entity="AlertDismissal",
        entity_id="payout_queue_pending",
        data=payload,
    )
    db_session.commit()

    entry = (
        db_session.query(AuditLog)
        .filter(AuditLog.action == "MASK_TEST")
        .order_by(AuditLog.id.desc())
        .first()
    )
    assert entry is not None
    assert entry.entity_id == "payout_queue_pending"
    assert entry.data_json["alert_type"] == "payout_pending"
    assert entry.data_json["email"] == "***@example.com"
    assert entry.data_json["payout_handle"] == "***9876"
    assert entry.data_json["nested"][0]["api_key"] == "***"


def test_actor_for_user():
    assert actor_for_user(42) == "user:42"
    assert actor_for_user(None) == "system"
    assert actor_for_user(None, fallback="cli") == "cli"
