"""Audit logging helper utilities."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy.orm import Session

from app.models.audit import AuditLog
from app.utils.time import utcnow


SENSITIVE_KEYS = {
    "email",
    "payout_handle",
    "api_key",
    "session_token",
}


def _mask_value(key: str, value: Any) -> Any:
    if value is None:
        return None

    if key == "email":
        text = str(value)
        if "@" in text:
            _, domain = text.split("@", 1)
            return f"***@{domain}"
        return "***"

    if key == "payout_handle":
        text = str(value)
        if len(text) <= 4:
            return "***"
        return f"***{text[-4:]}"

    return "***"


def sanitize_payload_for_audit(data: Any) -> Any:
    """Return a copy of ``data`` with obvious PII fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            masked_value = _mask_value(key, value) if key in SENSITIVE_KEYS else value
            sanitized[key] = sanitize_payload_for_audit(masked_value)
        return sanitized

    if isinstance(data, list):
        return [sanitize_payload_for_audit(item) for item in data]

    return data


def log_audit(
    db: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: str | int | None,
    data: dict | None = None,
) -> AuditLog:
    """Stage an audit entry in the shared AuditLog table; the caller commits."""

    entry = AuditLog(
        actor=actor,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else "",
        data_json=sanitize_payload_for_audit(data or {}),
        at=utcnow(),
    )
    db.add(entry)
    return entry


def actor_for_user(user_id: int | None, fallback: str = "system") -> str:
    """Return the canonical actor string for a staff user."""

    if user_id is None:
        return fallback
    return f"user:{user_id}"
