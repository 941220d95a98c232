"""Durable alert dismissals.

A dismissal is the only state the alert engine writes. It is keyed by
``(alert_type, alert_key)`` and written as a single-row upsert so two
concurrent dismissals of the same alert collapse into one row. Each
dismissal appends an audit entry in the same transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.models.alert_dismissal import AlertDismissal
from app.utils.audit import log_audit
from app.utils.errors import api_error
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

DismissedKeys = frozenset[tuple[str, str]]

_CONFLICT_TARGET = ["alert_type", "alert_key"]
_REFRESHED_COLUMNS = ("dismissed_by", "dismissed_at", "notes", "updated_at")


def load_dismissed_keys(db: Session) -> DismissedKeys:
    """Read the whole dismissal table once; used as the snapshot for one feed."""

    rows = db.execute(select(AlertDismissal.alert_type, AlertDismissal.alert_key)).all()
    return frozenset((alert_type, alert_key) for alert_type, alert_key in rows)


def _native_upsert(db: Session, values: dict):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        from sqlalchemy.dialects.postgresql import insert
    elif dialect == "sqlite":
        from sqlalchemy.dialects.sqlite import insert
    else:
        return None

    stmt = insert(AlertDismissal).values(**values)
    return stmt.on_conflict_do_update(
        index_elements=_CONFLICT_TARGET,
        set_={column: getattr(stmt.excluded, column) for column in _REFRESHED_COLUMNS},
    )


def _find(db: Session, alert_type: str, alert_key: str) -> AlertDismissal | None:
    stmt = (
        select(AlertDismissal)
        .where(
            AlertDismissal.alert_type == alert_type,
            AlertDismissal.alert_key == alert_key,
        )
        # Core upserts bypass the identity map; reload whatever it holds.
        .execution_options(populate_existing=True)
    )
    return db.scalars(stmt).first()


def _portable_upsert(db: Session, values: dict) -> None:
    existing = _find(db, values["alert_type"], values["alert_key"])
    if existing is None:
        try:
            with db.begin_nested():
                db.add(AlertDismissal(**values))
            return
        except IntegrityError:
            # Lost the race: another request inserted the same (type, key).
            existing = _find(db, values["alert_type"], values["alert_key"])
            if existing is None:
                raise
    for column in _REFRESHED_COLUMNS:
        setattr(existing, column, values[column])
    db.flush()


def _require(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def dismiss_alert(
    db: Session,
    *,
    alert_type: str | None,
    alert_key: str | None,
    actor: str,
    dismissed_by: int | None = None,
    actor_email: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> AlertDismissal:
    """Insert or refresh the dismissal for ``(alert_type, alert_key)`` and audit it."""

    alert_type = _require(alert_type)
    alert_key = _require(alert_key)
    if alert_type is None or alert_key is None:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "MISSING_FIELDS",
            "Missing alertType or alertKey.",
        )

    timestamp = now or utcnow()
    values = {
        "alert_type": alert_type,
        "alert_key": alert_key,
        "dismissed_by": dismissed_by,
        "dismissed_at": timestamp,
        "notes": notes,
        "updated_at": timestamp,
    }

    try:
        stmt = _native_upsert(db, values)
        if stmt is not None:
            db.execute(stmt)
        else:
            _portable_upsert(db, values)
        log_audit(
            db,
            actor=actor,
            action="ALERT_DISMISSED",
            entity="AlertDismissal",
            entity_id=alert_key,
            data={
                "alert_type": alert_type,
                "alert_key": alert_key,
                "notes": notes,
                "email": actor_email,
            },
        )
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(
            "Failed to dismiss alert",
            extra={"alert_type": alert_type, "alert_key": alert_key},
        )
        raise api_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "DISMISS_FAILED",
            "Failed to dismiss alert.",
            details={"reason": str(getattr(exc, "orig", None) or exc)},
        ) from exc

    logger.info(
        "Alert dismissed",
        extra={"alert_type": alert_type, "alert_key": alert_key, "actor": actor},
    )
    dismissal = _find(db, alert_type, alert_key)
    assert dismissal is not None  # committed above
    return dismissal


__all__ = ["DismissedKeys", "dismiss_alert", "load_dismissed_keys"]
