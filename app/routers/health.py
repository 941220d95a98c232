"""Health check endpoint."""
from __future__ import annotations

import logging

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import get_db, get_engine
from app.services.admin_settings import AlertConfig, load_alert_config

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _db_status() -> str:
    """'ok' when a trivial query succeeds, 'error' otherwise."""

    try:
        with get_engine().connect() as conn:
            conn.execute(text("SELECT 1"))
        return "ok"
    except Exception:  # noqa: BLE001
        logger.exception("DB health check failed")
        return "error"


def _expected_migration_head() -> str | None:
    try:
        script = ScriptDirectory.from_config(Config("alembic.ini"))
        return script.get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Failed to load Alembic head revision")
        return None


def _migrations_status() -> tuple[bool, str]:
    expected_head = _expected_migration_head()
    if expected_head is None:
        return False, "unknown"
    try:
        with get_engine().connect() as conn:
            current = conn.execute(text("SELECT version_num FROM alembic_version")).scalar()
    except Exception:  # noqa: BLE001
        logger.exception("Migration check failed")
        return False, "unknown"
    if current == expected_head:
        return True, "up_to_date"
    return False, "out_of_date"


def _describe_thresholds(config: AlertConfig) -> dict[str, object]:
    """Resolved alert thresholds; a warning tier at or above critical never fires."""

    return {
        "campaign_warning_pct": config.campaign_warning_pct,
        "campaign_critical_pct": config.campaign_critical_pct,
        "campaign_tiers_ok": config.campaign_warning_pct < config.campaign_critical_pct,
        "health_warning_floor": str(config.health_warning_floor),
        "prize_days_ahead": config.prize_days_ahead,
        "email_test_mode": config.email_test_mode,
    }


@router.get("", summary="Health check")
def healthcheck(db: Session = Depends(get_db)) -> dict[str, object]:
    """Report database reachability, migration state and the active alert thresholds."""

    settings = get_settings()
    db_status = _db_status()
    db_ok = db_status == "ok"
    if db_ok:
        migration_ok, migration_status = _migrations_status()
    else:
        migration_ok, migration_status = False, "unknown"

    thresholds: dict[str, object] | None = None
    if db_ok:
        try:
            thresholds = _describe_thresholds(load_alert_config(db))
        except SQLAlchemyError:
            logger.exception("Could not resolve alert thresholds")

    degraded = not (db_ok and migration_ok)
    return {
        "status": "degraded" if degraded else "ok",
        "env": settings.app_env,
        "site_timezone": settings.SITE_TIMEZONE,
        "db_ok": db_ok,
        "db_status": db_status,
        "migrations_ok": migration_ok,
        "migrations_status": migration_status,
        "alert_thresholds": thresholds,
    }
