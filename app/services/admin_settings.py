"""Runtime admin settings with environment defaults."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.models.admin_setting import AdminSetting

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

CAMPAIGN_ALERT_WARNING = "campaign_alert_warning"
CAMPAIGN_ALERT_CRITICAL = "campaign_alert_critical"
HEALTH_WARNING_FLOOR = "health_warning_floor"
PRIZE_ALERT_DAYS_AHEAD = "prize_alert_days_ahead"
TOKEN_VALUE = "token_value"
EMAIL_TEST_MODE = "email_test_mode"

ALERT_SETTING_KEYS = (
    CAMPAIGN_ALERT_WARNING,
    CAMPAIGN_ALERT_CRITICAL,
    HEALTH_WARNING_FLOOR,
    PRIZE_ALERT_DAYS_AHEAD,
    TOKEN_VALUE,
    EMAIL_TEST_MODE,
)


@dataclass(frozen=True)
class AlertConfig:
    """Every knob the collectors read, resolved once per feed computation."""

    campaign_warning_pct: int
    campaign_critical_pct: int
    health_warning_floor: Decimal
    prize_days_ahead: int
    token_value: Decimal
    email_test_mode: bool
    site_timezone: str
    processing_fee_percent: Decimal
    processing_fee_fixed: Decimal


def read_settings(db: Session, keys: tuple[str, ...]) -> dict[str, str | None]:
    """Return the stored values for ``keys``; missing rows are absent from the result."""

    stmt = select(AdminSetting.setting_key, AdminSetting.setting_value).where(AdminSetting.setting_key.in_(keys))
    return {key: value for key, value in db.execute(stmt).all()}


def _positive_int(raw: str | None, default: int, *, key: str) -> int:
    """Read the leading integer of ``raw`` ("80%" -> 80, "75.5" -> 75)."""

    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if match is None:
        logger.warning("Ignoring non-integer admin setting", extra={"key": key, "value": raw})
        return default
    value = int(match.group(1))
    return value if value > 0 else default


def _positive_decimal(raw: str | None, default: Decimal, *, key: str) -> Decimal:
    if raw is None:
        return default
    try:
        value = Decimal(raw.strip())
    except InvalidOperation:
        logger.warning("Ignoring non-numeric admin setting", extra={"key": key, "value": raw})
        return default
    return value if value.is_finite() and value > 0 else default


def load_alert_config(db: Session, settings: Settings | None = None) -> AlertConfig:
    """Overlay ``admin_settings`` rows on the environment defaults."""

    settings = settings or get_settings()
    stored = read_settings(db, ALERT_SETTING_KEYS)
    return AlertConfig(
        campaign_warning_pct=_positive_int(
            stored.get(CAMPAIGN_ALERT_WARNING), settings.CAMPAIGN_ALERT_WARNING_PCT, key=CAMPAIGN_ALERT_WARNING
        ),
        campaign_critical_pct=_positive_int(
            stored.get(CAMPAIGN_ALERT_CRITICAL), settings.CAMPAIGN_ALERT_CRITICAL_PCT, key=CAMPAIGN_ALERT_CRITICAL
        ),
        health_warning_floor=_positive_decimal(
            stored.get(HEALTH_WARNING_FLOOR), settings.HEALTH_WARNING_FLOOR, key=HEALTH_WARNING_FLOOR
        ),
        prize_days_ahead=_positive_int(
            stored.get(PRIZE_ALERT_DAYS_AHEAD), settings.PRIZE_ALERT_DAYS_AHEAD, key=PRIZE_ALERT_DAYS_AHEAD
        ),
        token_value=_positive_decimal(stored.get(TOKEN_VALUE), settings.DEFAULT_TOKEN_VALUE, key=TOKEN_VALUE),
        email_test_mode=(stored.get(EMAIL_TEST_MODE) or "").strip().lower() == "true",
        site_timezone=settings.SITE_TIMEZONE,
        processing_fee_percent=settings.PROCESSING_FEE_PERCENT,
        processing_fee_fixed=settings.PROCESSING_FEE_FIXED,
    )


__all__ = ["AlertConfig", "ALERT_SETTING_KEYS", "load_alert_config", "read_settings"]
