"""Time utilities."""
from datetime import UTC, date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo


def utcnow() -> datetime:
    """Return current UTC time with timezone awareness."""

    return datetime.now(tz=UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes (as returned by SQLite) as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_site_time(value: datetime, tz_name: str) -> datetime:
    return ensure_utc(value).astimezone(ZoneInfo(tz_name))


def local_midnight(day: date, tz_name: str) -> datetime:
    """Return 00:00 of ``day`` in the site timezone, as UTC."""

    return datetime.combine(day, time.min, tzinfo=ZoneInfo(tz_name)).astimezone(UTC)


def upcoming_week_starts(now: datetime, tz_name: str, days_ahead: int) -> list[date]:
    """Return the Sunday dates of the weeks starting within ``days_ahead`` days.

    The first entry is always the next Sunday strictly after today (a Sunday
    yields the following Sunday); ``days_ahead`` is rounded up to whole weeks
    and at least one week is returned.
    """

    today = to_site_time(now, tz_name).date()
    # Python weekday(): Monday=0 .. Sunday=6
    days_until_sunday = 7 - (today.weekday() + 1) % 7
    first = today + timedelta(days=days_until_sunday)
    weeks = max(1, -(-days_ahead // 7))
    return [first + timedelta(weeks=i) for i in range(weeks)]


__all__ = [
    "utcnow",
    "ensure_utc",
    "to_site_time",
    "local_midnight",
    "upcoming_week_starts",
]
