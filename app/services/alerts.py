"""Admin alert feed: gate, collect, suppress, order."""
from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime

from fastapi import status
from sqlalchemy.orm import Session

from app.models.alert_dismissal import AlertDismissal
from app.models.user import AdminRole
from app.schemas.alert import AlertCandidate, AlertFeedRead, AlertSeverity, SeverityCounts
from app.services.admin_settings import AlertConfig, load_alert_config
from app.services.alert_collectors import DEFAULT_COLLECTORS, EMAIL_TEST_MODE, Collector, CollectorContext
from app.services.alert_dismissals import DismissedKeys, dismiss_alert, load_dismissed_keys
from app.services.alert_permissions import DEFAULT_ALERT_VISIBILITY, AlertVisibility
from app.utils.audit import actor_for_user
from app.utils.errors import api_error
from app.utils.time import utcnow

logger = logging.getLogger(__name__)

NON_DISMISSABLE_TYPES = frozenset({EMAIL_TEST_MODE})


def eligible_collectors(
    collectors: Sequence[Collector],
    visibility: AlertVisibility,
    role: AdminRole,
) -> list[Collector]:
    """Collectors whose output the role could see at least part of."""

    return [collector for collector in collectors if visibility.can_see_any(collector.alert_types, role)]


def assemble_feed(
    batches: Iterable[Iterable[AlertCandidate]],
    dismissed: DismissedKeys,
    *,
    role: AdminRole,
    visibility: AlertVisibility = DEFAULT_ALERT_VISIBILITY,
) -> AlertFeedRead:
    """Merge collector output into one ordered feed.

    Candidates the role may not see are dropped, then dismissed ones; the
    remainder is stable-sorted by severity so ties keep emission order.
    """

    visible = [
        candidate
        for batch in batches
        for candidate in batch
        if visibility.can_see(candidate.type, role)
    ]
    kept = [
        candidate
        for candidate in visible
        if not (candidate.dismissable and candidate.identity in dismissed)
    ]
    ordered = sorted(kept, key=lambda candidate: candidate.severity.rank)

    counts = Counter(candidate.severity for candidate in ordered)
    return AlertFeedRead(
        alerts=ordered,
        count=len(ordered),
        count_by_severity=SeverityCounts(
            critical=counts[AlertSeverity.CRITICAL],
            high=counts[AlertSeverity.HIGH],
            medium=counts[AlertSeverity.MEDIUM],
            low=counts[AlertSeverity.LOW],
        ),
    )


def build_alert_feed(
    db: Session,
    *,
    role: AdminRole,
    now: datetime | None = None,
    visibility: AlertVisibility = DEFAULT_ALERT_VISIBILITY,
    collectors: Sequence[Collector] = DEFAULT_COLLECTORS,
    config: AlertConfig | None = None,
) -> AlertFeedRead:
    """Compute the feed for ``role`` from live state and one dismissal snapshot."""

    now = now or utcnow()
    runnable = eligible_collectors(collectors, visibility, role)
    dismissed = load_dismissed_keys(db)
    context = CollectorContext(db=db, now=now, config=config or load_alert_config(db))

    batches = [collector.collect(context) for collector in runnable]
    feed = assemble_feed(batches, dismissed, role=role, visibility=visibility)
    logger.info(
        "Alert feed computed",
        extra={
            "role": role.value,
            "collectors": [collector.name for collector in runnable],
            "count": feed.count,
            "dismissed_snapshot": len(dismissed),
        },
    )
    return feed


def dismiss_alert_for_viewer(
    db: Session,
    *,
    role: AdminRole,
    user_id: int,
    email: str | None,
    alert_type: str | None,
    alert_key: str | None,
    notes: str | None = None,
    visibility: AlertVisibility = DEFAULT_ALERT_VISIBILITY,
) -> AlertDismissal:
    """Dismiss on behalf of a staff member, within what their role can see."""

    alert_type = alert_type.strip() if alert_type else alert_type
    alert_key = alert_key.strip() if alert_key else alert_key
    if alert_type and alert_type in NON_DISMISSABLE_TYPES:
        raise api_error(
            status.HTTP_400_BAD_REQUEST,
            "ALERT_NOT_DISMISSABLE",
            f"Alerts of type {alert_type} clear themselves and cannot be dismissed.",
        )
    if alert_type and alert_key and not visibility.can_see(alert_type, role):
        raise api_error(
            status.HTTP_403_FORBIDDEN,
            "ALERT_TYPE_FORBIDDEN",
            "This alert type is not visible to your role.",
        )
    return dismiss_alert(
        db,
        alert_type=alert_type,
        alert_key=alert_key,
        actor=actor_for_user(user_id),
        dismissed_by=user_id,
        actor_email=email,
        notes=notes,
    )


__all__ = [
    "NON_DISMISSABLE_TYPES",
    "assemble_feed",
    "build_alert_feed",
    "dismiss_alert_for_viewer",
    "eligible_collectors",
]
