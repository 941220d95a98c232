"""Signal collectors for the admin alert feed.

Each collector reads live state and returns alert candidates; none of
them writes. Candidates are emitted in a stable order (primary keys,
dates) so that the same database state always yields the same feed.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.campaign import AdCampaign, BusinessCard, CampaignStatus
from app.models.payout_queue import PayoutQueueItem, PayoutQueueStatus
from app.models.prize import GameType, PrizePayout, PrizePayoutStatus, WeeklyPrize
from app.models.user import User
from app.schemas.alert import AlertCandidate, AlertSeverity
from app.services.admin_settings import AlertConfig
from app.services.financials import compute_financial_snapshot
from app.utils.time import ensure_utc, upcoming_week_starts

logger = logging.getLogger(__name__)

PRIZE_PICK_WINNER = "prize_pick_winner"
PRIZE_NOTIFY_WINNER = "prize_notify_winner"
PRIZE_PAY_WINNER = "prize_pay_winner"
PRIZE_SETUP_MISSING = "prize_setup_missing"
EMAIL_TEST_MODE = "email_test_mode"
HEALTH_NO_REVENUE = "health_no_revenue"
HEALTH_CRITICAL = "health_critical"
HEALTH_WARNING = "health_warning"
HEALTH_BURN_RATE = "health_burn_rate"
PAYOUT_PENDING = "payout_pending"
CAMPAIGN_CRITICAL = "campaign_critical"
CAMPAIGN_WARNING = "campaign_warning"

UNKNOWN_USER = "Unknown"
UNKNOWN_CAMPAIGN = "Unknown Campaign"

GAME_LABELS = {
    GameType.SLOTS.value: "Slots",
    GameType.MATCH_EASY.value: "Match Easy",
    GameType.MATCH_CHALLENGE.value: "Match Challenge",
    GameType.SOLITAIRE.value: "Solitaire",
}


@dataclass(frozen=True)
class CollectorContext:
    db: Session
    now: datetime
    config: AlertConfig


@dataclass(frozen=True)
class Collector:
    """A named signal source and the alert types it can emit."""

    name: str
    alert_types: frozenset[str]
    collect: Callable[[CollectorContext], list[AlertCandidate]]


def _money(value: Decimal | int | None) -> str:
    return f"${Decimal(value or 0):,.2f}"


def _short_date(day: date) -> str:
    return f"{day:%b} {day.day}"


def _game_label(game_type: str | None) -> str:
    if not game_type:
        return "Prize"
    return GAME_LABELS.get(game_type, game_type.replace("_", " ").title())


def _lookup(db: Session, model, row_id: int | None, *, context: dict):
    """Fetch an enrichment row; a missing row is logged and reported as ``None``."""

    if row_id is None:
        return None
    row = db.get(model, row_id)
    if row is None:
        logger.warning(
            "Alert enrichment row missing",
            extra={"model": model.__name__, "row_id": row_id, **context},
        )
    return row


# -- Prize pipeline ---------------------------------------------------------


def _pick_winner_alerts(ctx: CollectorContext) -> list[AlertCandidate]:
    stmt = (
        select(WeeklyPrize)
        .where(
            WeeklyPrize.winner_user_id.is_(None),
            WeeklyPrize.week_end_time < ctx.now,
            WeeklyPrize.is_active.is_(True),
        )
        .order_by(WeeklyPrize.week_start, WeeklyPrize.id)
    )
    alerts = []
    for prize in ctx.db.scalars(stmt):
        alerts.append(
            AlertCandidate(
                type=PRIZE_PICK_WINNER,
                key=f"{prize.game_type}_{prize.week_start.isoformat()}",
                severity=AlertSeverity.CRITICAL,
                icon="🎲",
                title="Pick Winner!",
                description=(
                    f"{_game_label(prize.game_type)} week of {_short_date(prize.week_start)}: "
                    f"{_money(prize.total_prize_pool)} prize"
                ),
                action_url="/admin/winners",
                action_label="Pick Winner",
                created_at=ensure_utc(prize.week_end_time),
            )
        )
    return alerts


def _verified_payouts(ctx: CollectorContext, *, missing_column) -> list[PrizePayout]:
    stmt = (
        select(PrizePayout)
        .where(PrizePayout.status == PrizePayoutStatus.VERIFIED, missing_column.is_(None))
        .order_by(PrizePayout.id)
    )
    return list(ctx.db.scalars(stmt))


def _notify_winner_alerts(ctx: CollectorContext) -> list[AlertCandidate]:
    alerts = []
    for payout in _verified_payouts(ctx, missing_column=PrizePayout.email_sent_at):
        context = {"payout_id": payout.id, "alert_type": PRIZE_NOTIFY_WINNER}
        user = _lookup(ctx.db, User, payout.user_id, context=context)
        prize = _lookup(ctx.db, WeeklyPrize, payout.prize_id, context=context)
        username = user.username if user else UNKNOWN_USER
        game = prize.game_type if prize else "prize"
        alerts.append(
            AlertCandidate(
                type=PRIZE_NOTIFY_WINNER,
                key=str(payout.id),
                severity=AlertSeverity.HIGH,
                icon="📧",
                title="Notify Winner!",
                description=f"{username} won {game}; needs email notification",
                action_url="/admin/winners",
                action_label="Send Email",
                created_at=ensure_utc(payout.created_at),
            )
        )
    return alerts


def _payment_info(user: User | None) -> str:
    if user is None or not user.payout_handle:
        return "No payment info"
    return f"{user.payout_method or 'Payment'}: {user.payout_handle}"


def _pay_winner_alerts(ctx: CollectorContext) -> list[AlertCandidate]:
    alerts = []
    for payout in _verified_payouts(ctx, missing_column=PrizePayout.paid_at):
        context = {"payout_id": payout.id, "alert_type": PRIZE_PAY_WINNER}
        user = _lookup(ctx.db, User, payout.user_id, context=context)
        prize = _lookup(ctx.db, WeeklyPrize, payout.prize_id, context=context)
        username = user.username if user else UNKNOWN_USER
        pool = prize.total_prize_pool if prize else 0
        game = prize.game_type if prize else "prize"
        alerts.append(
            AlertCandidate(
                type=PRIZE_PAY_WINNER,
                key=str(payout.id),
                severity=AlertSeverity.MEDIUM,
                icon="💸",
                title=f"Pay @{username}",
                description=f"{_money(pool)} {game}, {_payment_info(user)}",
                action_url="/admin/winners",
                action_label="Process Payment",
                created_at=ensure_utc(payout.created_at),
            )
        )
    return alerts


def collect_prize_pipeline(ctx: CollectorContext) -> list[AlertCandidate]:
    """Pick, notify and pay stages; one payout may sit in two stages at once."""

    return [*_pick_winner_alerts(ctx), *_notify_winner_alerts(ctx), *_pay_winner_alerts(ctx)]


# -- Prize setup ------------------------------------------------------------


def collect_prize_setup(ctx: CollectorContext) -> list[AlertCandidate]:
    """Flag every game lacking a prize row for the upcoming week(s)."""

    weeks = upcoming_week_starts(ctx.now, ctx.config.site_timezone, ctx.config.prize_days_ahead)
    rows = ctx.db.execute(
        select(WeeklyPrize.game_type, WeeklyPrize.week_start).where(WeeklyPrize.week_start.in_(weeks))
    ).all()
    configured = {(game_type, week_start) for game_type, week_start in rows}

    alerts = []
    for week_start in weeks:
        week_label = f"{_short_date(week_start)} - {_short_date(week_start + timedelta(days=6))}"
        for game in GameType:
            if (game.value, week_start) in configured:
                continue
            alerts.append(
                AlertCandidate(
                    type=PRIZE_SETUP_MISSING,
                    key=f"{game.value}_{week_start.isoformat()}",
                    severity=AlertSeverity.HIGH,
                    icon="🎁",
                    title="Setup Prize!",
                    description=f"No {GAME_LABELS[game.value]} prize for {week_label}",
                    action_url="/admin/prizes",
                    action_label="Configure",
                    created_at=ctx.now,
                )
            )
    return alerts


# -- Email test mode --------------------------------------------------------


def collect_email_test_mode(ctx: CollectorContext) -> list[AlertCandidate]:
    if not ctx.config.email_test_mode:
        return []
    return [
        AlertCandidate(
            type=EMAIL_TEST_MODE,
            key="email_test_mode_active",
            severity=AlertSeverity.HIGH,
            icon="🧪",
            title="Email Test Mode ON",
            description="Real users won't receive emails; only the test recipient does",
            action_url="/admin/email-testing",
            action_label="Turn Off",
            created_at=ctx.now,
            dismissable=False,
        )
    ]


# -- Financial health -------------------------------------------------------


def _health_alert(
    ctx: CollectorContext,
    alert_type: str,
    key: str,
    severity: AlertSeverity,
    icon: str,
    title: str,
    description: str,
) -> AlertCandidate:
    return AlertCandidate(
        type=alert_type,
        key=key,
        severity=severity,
        icon=icon,
        title=title,
        description=description,
        action_url="/admin/health",
        action_label="View Health",
        created_at=ctx.now,
    )


def collect_financial_health(ctx: CollectorContext) -> list[AlertCandidate]:
    """At most one of no-revenue, deficit or low-funds fires; burn-rate stands alone."""

    config = ctx.config
    snapshot = compute_financial_snapshot(
        ctx.db,
        now=ctx.now,
        tz_name=config.site_timezone,
        token_value=config.token_value,
        fee_percent=config.processing_fee_percent,
        fee_fixed=config.processing_fee_fixed,
    )
    true_available = snapshot.true_available

    alerts = []
    if snapshot.net_revenue <= 0:
        alerts.append(
            _health_alert(
                ctx, HEALTH_NO_REVENUE, "health_no_revenue_current", AlertSeverity.CRITICAL,
                "🚨", "No Revenue!", "No ad campaigns generating income this period",
            )
        )
    elif true_available < 0:
        alerts.append(
            _health_alert(
                ctx, HEALTH_CRITICAL, "health_critical_current", AlertSeverity.CRITICAL,
                "🚨", "Health Critical!", f"Operating at {_money(abs(true_available))} deficit this month",
            )
        )
    elif true_available < config.health_warning_floor:
        alerts.append(
            _health_alert(
                ctx, HEALTH_WARNING, "health_warning_current", AlertSeverity.MEDIUM,
                "⚠️", "Health Warning", f"Only {_money(true_available)} available; tight margins",
            )
        )
    if snapshot.total_burned == 0 and snapshot.total_tokens > 0:
        alerts.append(
            _health_alert(
                ctx, HEALTH_BURN_RATE, "health_burn_rate_zero", AlertSeverity.MEDIUM,
                "🔥", "0% Token Burn Rate", "No tokens being spent; liability only grows",
            )
        )

    logger.debug(
        "Financial snapshot computed",
        extra={"true_available": str(true_available), "net_revenue": str(snapshot.net_revenue)},
    )
    return alerts


# -- Payout queue backlog ---------------------------------------------------


def collect_payout_backlog(ctx: CollectorContext) -> list[AlertCandidate]:
    rows = ctx.db.execute(
        select(PayoutQueueItem.amount, PayoutQueueItem.created_at)
        .where(PayoutQueueItem.status == PayoutQueueStatus.PENDING)
        .order_by(PayoutQueueItem.created_at, PayoutQueueItem.id)
    ).all()
    if not rows:
        return []

    count = len(rows)
    total = sum((Decimal(str(amount or 0)) for amount, _ in rows), Decimal("0"))
    return [
        AlertCandidate(
            type=PAYOUT_PENDING,
            key="payout_queue_pending",
            severity=AlertSeverity.MEDIUM,
            icon="💳",
            title=f"{count} Pending Payout{'s' if count > 1 else ''}",
            description=f"{_money(total)} waiting to be processed",
            action_url="/admin/payout-queue",
            action_label="Process Payouts",
            created_at=ensure_utc(rows[0].created_at),
        )
    ]


# -- Campaign progress ------------------------------------------------------


def completion_percent(total_views: int | None, contracted: int | None, bonus: int | None) -> int | None:
    """Delivered share of purchased views, rounded half-up and clamped to 0..100.

    Returns ``None`` when the campaign bought no views at all.
    """

    target = (contracted or 0) + (bonus or 0)
    if target <= 0:
        return None
    raw = Decimal(total_views or 0) * 100 / Decimal(target)
    percent = int(raw.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    return max(0, min(100, percent))


def _business_name(ctx: CollectorContext, campaign: AdCampaign) -> str:
    card = _lookup(
        ctx.db,
        BusinessCard,
        campaign.business_card_id,
        context={"campaign_id": campaign.id, "alert_type": "campaign"},
    )
    if card is None:
        return UNKNOWN_CAMPAIGN
    return card.business_name or card.full_business_name or UNKNOWN_CAMPAIGN


def collect_campaign_progress(ctx: CollectorContext) -> list[AlertCandidate]:
    """Warn as active campaigns approach their contracted views.

    The key embeds the tier, so crossing from warning to critical raises a
    fresh alert even if the warning was dismissed.
    """

    critical_pct = ctx.config.campaign_critical_pct
    warning_pct = ctx.config.campaign_warning_pct
    stmt = select(AdCampaign).where(AdCampaign.status == CampaignStatus.ACTIVE).order_by(AdCampaign.id)

    alerts = []
    for campaign in ctx.db.scalars(stmt):
        percent = completion_percent(campaign.total_views, campaign.contracted_views, campaign.bonus_views)
        if percent is None:
            continue
        if percent >= critical_pct:
            name = _business_name(ctx, campaign)
            alerts.append(
                AlertCandidate(
                    type=CAMPAIGN_CRITICAL,
                    key=f"critical_{campaign.id}",
                    severity=AlertSeverity.CRITICAL,
                    icon="📢",
                    title="Campaign Almost Done!",
                    description=f"{name} at {percent}%; needs attention soon",
                    action_url="/admin/campaigns",
                    action_label="View Campaign",
                    created_at=ctx.now,
                )
            )
        elif percent >= warning_pct:
            name = _business_name(ctx, campaign)
            alerts.append(
                AlertCandidate(
                    type=CAMPAIGN_WARNING,
                    key=f"warning_{campaign.id}",
                    severity=AlertSeverity.MEDIUM,
                    icon="📊",
                    title="Campaign Nearing End",
                    description=f"{name} at {percent}% completion",
                    action_url="/admin/campaigns",
                    action_label="View Campaign",
                    created_at=ctx.now,
                )
            )
    return alerts


DEFAULT_COLLECTORS: tuple[Collector, ...] = (
    Collector("email_test_mode", frozenset({EMAIL_TEST_MODE}), collect_email_test_mode),
    Collector(
        "prize_pipeline",
        frozenset({PRIZE_PICK_WINNER, PRIZE_NOTIFY_WINNER, PRIZE_PAY_WINNER}),
        collect_prize_pipeline,
    ),
    Collector("prize_setup", frozenset({PRIZE_SETUP_MISSING}), collect_prize_setup),
    Collector(
        "financial_health",
        frozenset({HEALTH_NO_REVENUE, HEALTH_CRITICAL, HEALTH_WARNING, HEALTH_BURN_RATE}),
        collect_financial_health,
    ),
    Collector("payout_backlog", frozenset({PAYOUT_PENDING}), collect_payout_backlog),
    Collector("campaign_progress", frozenset({CAMPAIGN_CRITICAL, CAMPAIGN_WARNING}), collect_campaign_progress),
)


__all__ = [
    "Collector",
    "CollectorContext",
    "DEFAULT_COLLECTORS",
    "collect_campaign_progress",
    "collect_email_test_mode",
    "collect_financial_health",
    "collect_payout_backlog",
    "collect_prize_pipeline",
    "collect_prize_setup",
    "completion_percent",
]
