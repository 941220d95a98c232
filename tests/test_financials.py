"""Monthly financial snapshot and the health alerts derived from it."""
from datetime import UTC, date, datetime
from decimal import Decimal

import pytest

from app.models import (
    AdCampaign,
    CampaignStatus,
    Expense,
    ExpenseFrequency,
    PayoutQueueItem,
    RecurringExpense,
    TokenBalance,
    User,
)
from app.schemas.alert import AlertSeverity
from app.services.admin_settings import load_alert_config
from app.services.alert_collectors import CollectorContext, collect_financial_health
from app.services.financials import compute_financial_snapshot, processing_fees

IN_MONTH = datetime(2026, 3, 10, 12, 0, tzinfo=UTC)


@pytest.fixture
def wallet_owner(db_session) -> User:
    user = User(username="holder", email="holder@example.com")
    db_session.add(user)
    db_session.flush()
    return user


def _paid_campaigns(db_session, count: int, amount: str, *, created_at=IN_MONTH, status=CampaignStatus.ACTIVE):
    db_session.add_all(
        [
            AdCampaign(amount_paid=Decimal(amount), status=status, contracted_views=100, created_at=created_at)
            for _ in range(count)
        ]
    )
    db_session.flush()


def _snapshot(db_session, now, tz_name="UTC"):
    return compute_financial_snapshot(
        db_session,
        now=now,
        tz_name=tz_name,
        token_value=Decimal("0.05"),
        fee_percent=Decimal("0.029"),
        fee_fixed=Decimal("0.30"),
    )


def _health(db_session, now):
    ctx = CollectorContext(db=db_session, now=now, config=load_alert_config(db_session))
    return collect_financial_health(ctx)


def test_processing_fees():
    assert processing_fees(Decimal("1000"), 10, percent=Decimal("0.029"), fixed=Decimal("0.30")) == Decimal("32.000")
    assert processing_fees(Decimal("0"), 0, percent=Decimal("0.029"), fixed=Decimal("0.30")) == 0


def test_boundary_month_with_118_available_raises_nothing(db_session, fixed_now, wallet_owner):
    _paid_campaigns(db_session, 10, "100.00")
    db_session.add_all(
        [
            RecurringExpense(name="Servers", amount=Decimal("500.00")),
            PayoutQueueItem(amount=Decimal("300.00")),
            TokenBalance(user_id=wallet_owner.id, balance=1000, lifetime_spent=250),
        ]
    )
    db_session.flush()

    snapshot = _snapshot(db_session, fixed_now)

    assert snapshot.gross_revenue == Decimal("1000")
    assert snapshot.processing_fees == Decimal("32")
    assert snapshot.net_revenue == Decimal("968")
    assert snapshot.token_liability == Decimal("50")
    assert snapshot.true_available == Decimal("118")
    assert _health(db_session, fixed_now) == []


def test_month_window_and_expense_mix(db_session, fixed_now):
    _paid_campaigns(db_session, 2, "100.00")
    _paid_campaigns(db_session, 1, "100.00", status=CampaignStatus.CANCELLED)
    _paid_campaigns(db_session, 1, "100.00", created_at=datetime(2026, 2, 27, tzinfo=UTC))
    _paid_campaigns(db_session, 1, "0.00")
    db_session.add_all(
        [
            RecurringExpense(name="Hosting", amount=Decimal("40.00")),
            RecurringExpense(name="Domain", amount=Decimal("1200.00"), frequency=ExpenseFrequency.YEARLY),
            RecurringExpense(name="Old tool", amount=Decimal("999.00"), is_active=False),
            Expense(description="Flyers", amount=Decimal("15.00"), expense_date=date(2026, 3, 1)),
            Expense(description="Last month", amount=Decimal("70.00"), expense_date=date(2026, 2, 28)),
        ]
    )
    db_session.flush()

    snapshot = _snapshot(db_session, fixed_now)

    assert snapshot.gross_revenue == Decimal("200")
    assert snapshot.paid_campaign_count == 2
    assert snapshot.monthly_expenses == Decimal("155")


def test_month_starts_at_site_midnight(db_session):
    # 2026-03-01 03:00Z is still February in New York.
    _paid_campaigns(db_session, 1, "100.00", created_at=datetime(2026, 3, 1, 3, 0, tzinfo=UTC))
    _paid_campaigns(db_session, 1, "40.00", created_at=datetime(2026, 3, 1, 6, 0, tzinfo=UTC))

    snapshot = _snapshot(db_session, datetime(2026, 3, 18, 15, 0, tzinfo=UTC), tz_name="America/New_York")

    assert snapshot.gross_revenue == Decimal("40")


def test_deficit_raises_critical_only(db_session, fixed_now, wallet_owner):
    _paid_campaigns(db_session, 1, "100.00")
    db_session.add_all(
        [
            RecurringExpense(name="Payroll", amount=Decimal("2000.00")),
            TokenBalance(user_id=wallet_owner.id, balance=0, lifetime_spent=10),
        ]
    )
    db_session.flush()

    alerts = _health(db_session, fixed_now)

    assert [(a.type, a.key, a.severity) for a in alerts] == [
        ("health_critical", "health_critical_current", AlertSeverity.CRITICAL),
    ]
    # 100 - (2.90 + 0.30) - 2000
    assert alerts[0].description == "Operating at $1,903.20 deficit this month"


def test_thin_margin_raises_warning(db_session, fixed_now):
    _paid_campaigns(db_session, 1, "100.00")
    db_session.add(RecurringExpense(name="Hosting", amount=Decimal("40.00")))
    db_session.flush()

    alerts = _health(db_session, fixed_now)

    assert [(a.type, a.severity) for a in alerts] == [("health_warning", AlertSeverity.MEDIUM)]
    assert alerts[0].description == "Only $56.80 available; tight margins"


def test_no_revenue_replaces_deficit_alert(db_session, fixed_now):
    db_session.add(RecurringExpense(name="Hosting", amount=Decimal("50.00")))
    db_session.flush()

    alerts = _health(db_session, fixed_now)

    assert [(a.key, a.severity) for a in alerts] == [("health_no_revenue_current", AlertSeverity.CRITICAL)]


def test_zero_burn_accompanies_no_revenue(db_session, fixed_now, wallet_owner):
    db_session.add(TokenBalance(user_id=wallet_owner.id, balance=1000, lifetime_spent=0))
    db_session.flush()

    alerts = _health(db_session, fixed_now)

    assert [a.key for a in alerts] == ["health_no_revenue_current", "health_burn_rate_zero"]
