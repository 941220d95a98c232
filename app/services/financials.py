"""Monthly financial snapshot shared by the health alerts."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.models.campaign import AdCampaign, CampaignStatus
from app.models.finance import Expense, ExpenseFrequency, RecurringExpense, TokenBalance
from app.models.payout_queue import PayoutQueueItem, PayoutQueueStatus
from app.utils.time import local_midnight, to_site_time

ZERO = Decimal("0")
MONTHS_PER_YEAR = Decimal("12")


def _to_decimal(x) -> Decimal:
    if x is None:
        return ZERO
    if isinstance(x, Decimal):
        return x
    return Decimal(str(x))


@dataclass(frozen=True)
class FinancialSnapshot:
    """Current-month cash position. Never persisted; recomputed per call.

    ``true_available`` may be negative; every input is non-negative.
    """

    gross_revenue: Decimal
    paid_campaign_count: int
    processing_fees: Decimal
    monthly_expenses: Decimal
    pending_payouts: Decimal
    total_tokens: int
    total_burned: int
    token_value: Decimal

    @property
    def net_revenue(self) -> Decimal:
        return self.gross_revenue - self.processing_fees

    @property
    def token_liability(self) -> Decimal:
        return Decimal(self.total_tokens) * self.token_value

    @property
    def true_available(self) -> Decimal:
        return self.net_revenue - self.monthly_expenses - self.pending_payouts - self.token_liability


def processing_fees(gross: Decimal, paid_count: int, *, percent: Decimal, fixed: Decimal) -> Decimal:
    """Card processor fees: a percentage of gross plus a fixed fee per paid campaign."""

    return gross * percent + Decimal(paid_count) * fixed


def _next_month(first: date) -> date:
    if first.month == 12:
        return first.replace(year=first.year + 1, month=1)
    return first.replace(month=first.month + 1)


def _campaign_revenue(db: Session, start: datetime, end: datetime) -> tuple[Decimal, int]:
    stmt = select(AdCampaign.amount_paid).where(
        AdCampaign.created_at >= start,
        AdCampaign.created_at < end,
        AdCampaign.status != CampaignStatus.CANCELLED,
    )
    amounts = [_to_decimal(value) for value in db.scalars(stmt)]
    return sum(amounts, ZERO), sum(1 for amount in amounts if amount > 0)


def _monthly_expenses(db: Session, first_day: date, next_first_day: date) -> Decimal:
    recurring = ZERO
    rows = db.execute(
        select(RecurringExpense.amount, RecurringExpense.frequency).where(RecurringExpense.is_active.is_(True))
    ).all()
    for amount, frequency in rows:
        if frequency == ExpenseFrequency.MONTHLY:
            recurring += _to_decimal(amount)
        elif frequency == ExpenseFrequency.YEARLY:
            recurring += _to_decimal(amount) / MONTHS_PER_YEAR

    one_time = db.scalar(
        select(func.coalesce(func.sum(Expense.amount), 0)).where(
            Expense.expense_date >= first_day,
            Expense.expense_date < next_first_day,
        )
    )
    return recurring + _to_decimal(one_time)


def _pending_payouts(db: Session) -> Decimal:
    value = db.scalar(
        select(func.coalesce(func.sum(PayoutQueueItem.amount), 0)).where(
            PayoutQueueItem.status == PayoutQueueStatus.PENDING
        )
    )
    return _to_decimal(value)


def _token_totals(db: Session) -> tuple[int, int]:
    balance, spent = db.execute(
        select(
            func.coalesce(func.sum(TokenBalance.balance), 0),
            func.coalesce(func.sum(TokenBalance.lifetime_spent), 0),
        )
    ).one()
    return int(balance or 0), int(spent or 0)


def compute_financial_snapshot(
    db: Session,
    *,
    now: datetime,
    tz_name: str,
    token_value: Decimal,
    fee_percent: Decimal,
    fee_fixed: Decimal,
) -> FinancialSnapshot:
    """Compute the snapshot for the calendar month containing ``now`` (site timezone)."""

    first_day = to_site_time(now, tz_name).date().replace(day=1)
    next_first_day = _next_month(first_day)
    start = local_midnight(first_day, tz_name)
    end = local_midnight(next_first_day, tz_name)

    gross, paid_count = _campaign_revenue(db, start, end)
    total_tokens, total_burned = _token_totals(db)
    return FinancialSnapshot(
        gross_revenue=gross,
        paid_campaign_count=paid_count,
        processing_fees=processing_fees(gross, paid_count, percent=fee_percent, fixed=fee_fixed),
        monthly_expenses=_monthly_expenses(db, first_day, next_first_day),
        pending_payouts=_pending_payouts(db),
        total_tokens=total_tokens,
        total_burned=total_burned,
        token_value=token_value,
    )


__all__ = ["FinancialSnapshot", "compute_financial_snapshot", "processing_fees"]
