"""Expense and token ledger models feeding the financial snapshot."""
from datetime import date
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Date, Enum as SqlEnum, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class ExpenseFrequency(str, PyEnum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class RecurringExpense(Base):
    __tablename__ = "recurring_expenses"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_recurring_expense_non_negative"),)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    frequency: Mapped[ExpenseFrequency] = mapped_column(
        SqlEnum(ExpenseFrequency, name="expensefrequency"),
        nullable=False,
        default=ExpenseFrequency.MONTHLY,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Expense(Base):
    """One-time expense booked on a given day."""

    __tablename__ = "expenses"
    __table_args__ = (CheckConstraint("amount >= 0", name="ck_expense_non_negative"),)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    expense_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)


class TokenBalance(Base):
    """Per-user in-game token wallet; unspent tokens are a liability."""

    __tablename__ = "token_balances"
    __table_args__ = (
        CheckConstraint("balance >= 0 AND lifetime_spent >= 0", name="ck_token_balance_non_negative"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, unique=True)
    balance: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    lifetime_spent: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
