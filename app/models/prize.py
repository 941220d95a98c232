"""Weekly prize and prize payout models."""
from datetime import date, datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum as SqlEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class GameType(str, PyEnum):
    """Games that run a weekly leaderboard prize."""

    SLOTS = "slots"
    MATCH_EASY = "match_easy"
    MATCH_CHALLENGE = "match_challenge"
    SOLITAIRE = "solitaire"


class PrizeType(str, PyEnum):
    CASH = "cash"
    MERCH = "merch"
    TOKENS = "tokens"


class PrizePayoutStatus(str, PyEnum):
    """Lifecycle of a prize payout once a winner has been picked."""

    PENDING = "pending"
    VERIFIED = "verified"
    PAID = "paid"
    REJECTED = "rejected"


class WeeklyPrize(Base):
    """Prize configured for one game over one Sunday-to-Saturday week."""

    __tablename__ = "weekly_prizes"
    __table_args__ = (
        UniqueConstraint("game_type", "week_start", name="uq_weekly_prizes_game_week"),
        CheckConstraint("total_prize_pool >= 0", name="ck_weekly_prize_non_negative_pool"),
        Index("ix_weekly_prizes_week_end_time", "week_end_time"),
    )

    game_type: Mapped[str] = mapped_column(String(32), nullable=False)
    week_start: Mapped[date] = mapped_column(Date, nullable=False)
    week_end_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    total_prize_pool: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    prize_type: Mapped[PrizeType] = mapped_column(
        SqlEnum(PrizeType, name="prizetype"), nullable=False, default=PrizeType.CASH
    )
    winner_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class PrizePayout(Base):
    """Payout owed to a picked winner; notification and payment are set by other workflows."""

    __tablename__ = "prize_payouts"
    __table_args__ = (Index("ix_prize_payouts_status", "status"),)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    prize_id: Mapped[int] = mapped_column(ForeignKey("weekly_prizes.id"), nullable=False, index=True)
    status: Mapped[PrizePayoutStatus] = mapped_column(
        SqlEnum(PrizePayoutStatus, name="prizepayoutstatus"),
        nullable=False,
        default=PrizePayoutStatus.PENDING,
    )
    email_sent_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    user = relationship("User")
    prize = relationship("WeeklyPrize")
