"""Payout queue model."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Enum as SqlEnum, ForeignKey, Index, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class PayoutQueueStatus(str, PyEnum):
    PENDING = "pending"
    PAID = "paid"
    REJECTED = "rejected"


class PayoutQueueItem(Base):
    """Cash withdrawal waiting for an admin to process it."""

    __tablename__ = "payout_queue"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_payout_queue_non_negative_amount"),
        Index("ix_payout_queue_status", "status"),
    )

    user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    reason: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[PayoutQueueStatus] = mapped_column(
        SqlEnum(PayoutQueueStatus, name="payoutqueuestatus"),
        nullable=False,
        default=PayoutQueueStatus.PENDING,
    )
