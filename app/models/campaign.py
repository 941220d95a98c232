"""Advertising campaign models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, Enum as SqlEnum, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class CampaignStatus(str, PyEnum):
    """Campaign lifecycle; ACTIVE -> COMPLETED is driven by the expiry job."""

    PENDING_PAYMENT = "pending_payment"
    ACTIVE = "active"
    QUEUED = "queued"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class BusinessCard(Base):
    """Advertiser card shown in games."""

    __tablename__ = "business_cards"

    business_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    full_business_name: Mapped[str | None] = mapped_column(String(255), nullable=True)


class AdCampaign(Base):
    """Paid campaign buying a number of card views."""

    __tablename__ = "ad_campaigns"
    __table_args__ = (
        CheckConstraint("amount_paid >= 0", name="ck_ad_campaign_non_negative_amount"),
        CheckConstraint(
            "contracted_views >= 0 AND bonus_views >= 0 AND total_views >= 0",
            name="ck_ad_campaign_non_negative_views",
        ),
        Index("ix_ad_campaigns_status", "status"),
        Index("ix_ad_campaigns_created_at", "created_at"),
    )

    business_card_id: Mapped[int | None] = mapped_column(ForeignKey("business_cards.id"), nullable=True)
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    status: Mapped[CampaignStatus] = mapped_column(
        SqlEnum(CampaignStatus, name="campaignstatus"),
        nullable=False,
        default=CampaignStatus.PENDING_PAYMENT,
    )
    contracted_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    bonus_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
