"""Alert dismissal model."""
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AlertDismissal(Base):
    """Durable suppression of a computed alert, identified by (type, key)."""

    __tablename__ = "admin_alert_dismissals"
    __table_args__ = (
        UniqueConstraint("alert_type", "alert_key", name="uq_admin_alert_dismissals_type_key"),
    )

    alert_type: Mapped[str] = mapped_column(String(64), nullable=False)
    alert_key: Mapped[str] = mapped_column(String(191), nullable=False)
    dismissed_by: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    dismissed_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
