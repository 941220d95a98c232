"""Admin key/value settings."""
from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AdminSetting(Base):
    """Runtime-editable setting stored as text."""

    __tablename__ = "admin_settings"

    setting_key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    setting_value: Mapped[str | None] = mapped_column(Text, nullable=True)
