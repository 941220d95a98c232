"""User model."""
import enum

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class AdminRole(str, enum.Enum):
    """Back-office roles, from most to least privileged."""

    super_admin = "super_admin"
    admin = "admin"
    manager = "manager"
    support = "support"


class User(Base):
    """Represents a player, advertiser or staff account."""

    __tablename__ = "users"

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # One of AdminRole; NULL is read as support, anything else is refused by app.security.
    role: Mapped[str | None] = mapped_column(String(32), nullable=True)
    payout_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payout_handle: Mapped[str | None] = mapped_column(String(255), nullable=True)
