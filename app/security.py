# app/security.py
"""Identity transports for the admin API.

Two adapters resolve the caller to a staff ``User``: a bearer API key
(``Authorization: Bearer ...`` or ``X-API-Key``) and a signed session
cookie. Both hand off to the same authorization step, which produces an
``AdminViewer`` consumed by the alert engine. No credential is issued here.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Depends, Header, Request, status
from sqlalchemy.orm import Session

from app.config import get_settings
from app.db import get_db
from app.models.user import AdminRole, User
from app.utils.apikey import find_valid_key, read_session
from app.utils.errors import api_error
from app.utils.time import utcnow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminViewer:
    """Resolved caller identity handed to the alert engine."""

    user_id: int
    role: AdminRole
    is_admin: bool
    email: str | None = None
    transport: str = "api_key"


def _extract_key(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str | None:
    """Read the key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def resolve_api_key_user(db: Session, token: str) -> User | None:
    """Bearer transport: map an API key to its owning user."""

    key = find_valid_key(db, token)
    if key is None:
        return None
    key.last_used_at = utcnow()
    db.commit()
    return db.get(User, key.user_id)


def resolve_session_user(db: Session, cookie_value: str) -> User | None:
    """Cookie transport: map a signed session cookie to its user."""

    user_id = read_session(cookie_value)
    if user_id is None:
        return None
    return db.get(User, user_id)


def authorize_admin(user: User, *, transport: str) -> AdminViewer:
    """Turn a resolved user into an ``AdminViewer`` or refuse with 403."""

    if not user.is_admin:
        raise api_error(status.HTTP_403_FORBIDDEN, "NOT_ADMIN", "Admin access required.")
    try:
        role = AdminRole(user.role or AdminRole.support.value)
    except ValueError:
        logger.warning("Admin user has an unknown role", extra={"user_id": user.id, "role": user.role})
        raise api_error(status.HTTP_403_FORBIDDEN, "UNKNOWN_ROLE", "Admin role is not recognised.") from None
    return AdminViewer(
        user_id=user.id,
        role=role,
        is_admin=True,
        email=user.email,
        transport=transport,
    )


def require_admin_viewer(
    request: Request,
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_key),
) -> AdminViewer:
    """Resolve the caller through whichever transport presented credentials."""

    cookie_value = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if token:
        user, transport = resolve_api_key_user(db, token), "api_key"
    elif cookie_value:
        user, transport = resolve_session_user(db, cookie_value), "session"
    else:
        raise api_error(
            status.HTTP_401_UNAUTHORIZED,
            "NOT_AUTHENTICATED",
            "Credentials required.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if user is None or not user.is_active:
        raise api_error(status.HTTP_401_UNAUTHORIZED, "UNAUTHORIZED", "Invalid or expired credentials.")
    return authorize_admin(user, transport=transport)


__all__ = [
    "AdminViewer",
    "authorize_admin",
    "require_admin_viewer",
    "resolve_api_key_user",
    "resolve_session_user",
]
