"""API key and session token helpers."""
from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.api_key import ApiKey
from app.utils.time import ensure_utc, utcnow


def _secret() -> bytes:
    return get_settings().SECRET_KEY.encode()


def hash_key(raw: str) -> str:
    """Return an HMAC-SHA256 hash for the provided API key."""

    return hmac.new(_secret(), raw.encode(), hashlib.sha256).hexdigest()


def gen_key(prefix_len: int = 6) -> tuple[str, str, str]:
    """Generate a user-facing API key, its prefix, and the stored hash."""

    prefix = "ops_" + secrets.token_hex(prefix_len)[:prefix_len]
    suffix = secrets.token_urlsafe(32)
    raw = f"{prefix}.{suffix}"
    return raw, prefix, hash_key(raw)


def find_valid_key(db: Session, raw: str) -> Optional[ApiKey]:
    """Return the matching active, unexpired API key, if any."""

    stmt = select(ApiKey).where(ApiKey.key_hash == hash_key(raw), ApiKey.is_active.is_(True)).limit(1)
    key = db.scalars(stmt).first()
    if key is None:
        return None
    if key.expires_at is not None and ensure_utc(key.expires_at) <= utcnow():
        return None
    return key


def _session_signature(user_id: int) -> str:
    return hmac.new(_secret(), f"session:{user_id}".encode(), hashlib.sha256).hexdigest()


def sign_session(user_id: int) -> str:
    """Return a ``{user_id}.{signature}`` session cookie value."""

    return f"{user_id}.{_session_signature(user_id)}"


def read_session(token: str | None) -> int | None:
    """Return the user id carried by a session cookie, or ``None`` if it is forged or malformed."""

    if not token or "." not in token:
        return None
    raw_id, signature = token.split(".", 1)
    if not raw_id.isdigit():
        return None
    user_id = int(raw_id)
    if not secrets.compare_digest(signature, _session_signature(user_id)):
        return None
    return user_id
