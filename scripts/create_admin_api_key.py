"""Create a staff user (if needed) and issue an API key for it."""
from __future__ import annotations

import argparse

from sqlalchemy import select

from app.db import init_engine, session_scope
from app.models.api_key import ApiKey
from app.models.user import AdminRole, User
from app.utils.apikey import gen_key
from app.utils.audit import log_audit


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--username", default="dev-admin")
    parser.add_argument("--email", default="dev-admin@example.com")
    parser.add_argument("--role", choices=[role.value for role in AdminRole], default=AdminRole.admin.value)
    parser.add_argument("--key-name", default=None)
    return parser.parse_args()


def main() -> None:
    args = _parse_args()
    init_engine()

    with session_scope() as db:
        user = db.scalars(select(User).where(User.username == args.username)).first()
        if user is None:
            user = User(username=args.username, email=args.email, is_admin=True, role=args.role)
            db.add(user)
            db.flush()
        else:
            user.is_admin = True
            user.role = args.role

        raw_token, prefix, key_hash = gen_key()
        api_key = ApiKey(
            name=args.key_name or f"{args.username}-{prefix}",
            prefix=prefix,
            key_hash=key_hash,
            user_id=user.id,
            is_active=True,
        )
        db.add(api_key)
        db.flush()
        log_audit(
            db,
            actor="cli",
            action="CREATE_API_KEY",
            entity="ApiKey",
            entity_id=api_key.id,
            data={"name": api_key.name, "user_id": user.id, "role": args.role},
        )

    print("==========================================")
    print("Admin API key created")
    print("Use this key in your Authorization header:")
    print(f"    Authorization: Bearer {raw_token}")
    print(f"(key id: {api_key.id}, user: {user.username}, role: {user.role})")
    print("==========================================")


if __name__ == "__main__":
    main()
