"""Bootstrap an administrator account and print a fresh API key for it."""
from __future__ import annotations

import argparse
from datetime import timedelta

from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import select  # noqa: E402

from freelancehub.db import session_scope  # noqa: E402
from freelancehub.models.api_key import ApiKey  # noqa: E402
from freelancehub.models.user import User, UserRole  # noqa: E402
from freelancehub.utils.apikey import gen_key  # noqa: E402
from freelancehub.utils.audit import log_audit  # noqa: E402
from freelancehub.utils.time import utcnow  # noqa: E402


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--username", default="admin")
    parser.add_argument("--email", default="admin@freelancehub.example.com")
    parser.add_argument("--days-valid", type=int, default=90)
    args = parser.parse_args()

    with session_scope() as db:
        admin = db.scalars(select(User).where(User.username == args.username)).first()
        if admin is None:
            admin = User(username=args.username, email=args.email, role=UserRole.ADMIN)
            db.add(admin)
            db.flush()
        elif admin.role != UserRole.ADMIN:
            raise SystemExit(f"User {args.username!r} exists but is not an administrator.")

        raw, prefix, key_hash = gen_key()
        api_key = ApiKey(
            name=f"{args.username}-{prefix}",
            prefix=prefix,
            key_hash=key_hash,
            user_id=admin.id,
            is_active=True,
            expires_at=utcnow() + timedelta(days=args.days_valid) if args.days_valid else None,
        )
        db.add(api_key)
        db.flush()
        log_audit(
            db,
            actor="system",
            action="CREATE_API_KEY",
            entity="ApiKey",
            entity_id=api_key.id,
            data={"name": api_key.name, "user_id": admin.id},
        )
        db.commit()

        print("Admin API key created; it is shown only once:")
        print(f"    Authorization: Bearer {raw}")
        print(f"(user id: {admin.id}, key id: {api_key.id})")


if __name__ == "__main__":
    main()
