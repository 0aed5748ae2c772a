"""Idempotency-Key handling for wallet requests.

A key names one ledger entry. Replaying it returns that entry; using it for
another account or another kind of entry is a conflict.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session

from freelancehub.models.wallet import WalletTransaction, WalletTransactionType
from freelancehub.utils.errors import Conflict, InvalidArgument

MAX_KEY_LENGTH = 128


def normalize_key(raw: str | None) -> str | None:
    if raw is None:
        return None
    key = raw.strip()
    if not key:
        return None
    if len(key) > MAX_KEY_LENGTH:
        raise InvalidArgument(
            f"Idempotency-Key must be at most {MAX_KEY_LENGTH} characters.",
            code="IDEMPOTENCY_KEY_TOO_LONG",
        )
    return key


def get_existing_by_key(
    db: Session,
    key: str | None,
    *,
    user_id: int,
    kind: WalletTransactionType,
) -> WalletTransaction | None:
    """Return the entry already recorded under ``key`` for this request."""
    if not key:
        return None
    existing = db.scalars(
        select(WalletTransaction).where(WalletTransaction.idempotency_key == key).limit(1)
    ).first()
    if existing is None:
        return None
    if existing.user_id != user_id or existing.type != kind:
        raise Conflict("Idempotency key already used for another operation.", code="IDEMPOTENCY_KEY_REUSED")
    return existing


__all__ = ["MAX_KEY_LENGTH", "normalize_key", "get_existing_by_key"]
