"""Wallet ledger services.

The displayed balance lives on ``users.balance`` and is only ever changed by
single conditional UPDATE statements, so concurrent debits cannot overdraw an
account. ``WalletTransaction`` rows form the append-only history next to it.
"""
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.user import User
from freelancehub.models.wallet import (
    ReferenceType,
    WalletTransaction,
    WalletTransactionStatus,
    WalletTransactionType,
)
from freelancehub.services.idempotency import get_existing_by_key, normalize_key
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import InsufficientFunds, NotFound
from freelancehub.utils.money import positive_amount

logger = logging.getLogger(__name__)


def get_balance(db: Session, user_id: int) -> Decimal:
    balance = db.scalar(select(User.balance).where(User.id == user_id))
    if balance is None:
        raise NotFound("User not found.", code="USER_NOT_FOUND")
    return Decimal(balance)


def _credit(db: Session, user_id: int, amount: Decimal) -> None:
    result = db.execute(
        update(User)
        .where(User.id == user_id)
        .values(balance=User.balance + amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise NotFound("User not found.", code="USER_NOT_FOUND")


def _debit(db: Session, user_id: int, amount: Decimal, *, message: str) -> None:
    """Conditionally debit ``amount``; roll back and refuse when the balance is short."""

    result = db.execute(
        update(User)
        .where(User.id == user_id, User.balance >= amount)
        .values(balance=User.balance - amount)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 1:
        return
    db.rollback()
    balance = get_balance(db, user_id)
    logger.info(
        "Debit refused",
        extra={"user_id": user_id, "amount": str(amount), "balance": str(balance)},
    )
    raise InsufficientFunds(message, details={"balance": str(balance), "requested": str(amount)})


def _reuse(
    db: Session,
    user_id: int,
    idempotency_key: str,
    kind: WalletTransactionType,
) -> WalletTransaction | None:
    existing = get_existing_by_key(db, idempotency_key, user_id=user_id, kind=kind)
    if existing is not None:
        logger.info(
            "Idempotent wallet request reused",
            extra={"user_id": user_id, "transaction_id": existing.id, "type": kind.value},
        )
    return existing


def deposit(
    db: Session,
    user_id: int,
    amount: Any,
    *,
    idempotency_key: str | None = None,
    payment_method: str | None = None,
    actor: str,
) -> WalletTransaction:
    """Credit the account and record a COMPLETED deposit."""

    amount_dec = positive_amount(amount)
    idempotency_key = normalize_key(idempotency_key)

    if idempotency_key:
        existing = _reuse(db, user_id, idempotency_key, WalletTransactionType.DEPOSIT)
        if existing is not None:
            return existing

    _credit(db, user_id, amount_dec)
    tx = WalletTransaction(
        user_id=user_id,
        type=WalletTransactionType.DEPOSIT,
        amount=amount_dec,
        status=WalletTransactionStatus.COMPLETED,
        description="Wallet deposit",
        payment_method=payment_method,
        idempotency_key=idempotency_key,
    )
    db.add(tx)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        if idempotency_key:
            existing = _reuse(db, user_id, idempotency_key, WalletTransactionType.DEPOSIT)
            if existing is not None:
                return existing
        raise
    log_audit(
        db,
        actor=actor,
        action="WALLET_DEPOSIT",
        entity="WalletTransaction",
        entity_id=tx.id,
        data={"user_id": user_id, "amount": str(amount_dec), "idempotency_key": idempotency_key},
    )
    db.commit()
    db.refresh(tx)
    logger.info("Wallet deposit recorded", extra={"user_id": user_id, "transaction_id": tx.id})
    return tx


def withdraw(
    db: Session,
    user_id: int,
    amount: Any,
    *,
    method: str,
    payment_details: dict | None = None,
    idempotency_key: str | None = None,
    actor: str,
) -> WalletTransaction:
    """Debit the account and record a PENDING withdrawal.

    The debit is one conditional UPDATE guarded by ``balance >= amount``;
    when no row matches the balance is left untouched.
    """

    amount_dec = positive_amount(amount)
    idempotency_key = normalize_key(idempotency_key)
    if idempotency_key:
        existing = _reuse(db, user_id, idempotency_key, WalletTransactionType.WITHDRAWAL)
        if existing is not None:
            return existing

    _debit(db, user_id, amount_dec, message="Insufficient balance.")
    tx = WalletTransaction(
        user_id=user_id,
        type=WalletTransactionType.WITHDRAWAL,
        amount=amount_dec,
        status=WalletTransactionStatus.PENDING,
        description=f"Withdrawal via {method}",
        payment_method=method,
        idempotency_key=idempotency_key,
    )
    db.add(tx)
    try:
        db.flush()
    except IntegrityError:
        db.rollback()
        if idempotency_key:
            existing = _reuse(db, user_id, idempotency_key, WalletTransactionType.WITHDRAWAL)
            if existing is not None:
                return existing
        raise
    log_audit(
        db,
        actor=actor,
        action="WALLET_WITHDRAWAL_REQUESTED",
        entity="WalletTransaction",
        entity_id=tx.id,
        data={
            "user_id": user_id,
            "amount": str(amount_dec),
            "method": method,
            "payment_details": payment_details or {},
        },
    )
    db.commit()
    db.refresh(tx)
    logger.info("Wallet withdrawal requested", extra={"user_id": user_id, "transaction_id": tx.id})
    return tx


def credit_earning(
    db: Session,
    user_id: int,
    amount: Decimal,
    *,
    contract_id: int,
    description: str,
) -> WalletTransaction:
    """Credit a milestone payout inside the caller's transaction (no commit)."""

    amount_dec = positive_amount(amount)
    _credit(db, user_id, amount_dec)
    tx = WalletTransaction(
        user_id=user_id,
        type=WalletTransactionType.EARNING,
        amount=amount_dec,
        status=WalletTransactionStatus.COMPLETED,
        description=description,
        reference_type=ReferenceType.CONTRACT,
        reference_id=contract_id,
    )
    db.add(tx)
    db.flush()
    return tx


def settle_milestone(
    db: Session,
    *,
    payer_id: int,
    payee_id: int,
    amount: Decimal,
    contract_id: int,
    description: str,
) -> tuple[WalletTransaction, WalletTransaction]:
    """Move a milestone payment from the client to the freelancer (no commit).

    The client is debited first with the guarded UPDATE; a short balance
    rolls the whole transaction back and raises ``InsufficientFunds``.
    """

    amount_dec = positive_amount(amount)
    _debit(db, payer_id, amount_dec, message="Client balance does not cover this milestone.")
    payment = WalletTransaction(
        user_id=payer_id,
        type=WalletTransactionType.PAYMENT,
        amount=amount_dec,
        status=WalletTransactionStatus.COMPLETED,
        description=description,
        reference_type=ReferenceType.CONTRACT,
        reference_id=contract_id,
    )
    db.add(payment)
    earning = credit_earning(db, payee_id, amount_dec, contract_id=contract_id, description=description)
    return payment, earning


def history(db: Session, user_id: int, *, limit: int = 20, offset: int = 0) -> list[WalletTransaction]:
    stmt = (
        select(WalletTransaction)
        .where(WalletTransaction.user_id == user_id)
        .order_by(WalletTransaction.created_at.desc(), WalletTransaction.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt))


def get_wallet(db: Session, user_id: int, *, recent: int = 10) -> tuple[Decimal, list[WalletTransaction]]:
    """Return the balance together with the latest transactions."""

    return get_balance(db, user_id), history(db, user_id, limit=recent)


__all__ = [
    "get_balance",
    "deposit",
    "withdraw",
    "credit_earning",
    "settle_milestone",
    "history",
    "get_wallet",
]
