"""Wallet endpoints."""
from fastapi import APIRouter, Depends, Header, Query, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.wallet import WalletTransaction
from freelancehub.schemas.wallet import DepositCreate, WalletRead, WalletTransactionRead, WithdrawalCreate
from freelancehub.security import Actor, require_actor
from freelancehub.services import wallet as wallet_service

router = APIRouter(prefix="/wallet", tags=["wallet"])
settings = get_settings()


@router.get("", response_model=WalletRead)
def get_wallet(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> WalletRead:
    balance, transactions = wallet_service.get_wallet(db, actor.user_id)
    return WalletRead(
        balance=balance,
        transactions=[WalletTransactionRead.model_validate(tx) for tx in transactions],
    )


@router.get("/transactions", response_model=list[WalletTransactionRead])
def list_transactions(
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[WalletTransaction]:
    return wallet_service.history(db, actor.user_id, limit=limit, offset=offset)


@router.post("/deposit", response_model=WalletTransactionRead, status_code=status.HTTP_201_CREATED)
def deposit(
    payload: DepositCreate,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> WalletTransaction:
    return wallet_service.deposit(
        db,
        actor.user_id,
        payload.amount,
        idempotency_key=idempotency_key,
        payment_method=payload.payment_method,
        actor=actor.label,
    )


@router.post("/withdraw", response_model=WalletTransactionRead, status_code=status.HTTP_201_CREATED)
def withdraw(
    payload: WithdrawalCreate,
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> WalletTransaction:
    return wallet_service.withdraw(
        db,
        actor.user_id,
        payload.amount,
        method=payload.method,
        payment_details=payload.payment_details,
        idempotency_key=idempotency_key,
        actor=actor.label,
    )
