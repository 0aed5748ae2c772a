"""Wallet ledger models."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, str_enum


class WalletTransactionType(str, PyEnum):
    """Direction of a ledger entry; amounts are always stored positive."""

    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    PAYMENT = "PAYMENT"
    EARNING = "EARNING"
    REFUND = "REFUND"


class WalletTransactionStatus(str, PyEnum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class ReferenceType(str, PyEnum):
    CONTRACT = "CONTRACT"
    PROJECT = "PROJECT"
    PROPOSAL = "PROPOSAL"


class WalletTransaction(Base):
    """Append-only ledger entry of one user account."""

    __tablename__ = "wallet_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_wallet_tx_positive_amount"),
        Index("ix_wallet_tx_user_created", "user_id", "created_at"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type: Mapped[WalletTransactionType] = mapped_column(str_enum(WalletTransactionType), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[WalletTransactionStatus] = mapped_column(
        str_enum(WalletTransactionStatus), nullable=False, default=WalletTransactionStatus.PENDING
    )
    description: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reference_type: Mapped[ReferenceType | None] = mapped_column(str_enum(ReferenceType), nullable=True)
    reference_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    payment_method: Mapped[str | None] = mapped_column(String(50), nullable=True)
    idempotency_key: Mapped[str | None] = mapped_column(String(128), unique=True, nullable=True)
