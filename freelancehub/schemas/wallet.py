"""Wallet schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from freelancehub.models.wallet import ReferenceType, WalletTransactionStatus, WalletTransactionType


class DepositCreate(BaseModel):
    amount: Decimal
    payment_method: str | None = Field(default=None, max_length=50)


class WithdrawalCreate(BaseModel):
    amount: Decimal
    method: str = Field(..., min_length=1, max_length=50)
    payment_details: dict = Field(default_factory=dict)


class WalletTransactionRead(BaseModel):
    id: int
    type: WalletTransactionType
    amount: Decimal
    status: WalletTransactionStatus
    description: str | None
    reference_type: ReferenceType | None
    reference_id: int | None
    payment_method: str | None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class WalletRead(BaseModel):
    balance: Decimal
    transactions: list[WalletTransactionRead]
