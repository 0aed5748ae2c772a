"""User model."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import Boolean, CheckConstraint, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, str_enum


class UserRole(str, PyEnum):
    """Platform roles carried by an authenticated actor."""

    USER = "USER"
    COMPANY = "COMPANY"
    ADMIN = "ADMIN"


class User(Base):
    """Represents a marketplace account (client and/or freelancer)."""

    __tablename__ = "users"
    __table_args__ = (CheckConstraint("balance >= 0", name="ck_user_balance_non_negative"),)

    username: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role: Mapped[UserRole] = mapped_column(str_enum(UserRole), nullable=False, default=UserRole.USER)
    balance: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
