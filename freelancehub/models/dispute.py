"""Dispute models."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, ForeignKey, Index, JSON, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, str_enum


class DisputeStatus(str, PyEnum):
    """Dispute lifecycle; RESOLVED and REJECTED are terminal."""

    OPEN = "OPEN"
    UNDER_REVIEW = "UNDER_REVIEW"
    RESOLVED = "RESOLVED"
    REJECTED = "REJECTED"


LIVE_DISPUTE_STATES = (DisputeStatus.OPEN, DisputeStatus.UNDER_REVIEW)
CLOSED_DISPUTE_STATES = (DisputeStatus.RESOLVED, DisputeStatus.REJECTED)


class Dispute(Base):
    """A disagreement raised by one contract party against the other."""

    __tablename__ = "disputes"
    __table_args__ = (Index("ix_disputes_status", "status"),)

    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id"), nullable=False, index=True)
    initiator_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    defendant_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    evidence: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    status: Mapped[DisputeStatus] = mapped_column(str_enum(DisputeStatus), nullable=False, default=DisputeStatus.OPEN)
    decision: Mapped[str | None] = mapped_column(Text, nullable=True)
    decided_by_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    decided_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    messages = relationship(
        "DisputeMessage",
        back_populates="dispute",
        cascade="all, delete-orphan",
        order_by="DisputeMessage.id",
        lazy="selectin",
    )

    def is_participant(self, user_id: int) -> bool:
        return user_id in (self.initiator_id, self.defendant_id)


class DisputeMessage(Base):
    """Append-only entry of a dispute thread."""

    __tablename__ = "dispute_messages"

    dispute_id: Mapped[int] = mapped_column(ForeignKey("disputes.id", ondelete="CASCADE"), nullable=False, index=True)
    sender_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    dispute = relationship("Dispute", back_populates="messages")
