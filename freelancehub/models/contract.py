"""Contract and milestone models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, str_enum


class ContractStatus(str, PyEnum):
    """Status of a contract."""

    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    DISPUTED = "DISPUTED"
    CANCELLED = "CANCELLED"


class MilestoneStatus(str, PyEnum):
    """Possible statuses for a milestone."""

    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REVISION_REQUESTED = "REVISION_REQUESTED"
    PAID = "PAID"


PROGRESS_STATES = (MilestoneStatus.APPROVED, MilestoneStatus.PAID)


class Contract(Base):
    """Binding agreement created from an accepted proposal."""

    __tablename__ = "contracts"
    __table_args__ = (
        UniqueConstraint("proposal_id", name="uq_contracts_proposal"),
        CheckConstraint("total_amount >= 0", name="ck_contract_total_non_negative"),
        Index("ix_contracts_status", "status"),
    )

    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id"), nullable=False, index=True)
    proposal_id: Mapped[int] = mapped_column(ForeignKey("proposals.id"), nullable=False)
    client_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    freelancer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    status: Mapped[ContractStatus] = mapped_column(
        str_enum(ContractStatus), nullable=False, default=ContractStatus.ACTIVE
    )
    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    milestones = relationship(
        "Milestone",
        back_populates="contract",
        cascade="all, delete-orphan",
        order_by="Milestone.idx",
        lazy="selectin",
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def progress(self) -> int:
        """Percentage of milestones approved or paid, rounded half up."""

        total = len(self.milestones)
        if total == 0:
            return 0
        done = sum(1 for m in self.milestones if m.status in PROGRESS_STATES)
        return (200 * done + total) // (2 * total)

    def milestone(self, idx: int) -> "Milestone | None":
        for item in self.milestones:
            if item.idx == idx:
                return item
        return None

    def is_party(self, user_id: int) -> bool:
        return user_id in (self.client_id, self.freelancer_id)


class Milestone(Base):
    """Milestone owned by a contract, addressed by its position."""

    __tablename__ = "milestones"
    __table_args__ = (
        UniqueConstraint("contract_id", "idx", name="uq_milestone_contract_idx"),
        CheckConstraint("amount > 0", name="ck_milestone_positive_amount"),
        CheckConstraint("idx > 0", name="ck_milestone_positive_idx"),
    )

    contract_id: Mapped[int] = mapped_column(ForeignKey("contracts.id", ondelete="CASCADE"), nullable=False, index=True)
    idx: Mapped[int] = mapped_column(Integer, nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    due_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[MilestoneStatus] = mapped_column(
        str_enum(MilestoneStatus), nullable=False, default=MilestoneStatus.PENDING
    )
    deliverables: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    paid_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    contract = relationship("Contract", back_populates="milestones")
