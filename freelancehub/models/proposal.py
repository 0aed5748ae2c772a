"""Proposal model."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, ForeignKey, Index, JSON, Numeric, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, str_enum
from .project import Duration


class ProposalStatus(str, PyEnum):
    """Possible statuses for a proposal."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class Proposal(Base):
    """A freelancer's bid on an open project."""

    __tablename__ = "proposals"
    __table_args__ = (
        CheckConstraint("bid_amount > 0", name="ck_proposal_positive_bid"),
        # One live proposal per (project, freelancer); withdrawn rows do not count.
        Index(
            "uq_proposals_project_freelancer_live",
            "project_id",
            "freelancer_id",
            unique=True,
            sqlite_where=text("status != 'WITHDRAWN'"),
            postgresql_where=text("status != 'WITHDRAWN'"),
        ),
        Index("ix_proposals_project_status", "project_id", "status"),
    )

    project_id: Mapped[int] = mapped_column(ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    freelancer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    cover_letter: Mapped[str] = mapped_column(Text, nullable=False)
    bid_amount: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    estimated_duration: Mapped[Duration] = mapped_column(str_enum(Duration), nullable=False)
    status: Mapped[ProposalStatus] = mapped_column(
        str_enum(ProposalStatus), nullable=False, default=ProposalStatus.PENDING
    )
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    project = relationship("Project", back_populates="proposals")
