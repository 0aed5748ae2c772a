"""Review model."""
from sqlalchemy import CheckConstraint, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base


class Review(Base):
    """Rating left for a freelancer (per contract) or for a company."""

    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        CheckConstraint(
            "(freelancer_id IS NOT NULL AND contract_id IS NOT NULL AND company_id IS NULL)"
            " OR (company_id IS NOT NULL AND freelancer_id IS NULL AND contract_id IS NULL)",
            name="ck_review_single_target",
        ),
        UniqueConstraint("contract_id", "reviewer_id", name="uq_reviews_contract_reviewer"),
        UniqueConstraint("company_id", "reviewer_id", name="uq_reviews_company_reviewer"),
    )

    reviewer_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    freelancer_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    contract_id: Mapped[int | None] = mapped_column(ForeignKey("contracts.id"), nullable=True)
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=True, index=True)
    rating: Mapped[int] = mapped_column(nullable=False)
    title: Mapped[str | None] = mapped_column(String(100), nullable=True)
    comment: Mapped[str] = mapped_column(Text, nullable=False)
