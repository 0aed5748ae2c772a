"""Freelancer profile model."""
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, Float, ForeignKey, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, str_enum
from .project import ExperienceLevel, ProjectCategory


class Availability(str, PyEnum):
    AVAILABLE = "AVAILABLE"
    BUSY = "BUSY"
    NOT_AVAILABLE = "NOT_AVAILABLE"


class FreelancerProfile(Base):
    """Public profile of a freelancer with cached engagement aggregates."""

    __tablename__ = "freelancer_profiles"
    __table_args__ = (
        CheckConstraint("completed_projects >= 0", name="ck_profile_completed_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_profile_rating_range"),
        CheckConstraint("success_rate >= 0 AND success_rate <= 100", name="ck_profile_success_rate_range"),
    )

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    title: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    bio: Mapped[str] = mapped_column(Text, nullable=False, default="")
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    category: Mapped[ProjectCategory] = mapped_column(
        str_enum(ProjectCategory), nullable=False, default=ProjectCategory.OTHER
    )
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    availability: Mapped[Availability] = mapped_column(
        str_enum(Availability), nullable=False, default=Availability.AVAILABLE
    )
    experience_level: Mapped[ExperienceLevel] = mapped_column(
        str_enum(ExperienceLevel), nullable=False, default=ExperienceLevel.MID
    )

    # Cached aggregates, written only by the engagement services.
    completed_projects: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_earnings: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    success_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
