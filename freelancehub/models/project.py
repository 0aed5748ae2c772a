"""Project models."""
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, JSON, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, str_enum


class ProjectStatus(str, PyEnum):
    """Lifecycle of a posted project."""

    OPEN = "OPEN"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class ProjectCategory(str, PyEnum):
    WEB_DEVELOPMENT = "WEB_DEVELOPMENT"
    MOBILE_DEVELOPMENT = "MOBILE_DEVELOPMENT"
    DESIGN = "DESIGN"
    WRITING = "WRITING"
    MARKETING = "MARKETING"
    DATA_SCIENCE = "DATA_SCIENCE"
    VIDEO_ANIMATION = "VIDEO_ANIMATION"
    MUSIC_AUDIO = "MUSIC_AUDIO"
    BUSINESS = "BUSINESS"
    OTHER = "OTHER"


class BudgetType(str, PyEnum):
    FIXED = "FIXED"
    HOURLY = "HOURLY"


class Duration(str, PyEnum):
    """Duration buckets shared by projects and proposals."""

    LESS_THAN_1_WEEK = "LESS_THAN_1_WEEK"
    LESS_THAN_1_MONTH = "LESS_THAN_1_MONTH"
    ONE_TO_THREE_MONTHS = "1_TO_3_MONTHS"
    THREE_TO_SIX_MONTHS = "3_TO_6_MONTHS"
    MORE_THAN_6_MONTHS = "MORE_THAN_6_MONTHS"


class ExperienceLevel(str, PyEnum):
    ENTRY = "ENTRY"
    MID = "MID"
    SENIOR = "SENIOR"
    EXPERT = "EXPERT"


class Project(Base):
    """A client's posting that freelancers bid on."""

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("budget_min IS NULL OR budget_min >= 0", name="ck_project_budget_min_non_negative"),
        CheckConstraint("budget_max IS NULL OR budget_max >= 0", name="ck_project_budget_max_non_negative"),
        CheckConstraint("proposal_count >= 0", name="ck_project_proposal_count_non_negative"),
        Index("ix_projects_status", "status"),
        Index("ix_projects_category", "category"),
    )

    title: Mapped[str] = mapped_column(String(150), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[ProjectCategory] = mapped_column(str_enum(ProjectCategory), nullable=False)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    budget_type: Mapped[BudgetType] = mapped_column(str_enum(BudgetType), nullable=False, default=BudgetType.FIXED)
    budget_min: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    budget_max: Mapped[Decimal | None] = mapped_column(Numeric(18, 2), nullable=True)
    duration: Mapped[Duration] = mapped_column(str_enum(Duration), nullable=False, default=Duration.LESS_THAN_1_MONTH)
    experience_level: Mapped[ExperienceLevel] = mapped_column(
        str_enum(ExperienceLevel), nullable=False, default=ExperienceLevel.MID
    )
    status: Mapped[ProjectStatus] = mapped_column(str_enum(ProjectStatus), nullable=False, default=ProjectStatus.OPEN)
    client_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    company_id: Mapped[int | None] = mapped_column(ForeignKey("companies.id"), nullable=True, index=True)
    assigned_to_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True, index=True)
    proposal_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    attachments: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    proposals = relationship("Proposal", back_populates="project", cascade="all, delete-orphan")
