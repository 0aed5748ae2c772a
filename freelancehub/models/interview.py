"""Interviews scheduled on job applications."""
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, str_enum


class InterviewType(str, PyEnum):
    VIDEO = "VIDEO"
    PHONE = "PHONE"
    IN_PERSON = "IN_PERSON"


class InterviewStatus(str, PyEnum):
    SCHEDULED = "SCHEDULED"
    RESCHEDULED = "RESCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


LIVE_INTERVIEW_STATES = (InterviewStatus.SCHEDULED, InterviewStatus.RESCHEDULED)


class Interview(Base):
    """A meeting the hiring company books with an applicant."""

    __tablename__ = "interviews"
    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_interview_duration_positive"),
        Index("ix_interviews_company_scheduled", "company_id", "scheduled_at"),
        Index("ix_interviews_applicant_scheduled", "applicant_id", "scheduled_at"),
    )

    application_id: Mapped[int] = mapped_column(
        ForeignKey("applications.id", ondelete="CASCADE"), nullable=False, index=True
    )
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False)
    applicant_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    interview_type: Mapped[InterviewType] = mapped_column(
        str_enum(InterviewType), nullable=False, default=InterviewType.VIDEO
    )
    scheduled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)
    meeting_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[InterviewStatus] = mapped_column(
        str_enum(InterviewStatus), nullable=False, default=InterviewStatus.SCHEDULED
    )
