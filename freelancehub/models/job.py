"""Job board models."""
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, str_enum


class JobStatus(str, PyEnum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CLOSED = "CLOSED"


class JobType(str, PyEnum):
    FULL_TIME = "FULL_TIME"
    PART_TIME = "PART_TIME"
    CONTRACT = "CONTRACT"
    REMOTE = "REMOTE"
    INTERNSHIP = "INTERNSHIP"


class ApplicationStatus(str, PyEnum):
    PENDING = "PENDING"
    REVIEWING = "REVIEWING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


class Job(Base):
    """Salaried position posted by a company."""

    __tablename__ = "jobs"
    __table_args__ = (CheckConstraint("application_count >= 0", name="ck_job_application_count_non_negative"),)

    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    location: Mapped[str] = mapped_column(String(100), nullable=False)
    job_type: Mapped[JobType] = mapped_column(str_enum(JobType), nullable=False, default=JobType.FULL_TIME)
    status: Mapped[JobStatus] = mapped_column(str_enum(JobStatus), nullable=False, default=JobStatus.PENDING)
    application_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Application(Base):
    """A user's application to a job."""

    __tablename__ = "applications"
    __table_args__ = (UniqueConstraint("job_id", "user_id", name="uq_applications_job_user"),)

    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    cv_url: Mapped[str] = mapped_column(String(500), nullable=False)
    cover_letter: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ApplicationStatus] = mapped_column(
        str_enum(ApplicationStatus), nullable=False, default=ApplicationStatus.PENDING
    )


class SavedJob(Base):
    """A job bookmarked by a user."""

    __tablename__ = "saved_jobs"
    __table_args__ = (UniqueConstraint("user_id", "job_id", name="uq_saved_jobs_user_job"),)

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    job_id: Mapped[int] = mapped_column(ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False)

    job = relationship("Job")
