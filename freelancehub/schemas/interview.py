"""Interview schemas."""
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from freelancehub.models.interview import InterviewStatus, InterviewType


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        raise ValueError("scheduled_at must carry a timezone offset")
    return value.astimezone(UTC)


class InterviewCreate(BaseModel):
    application_id: int
    scheduled_at: datetime
    duration_minutes: int = Field(default=30, ge=15, le=480)
    interview_type: InterviewType = InterviewType.VIDEO
    location: str | None = Field(default=None, max_length=255)
    meeting_link: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("scheduled_at")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        return _as_utc(value)


class InterviewUpdate(BaseModel):
    """Partial update; applicants may only send ``status: CANCELLED``."""

    scheduled_at: datetime | None = None
    duration_minutes: int | None = Field(default=None, ge=15, le=480)
    interview_type: InterviewType | None = None
    location: str | None = Field(default=None, max_length=255)
    meeting_link: str | None = Field(default=None, max_length=500)
    notes: str | None = Field(default=None, max_length=2000)
    status: InterviewStatus | None = None

    @field_validator("scheduled_at")
    @classmethod
    def _ensure_timezone(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)


class InterviewRead(BaseModel):
    id: int
    application_id: int
    job_id: int
    company_id: int
    applicant_id: int
    interview_type: InterviewType
    scheduled_at: datetime
    duration_minutes: int
    location: str | None
    meeting_link: str | None
    notes: str | None
    status: InterviewStatus

    model_config = ConfigDict(from_attributes=True)
