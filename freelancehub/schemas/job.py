"""Job board schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from freelancehub.models.job import ApplicationStatus, JobStatus, JobType


class JobCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    location: str = Field(..., min_length=1, max_length=100)
    job_type: JobType = JobType.FULL_TIME


class JobStatusUpdate(BaseModel):
    status: JobStatus


class JobRead(BaseModel):
    id: int
    company_id: int
    title: str
    description: str
    location: str
    job_type: JobType
    status: JobStatus
    application_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApplicationCreate(BaseModel):
    job_id: int
    cv_url: str = Field(..., min_length=1, max_length=500)
    cover_letter: str | None = Field(default=None, max_length=5000)


class ApplicationStatusUpdate(BaseModel):
    status: ApplicationStatus


class ApplicationRead(BaseModel):
    id: int
    job_id: int
    user_id: int
    cv_url: str
    cover_letter: str | None
    status: ApplicationStatus
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class SavedJobCreate(BaseModel):
    job_id: int


class SavedJobRead(BaseModel):
    id: int
    job_id: int
    created_at: datetime
    job: JobRead

    model_config = ConfigDict(from_attributes=True)
