"""Freelancer profile schemas."""
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from freelancehub.models.freelancer_profile import Availability
from freelancehub.models.project import ExperienceLevel, ProjectCategory


class ProfileUpsert(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    bio: str = Field(default="", max_length=2000)
    skills: list[str] = Field(default_factory=list)
    category: ProjectCategory = ProjectCategory.OTHER
    hourly_rate: Decimal | None = Field(default=None, ge=Decimal("0"))
    availability: Availability = Availability.AVAILABLE
    experience_level: ExperienceLevel = ExperienceLevel.MID


class ProfileRead(BaseModel):
    id: int
    user_id: int
    title: str
    bio: str
    skills: list[str]
    category: ProjectCategory
    hourly_rate: Decimal | None
    availability: Availability
    experience_level: ExperienceLevel
    completed_projects: int
    total_earnings: Decimal
    rating: float
    total_reviews: int
    success_rate: float

    model_config = ConfigDict(from_attributes=True)
