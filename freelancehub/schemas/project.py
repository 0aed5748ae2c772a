"""Project schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from freelancehub.models.project import BudgetType, Duration, ExperienceLevel, ProjectCategory, ProjectStatus
from freelancehub.schemas.common import Attachment


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=150)
    description: str = Field(..., min_length=1, max_length=5000)
    category: ProjectCategory
    skills: list[str] = Field(default_factory=list)
    budget_type: BudgetType = BudgetType.FIXED
    budget_min: Decimal | None = Field(default=None, ge=Decimal("0"))
    budget_max: Decimal | None = Field(default=None, ge=Decimal("0"))
    duration: Duration = Duration.LESS_THAN_1_MONTH
    experience_level: ExperienceLevel = ExperienceLevel.MID
    deadline: datetime | None = None
    company_id: int | None = None
    attachments: list[Attachment] = Field(default_factory=list)

    @model_validator(mode="after")
    def _budget_bounds(self) -> "ProjectCreate":
        if self.budget_min is not None and self.budget_max is not None and self.budget_min > self.budget_max:
            raise ValueError("budget_min cannot exceed budget_max")
        return self


class ProjectUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=150)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    category: ProjectCategory | None = None
    skills: list[str] | None = None
    budget_type: BudgetType | None = None
    budget_min: Decimal | None = Field(default=None, ge=Decimal("0"))
    budget_max: Decimal | None = Field(default=None, ge=Decimal("0"))
    duration: Duration | None = None
    experience_level: ExperienceLevel | None = None
    deadline: datetime | None = None
    attachments: list[Attachment] | None = None


class ProjectRead(BaseModel):
    id: int
    title: str
    description: str
    category: ProjectCategory
    skills: list[str]
    budget_type: BudgetType
    budget_min: Decimal | None
    budget_max: Decimal | None
    duration: Duration
    experience_level: ExperienceLevel
    status: ProjectStatus
    client_id: int
    company_id: int | None
    assigned_to_id: int | None
    proposal_count: int
    deadline: datetime | None
    attachments: list[Attachment]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
