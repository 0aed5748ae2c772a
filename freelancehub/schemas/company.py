"""Company schemas."""
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from freelancehub.models.company import CompanyStatus


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=2000)
    email: EmailStr
    website: str | None = Field(default=None, max_length=255)


class CompanyStatusUpdate(BaseModel):
    status: CompanyStatus


class CompanyRead(BaseModel):
    id: int
    owner_id: int
    name: str
    description: str
    email: EmailStr
    website: str | None
    status: CompanyStatus
    rating: float
    total_reviews: int

    model_config = ConfigDict(from_attributes=True)
