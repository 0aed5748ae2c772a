"""Review schemas."""
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=1000)
    title: str | None = Field(default=None, max_length=100)


class FreelancerReviewCreate(ReviewCreate):
    contract_id: int


class CompanyReviewCreate(ReviewCreate):
    company_id: int


class ReviewUpdate(BaseModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=1, max_length=1000)
    title: str | None = Field(default=None, max_length=100)


class ReviewRead(BaseModel):
    id: int
    reviewer_id: int
    freelancer_id: int | None
    contract_id: int | None
    company_id: int | None
    rating: int
    title: str | None
    comment: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewSummary(BaseModel):
    average: float
    total: int
    distribution: dict[int, int]
    reviews: list[ReviewRead]
