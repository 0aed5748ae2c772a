"""Portfolio schemas."""
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field


class PortfolioItemCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=5000)
    cover_image: str = Field(..., min_length=1, max_length=500)
    images: list[str] = Field(default_factory=list, max_length=20)
    video_url: str | None = Field(default=None, max_length=500)
    link: str | None = Field(default=None, max_length=500)
    completion_date: date | None = None
    skills: list[str] = Field(default_factory=list, max_length=30)


class PortfolioItemUpdate(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=5000)
    cover_image: str | None = Field(default=None, min_length=1, max_length=500)
    images: list[str] | None = Field(default=None, max_length=20)
    video_url: str | None = Field(default=None, max_length=500)
    link: str | None = Field(default=None, max_length=500)
    completion_date: date | None = None
    skills: list[str] | None = Field(default=None, max_length=30)


class PortfolioItemRead(BaseModel):
    id: int
    freelancer_id: int
    title: str
    slug: str
    description: str
    cover_image: str
    images: list[str]
    video_url: str | None
    link: str | None
    completion_date: date | None
    skills: list[str]
    views: int
    like_count: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LikeState(BaseModel):
    liked: bool
    like_count: int
