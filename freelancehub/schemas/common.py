"""Shared schema fragments."""
from pydantic import BaseModel, Field


class Attachment(BaseModel):
    """Opaque file reference; the backend never fetches the URL."""

    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., min_length=1, max_length=500)
