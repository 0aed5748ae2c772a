"""Proposal schemas."""
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from freelancehub.models.project import Duration
from freelancehub.models.proposal import ProposalStatus
from freelancehub.schemas.common import Attachment


class ProposalCreate(BaseModel):
    project_id: int
    cover_letter: str = Field(..., min_length=1, max_length=5000)
    bid_amount: Decimal
    estimated_duration: Duration
    attachments: list[Attachment] = Field(default_factory=list)


class ProposalRead(BaseModel):
    id: int
    project_id: int
    freelancer_id: int
    cover_letter: str
    bid_amount: Decimal
    estimated_duration: Duration
    status: ProposalStatus
    attachments: list[Attachment]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
