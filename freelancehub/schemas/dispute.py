"""Dispute schemas."""
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from freelancehub.models.dispute import DisputeStatus
from freelancehub.schemas.common import Attachment


class DisputeCreate(BaseModel):
    contract_id: int
    reason: str = Field(..., min_length=1, max_length=2000)
    evidence: list[Attachment] = Field(default_factory=list)


class DisputeMessageCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=2000)
    attachments: list[Attachment] = Field(default_factory=list)


class DisputeResolve(BaseModel):
    decision: str = Field(..., min_length=1, max_length=2000)
    outcome: Literal["RESOLVED", "REJECTED"]
    contract_action: Literal["RESUME", "CANCEL"] = "RESUME"


class DisputeMessageRead(BaseModel):
    id: int
    sender_id: int
    body: str
    attachments: list[Attachment]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DisputeRead(BaseModel):
    id: int
    contract_id: int
    initiator_id: int
    defendant_id: int
    reason: str
    evidence: list[Attachment]
    status: DisputeStatus
    decision: str | None
    decided_by_id: int | None
    decided_at: datetime | None
    messages: list[DisputeMessageRead]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
