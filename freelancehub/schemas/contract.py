"""Contract and milestone schemas."""
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from freelancehub.models.contract import ContractStatus, MilestoneStatus
from freelancehub.schemas.common import Attachment


class MilestoneSpec(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    amount: Decimal
    description: str | None = Field(default=None, max_length=1000)
    due_date: datetime | None = None


class ContractCreate(BaseModel):
    proposal_id: int
    milestones: list[MilestoneSpec] | None = None


class MilestoneTransition(BaseModel):
    """Body of ``PATCH /contracts/{id}/milestones/{idx}``."""

    status: Literal["IN_PROGRESS", "SUBMITTED", "APPROVED", "REVISION_REQUESTED", "PAID"]
    deliverables: list[Attachment] | None = None


class MilestoneRead(BaseModel):
    id: int
    idx: int
    title: str
    description: str | None
    amount: Decimal
    due_date: datetime | None
    status: MilestoneStatus
    deliverables: list[Attachment]
    submitted_at: datetime | None
    approved_at: datetime | None
    paid_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


class ContractRead(BaseModel):
    id: int
    project_id: int
    proposal_id: int
    client_id: int
    freelancer_id: int
    title: str
    description: str | None
    total_amount: Decimal
    status: ContractStatus
    start_date: datetime
    end_date: datetime | None
    progress: int
    milestones: list[MilestoneRead]

    model_config = ConfigDict(from_attributes=True)


class ContractEventRead(BaseModel):
    """One audit row on a contract's history."""

    id: int
    at: datetime
    actor: str
    actor_user_id: int | None
    action: str
    entity: str
    entity_id: int
    data: dict = Field(validation_alias="data_json")

    model_config = ConfigDict(from_attributes=True)
