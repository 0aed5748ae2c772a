"""Contract and milestone endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.contract import Contract, ContractStatus, MilestoneStatus
from freelancehub.models.audit import AuditLog
from freelancehub.schemas.contract import (
    ContractCreate,
    ContractEventRead,
    ContractRead,
    MilestoneSpec,
    MilestoneTransition,
)
from freelancehub.security import Actor, require_actor
from freelancehub.services import contracts as contracts_service

router = APIRouter(prefix="/contracts", tags=["contracts"])
settings = get_settings()


@router.post("", response_model=ContractRead, status_code=status.HTTP_201_CREATED)
def create_contract(
    payload: ContractCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Contract:
    return contracts_service.create_contract(
        db, payload.proposal_id, actor=actor, milestones=payload.milestones
    )


@router.get("", response_model=list[ContractRead])
def list_contracts(
    contract_status: ContractStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Contract]:
    return contracts_service.list_contracts(
        db, actor=actor, status=contract_status, limit=limit, offset=offset
    )


@router.get("/{contract_id}", response_model=ContractRead)
def get_contract(
    contract_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Contract:
    return contracts_service.get_contract(db, contract_id, actor=actor)


@router.post(
    "/{contract_id}/milestones",
    response_model=ContractRead,
    status_code=status.HTTP_201_CREATED,
)
def add_milestone(
    contract_id: int,
    payload: MilestoneSpec,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Contract:
    return contracts_service.add_milestone(db, contract_id, payload, actor=actor)


@router.patch("/{contract_id}/milestones/{idx}", response_model=ContractRead)
def update_milestone(
    contract_id: int,
    idx: int,
    payload: MilestoneTransition,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Contract:
    deliverables = [item.model_dump() for item in payload.deliverables] if payload.deliverables is not None else None
    return contracts_service.update_milestone_status(
        db,
        contract_id,
        idx,
        MilestoneStatus(payload.status),
        actor=actor,
        deliverables=deliverables,
    )


@router.get("/{contract_id}/history", response_model=list[ContractEventRead])
def contract_history(
    contract_id: int,
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[AuditLog]:
    return contracts_service.contract_history(db, contract_id, actor=actor, limit=limit)
