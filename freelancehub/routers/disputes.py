"""Dispute endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.dispute import Dispute, DisputeMessage, DisputeStatus
from freelancehub.models.user import UserRole
from freelancehub.schemas.dispute import (
    DisputeCreate,
    DisputeMessageCreate,
    DisputeMessageRead,
    DisputeRead,
    DisputeResolve,
)
from freelancehub.security import Actor, require_actor, require_role
from freelancehub.services import disputes as disputes_service

router = APIRouter(prefix="/disputes", tags=["disputes"])
settings = get_settings()


@router.post("", response_model=DisputeRead, status_code=status.HTTP_201_CREATED)
def open_dispute(
    payload: DisputeCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Dispute:
    return disputes_service.open_dispute(
        db,
        payload.contract_id,
        actor=actor,
        reason=payload.reason,
        evidence=[item.model_dump() for item in payload.evidence],
    )


@router.get("", response_model=list[DisputeRead])
def list_all_disputes(
    dispute_status: DisputeStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> list[Dispute]:
    return disputes_service.list_disputes(db, actor=actor, status=dispute_status, limit=limit, offset=offset)


@router.get("/mine", response_model=list[DisputeRead])
def list_my_disputes(
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Dispute]:
    return disputes_service.list_my_disputes(db, actor=actor, limit=limit, offset=offset)


@router.get("/{dispute_id}", response_model=DisputeRead)
def get_dispute(
    dispute_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Dispute:
    return disputes_service.get_dispute(db, dispute_id, actor=actor)


@router.post(
    "/{dispute_id}/messages",
    response_model=DisputeMessageRead,
    status_code=status.HTTP_201_CREATED,
)
def add_message(
    dispute_id: int,
    payload: DisputeMessageCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> DisputeMessage:
    return disputes_service.add_message(
        db,
        dispute_id,
        actor=actor,
        body=payload.body,
        attachments=[item.model_dump() for item in payload.attachments],
    )


@router.post("/{dispute_id}/review", response_model=DisputeRead)
def start_review(
    dispute_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> Dispute:
    return disputes_service.start_review(db, dispute_id, actor=actor)


@router.post("/{dispute_id}/resolve", response_model=DisputeRead)
def resolve_dispute(
    dispute_id: int,
    payload: DisputeResolve,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> Dispute:
    return disputes_service.resolve_dispute(
        db,
        dispute_id,
        actor=actor,
        decision=payload.decision,
        outcome=payload.outcome,
        contract_action=payload.contract_action,
    )
