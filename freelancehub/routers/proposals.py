"""Proposal endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.proposal import Proposal, ProposalStatus
from freelancehub.schemas.proposal import ProposalCreate, ProposalRead
from freelancehub.security import Actor, require_actor
from freelancehub.services import proposals as proposals_service

router = APIRouter(prefix="/proposals", tags=["proposals"])
settings = get_settings()


@router.post("", response_model=ProposalRead, status_code=status.HTTP_201_CREATED)
def submit_proposal(
    payload: ProposalCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Proposal:
    return proposals_service.submit_proposal(db, payload, actor=actor)


@router.get("/mine", response_model=list[ProposalRead])
def list_my_proposals(
    proposal_status: ProposalStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Proposal]:
    return proposals_service.list_my_proposals(
        db, actor=actor, status=proposal_status, limit=limit, offset=offset
    )


@router.get("/{proposal_id}", response_model=ProposalRead)
def get_proposal(
    proposal_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Proposal:
    return proposals_service.get_visible_proposal(db, proposal_id, actor=actor)


@router.post("/{proposal_id}/accept", response_model=ProposalRead)
def accept_proposal(
    proposal_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Proposal:
    return proposals_service.accept_proposal(db, proposal_id, actor=actor)


@router.post("/{proposal_id}/reject", response_model=ProposalRead)
def reject_proposal(
    proposal_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Proposal:
    return proposals_service.reject_proposal(db, proposal_id, actor=actor)


@router.post("/{proposal_id}/withdraw", response_model=ProposalRead)
def withdraw_proposal(
    proposal_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Proposal:
    return proposals_service.withdraw_proposal(db, proposal_id, actor=actor)
