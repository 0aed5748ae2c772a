"""Interview endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from freelancehub.db import get_db
from freelancehub.models.interview import Interview, InterviewStatus
from freelancehub.models.user import UserRole
from freelancehub.schemas.interview import InterviewCreate, InterviewRead, InterviewUpdate
from freelancehub.security import Actor, require_actor, require_role
from freelancehub.services import interviews as interviews_service

router = APIRouter(prefix="/interviews", tags=["interviews"])


@router.post("", response_model=InterviewRead, status_code=status.HTTP_201_CREATED)
def schedule_interview(
    payload: InterviewCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.COMPANY})),
) -> Interview:
    return interviews_service.schedule_interview(db, payload, actor=actor)


@router.get("", response_model=list[InterviewRead])
def list_interviews(
    interview_status: InterviewStatus | None = Query(default=None, alias="status"),
    upcoming: bool = False,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Interview]:
    return interviews_service.list_interviews(db, actor=actor, status=interview_status, upcoming=upcoming)


@router.get("/{interview_id}", response_model=InterviewRead)
def get_interview(
    interview_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Interview:
    return interviews_service.get_interview(db, interview_id, actor=actor)


@router.patch("/{interview_id}", response_model=InterviewRead)
def update_interview(
    interview_id: int,
    payload: InterviewUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Interview:
    return interviews_service.update_interview(db, interview_id, payload, actor=actor)
