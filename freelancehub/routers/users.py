"""User endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.db import get_db
from freelancehub.models.job import SavedJob
from freelancehub.models.user import User, UserRole
from freelancehub.schemas.job import SavedJobCreate, SavedJobRead
from freelancehub.schemas.user import UserCreate, UserMe, UserRead
from freelancehub.security import Actor, require_actor, require_role
from freelancehub.services import jobs as jobs_service
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, NotFound

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> User:
    """Create a new account; credentials are issued through ``/apikeys``."""

    user = User(**payload.model_dump())
    db.add(user)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Username or email already in use.", code="USER_EXISTS") from exc

    log_audit(
        db,
        actor=actor.label,
        action="CREATE_USER",
        entity="User",
        entity_id=user.id,
        data={"username": user.username, "email": user.email, "role": user.role.value},
    )
    db.commit()
    db.refresh(user)
    return user


@router.get("/me", response_model=UserMe)
def read_me(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> User:
    user = db.get(User, actor.user_id)
    if user is None:
        raise NotFound("User not found.", code="USER_NOT_FOUND")
    return user


@router.get("/me/saved-jobs", response_model=list[SavedJobRead])
def list_saved_jobs(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[SavedJob]:
    return jobs_service.list_saved_jobs(db, actor=actor)


@router.post("/me/saved-jobs", response_model=SavedJobRead, status_code=status.HTTP_201_CREATED)
def save_job(
    payload: SavedJobCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> SavedJob:
    return jobs_service.save_job(db, payload.job_id, actor=actor)


@router.delete("/me/saved-jobs/{saved_job_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def unsave_job(
    saved_job_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Response:
    jobs_service.unsave_job(db, saved_job_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFound("User not found.", code="USER_NOT_FOUND")
    return user
