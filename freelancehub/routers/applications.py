"""Job application endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from freelancehub.db import get_db
from freelancehub.models.job import Application
from freelancehub.schemas.job import ApplicationCreate, ApplicationRead, ApplicationStatusUpdate
from freelancehub.security import Actor, require_actor
from freelancehub.services import jobs as jobs_service

router = APIRouter(prefix="/applications", tags=["applications"])


@router.post("", response_model=ApplicationRead, status_code=status.HTTP_201_CREATED)
def apply(
    payload: ApplicationCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Application:
    return jobs_service.apply(db, payload, actor=actor)


@router.get("/mine", response_model=list[ApplicationRead])
def list_my_applications(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Application]:
    return jobs_service.list_my_applications(db, actor=actor)


@router.post("/{application_id}/status", response_model=ApplicationRead)
def set_application_status(
    application_id: int,
    payload: ApplicationStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Application:
    return jobs_service.set_application_status(db, application_id, payload.status, actor=actor)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def withdraw_application(
    application_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Response:
    jobs_service.withdraw_application(db, application_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
