"""Project endpoints."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.project import Project, ProjectCategory, ProjectStatus
from freelancehub.models.proposal import Proposal
from freelancehub.schemas.project import ProjectCreate, ProjectRead, ProjectUpdate
from freelancehub.schemas.proposal import ProposalRead
from freelancehub.security import Actor, require_actor
from freelancehub.services import projects as projects_service
from freelancehub.services import proposals as proposals_service

router = APIRouter(prefix="/projects", tags=["projects"])
settings = get_settings()


@router.post("", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Project:
    return projects_service.create_project(db, payload, actor=actor)


@router.get("", response_model=list[ProjectRead])
def list_open_projects(
    category: ProjectCategory | None = None,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Project]:
    return projects_service.list_open_projects(db, category=category, limit=limit, offset=offset)


@router.get("/mine", response_model=list[ProjectRead])
def list_my_projects(
    project_status: ProjectStatus | None = Query(default=None, alias="status"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Project]:
    return projects_service.list_client_projects(
        db, actor.user_id, status=project_status, limit=limit, offset=offset
    )


@router.get("/{project_id}", response_model=ProjectRead)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Project:
    return projects_service.get_project(db, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
def update_project(
    project_id: int,
    payload: ProjectUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Project:
    return projects_service.update_project(db, project_id, payload, actor=actor)


@router.post("/{project_id}/cancel", response_model=ProjectRead)
def cancel_project(
    project_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Project:
    return projects_service.cancel_project(db, project_id, actor=actor)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Response:
    projects_service.delete_project(db, project_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/proposals", response_model=list[ProposalRead])
def list_project_proposals(
    project_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Proposal]:
    return proposals_service.list_project_proposals(db, project_id, actor=actor)
