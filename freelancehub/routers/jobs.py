"""Job board endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.job import Application, Job, JobStatus
from freelancehub.models.user import UserRole
from freelancehub.schemas.job import ApplicationRead, JobCreate, JobRead, JobStatusUpdate
from freelancehub.security import Actor, require_actor, require_role
from freelancehub.services import jobs as jobs_service

router = APIRouter(prefix="/jobs", tags=["jobs"])
settings = get_settings()


@router.post("", response_model=JobRead, status_code=status.HTTP_201_CREATED)
def create_job(
    payload: JobCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.COMPANY})),
) -> Job:
    return jobs_service.create_job(db, payload, actor=actor)


@router.get("", response_model=list[JobRead])
def list_jobs(
    company_id: int | None = None,
    job_status: JobStatus | None = Query(default=JobStatus.APPROVED, alias="status"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Job]:
    return jobs_service.list_jobs(db, company_id=company_id, status=job_status, limit=limit, offset=offset)


@router.get("/{job_id}", response_model=JobRead)
def get_job(
    job_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Job:
    return jobs_service.get_job(db, job_id)


@router.post("/{job_id}/status", response_model=JobRead)
def set_job_status(
    job_id: int,
    payload: JobStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Job:
    return jobs_service.set_job_status(db, job_id, payload.status, actor=actor)


@router.get("/{job_id}/applications", response_model=list[ApplicationRead])
def list_job_applications(
    job_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Application]:
    return jobs_service.list_job_applications(db, job_id, actor=actor)
