"""Job board: postings by companies and applications by users."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.company import Company, CompanyStatus
from freelancehub.models.job import Application, ApplicationStatus, Job, JobStatus, SavedJob
from freelancehub.schemas.job import ApplicationCreate, JobCreate
from freelancehub.security import Actor
from freelancehub.services import counters
from freelancehub.services.companies import get_owned_company
from freelancehub.services.notifications import notify
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, Forbidden, InvalidState, NotFound

logger = logging.getLogger(__name__)


def get_job(db: Session, job_id: int) -> Job:
    job = db.get(Job, job_id)
    if job is None:
        raise NotFound("Job not found.", code="JOB_NOT_FOUND")
    return job


def _job_owner_id(db: Session, job: Job) -> int:
    company = db.get(Company, job.company_id)
    return company.owner_id if company is not None else 0


def create_job(db: Session, payload: JobCreate, *, actor: Actor) -> Job:
    company = get_owned_company(db, actor=actor)
    if company.status != CompanyStatus.APPROVED:
        raise InvalidState("Your company must be approved before posting jobs.", code="COMPANY_NOT_APPROVED")

    job = Job(
        company_id=company.id,
        title=payload.title,
        description=payload.description,
        location=payload.location,
        job_type=payload.job_type,
        status=JobStatus.PENDING,
        application_count=0,
    )
    db.add(job)
    db.flush()
    log_audit(
        db,
        actor=actor.label,
        action="JOB_CREATED",
        entity="Job",
        entity_id=job.id,
        data={"company_id": company.id, "title": job.title},
    )
    db.commit()
    db.refresh(job)
    logger.info("Job posted", extra={"job_id": job.id, "company_id": company.id})
    return job


def set_job_status(db: Session, job_id: int, status: JobStatus, *, actor: Actor) -> Job:
    """Admins approve or reject postings; the owning company may close its own job."""

    job = get_job(db, job_id)
    is_owner = _job_owner_id(db, job) == actor.user_id
    if not actor.is_admin and not (is_owner and status == JobStatus.CLOSED):
        raise Forbidden("You cannot change this job's status.", code="JOB_STATUS_FORBIDDEN")
    if job.status == JobStatus.CLOSED:
        raise InvalidState("Closed jobs cannot change status.", code="JOB_CLOSED")

    previous = job.status
    job.status = status
    log_audit(
        db,
        actor=actor.label,
        action="JOB_STATUS_CHANGED",
        entity="Job",
        entity_id=job.id,
        data={"from": previous.value, "to": status.value},
    )
    db.commit()
    db.refresh(job)
    return job


def list_jobs(
    db: Session,
    *,
    company_id: int | None = None,
    status: JobStatus | None = JobStatus.APPROVED,
    limit: int = 20,
    offset: int = 0,
) -> list[Job]:
    stmt = select(Job)
    if status is not None:
        stmt = stmt.where(Job.status == status)
    if company_id is not None:
        stmt = stmt.where(Job.company_id == company_id)
    stmt = stmt.order_by(Job.created_at.desc(), Job.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def apply(db: Session, payload: ApplicationCreate, *, actor: Actor) -> Application:
    job = get_job(db, payload.job_id)
    if job.status != JobStatus.APPROVED:
        raise InvalidState("This job is not accepting applications.", code="JOB_NOT_OPEN")
    owner_id = _job_owner_id(db, job)
    if owner_id == actor.user_id:
        raise Forbidden("You cannot apply to your own job.", code="OWN_JOB")
    existing = db.scalar(
        select(Application.id).where(Application.job_id == job.id, Application.user_id == actor.user_id)
    )
    if existing is not None:
        raise Conflict("You have already applied to this job.", code="APPLICATION_EXISTS")

    application = Application(
        job_id=job.id,
        user_id=actor.user_id,
        cv_url=payload.cv_url,
        cover_letter=payload.cover_letter,
        status=ApplicationStatus.PENDING,
    )
    db.add(application)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("You have already applied to this job.", code="APPLICATION_EXISTS") from exc
    counters.sync_job_application_count(db, job.id)
    log_audit(
        db,
        actor=actor.label,
        action="APPLICATION_SUBMITTED",
        entity="Application",
        entity_id=application.id,
        data={"job_id": job.id, "url": application.cv_url},
    )
    db.commit()
    db.refresh(application)

    notify(
        db,
        owner_id,
        "APPLICATION_RECEIVED",
        "New application",
        f'A new application was submitted for "{job.title}".',
        f"/jobs/{job.id}",
    )
    return application


def _get_application(db: Session, application_id: int) -> Application:
    application = db.get(Application, application_id)
    if application is None:
        raise NotFound("Application not found.", code="APPLICATION_NOT_FOUND")
    return application


def withdraw_application(db: Session, application_id: int, *, actor: Actor) -> None:
    application = _get_application(db, application_id)
    if application.user_id != actor.user_id:
        raise Forbidden("Only the applicant can withdraw an application.", code="NOT_APPLICANT")
    if application.status != ApplicationStatus.PENDING:
        raise InvalidState("Only pending applications can be withdrawn.", code="APPLICATION_NOT_PENDING")

    job_id = application.job_id
    db.delete(application)
    db.flush()
    counters.sync_job_application_count(db, job_id)
    log_audit(
        db,
        actor=actor.label,
        action="APPLICATION_WITHDRAWN",
        entity="Application",
        entity_id=application_id,
        data={"job_id": job_id},
    )
    db.commit()


def set_application_status(
    db: Session, application_id: int, status: ApplicationStatus, *, actor: Actor
) -> Application:
    application = _get_application(db, application_id)
    job = get_job(db, application.job_id)
    if _job_owner_id(db, job) != actor.user_id and not actor.is_admin:
        raise Forbidden("Only the hiring company can review applications.", code="NOT_JOB_OWNER")

    application.status = status
    log_audit(
        db,
        actor=actor.label,
        action="APPLICATION_STATUS_CHANGED",
        entity="Application",
        entity_id=application.id,
        data={"status": status.value},
    )
    db.commit()
    db.refresh(application)
    notify(
        db,
        application.user_id,
        "APPLICATION_STATUS_CHANGED",
        "Application update",
        f'Your application for "{job.title}" is now {status.value.lower()}.',
        f"/jobs/{job.id}",
    )
    return application


def list_job_applications(db: Session, job_id: int, *, actor: Actor) -> list[Application]:
    job = get_job(db, job_id)
    if _job_owner_id(db, job) != actor.user_id and not actor.is_admin:
        raise Forbidden("Only the hiring company can list applications.", code="NOT_JOB_OWNER")
    stmt = select(Application).where(Application.job_id == job.id).order_by(Application.created_at, Application.id)
    return list(db.scalars(stmt))


def list_my_applications(db: Session, *, actor: Actor) -> list[Application]:
    stmt = (
        select(Application)
        .where(Application.user_id == actor.user_id)
        .order_by(Application.created_at.desc(), Application.id.desc())
    )
    return list(db.scalars(stmt))



def save_job(db: Session, job_id: int, *, actor: Actor) -> SavedJob:
    job = get_job(db, job_id)
    saved = SavedJob(user_id=actor.user_id, job_id=job.id)
    db.add(saved)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("This job is already saved.", code="JOB_ALREADY_SAVED") from exc
    db.commit()
    db.refresh(saved)
    return saved


def list_saved_jobs(db: Session, *, actor: Actor) -> list[SavedJob]:
    stmt = (
        select(SavedJob)
        .where(SavedJob.user_id == actor.user_id)
        .order_by(SavedJob.created_at.desc(), SavedJob.id.desc())
    )
    return list(db.scalars(stmt))


def unsave_job(db: Session, saved_job_id: int, *, actor: Actor) -> None:
    """Remove one of the caller's bookmarks; other users' ids read as missing."""

    result = db.execute(
        delete(SavedJob)
        .where(SavedJob.id == saved_job_id, SavedJob.user_id == actor.user_id)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise NotFound("Saved job not found.", code="SAVED_JOB_NOT_FOUND")
    db.commit()


__all__ = [
    "get_job",
    "create_job",
    "set_job_status",
    "list_jobs",
    "apply",
    "withdraw_application",
    "set_application_status",
    "list_job_applications",
    "list_my_applications",
    "save_job",
    "list_saved_jobs",
    "unsave_job",
]
