"""Interviews on job applications: scheduling, listing and updates.

The hiring company books and edits interviews; the applicant may only cancel.
A closed interview (COMPLETED or CANCELLED) is never written again; every
update is a conditional UPDATE on the live states, so a reschedule racing a
cancel cannot revive the interview.
"""
from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from freelancehub.models.company import Company
from freelancehub.models.interview import (
    LIVE_INTERVIEW_STATES,
    Interview,
    InterviewStatus,
)
from freelancehub.models.job import Application, ApplicationStatus
from freelancehub.schemas.interview import InterviewCreate, InterviewUpdate
from freelancehub.security import Actor
from freelancehub.services.jobs import get_job
from freelancehub.services.notifications import notify
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Forbidden, InvalidArgument, InvalidState, NotFound
from freelancehub.utils.time import utcnow

logger = logging.getLogger(__name__)

# Columns that cannot be cleared by sending ``null``.
_REQUIRED_FIELDS = ("scheduled_at", "duration_minutes", "interview_type")


def _ensure_future(when) -> None:
    if when <= utcnow():
        raise InvalidArgument("Interviews must be scheduled in the future.", code="INTERVIEW_IN_PAST")


def _company_owner_id(db: Session, company_id: int) -> int | None:
    return db.scalar(select(Company.owner_id).where(Company.id == company_id))


def schedule_interview(db: Session, payload: InterviewCreate, *, actor: Actor) -> Interview:
    """Book an interview for an application on one of the caller's jobs.

    A PENDING application moves to REVIEWING; a rejected one cannot be
    interviewed.
    """

    application = db.get(Application, payload.application_id)
    if application is None:
        raise NotFound("Application not found.", code="APPLICATION_NOT_FOUND")
    job = get_job(db, application.job_id)
    company = db.get(Company, job.company_id)
    if company is None or company.owner_id != actor.user_id:
        raise Forbidden("Only the hiring company can schedule interviews.", code="NOT_JOB_OWNER")
    if application.status == ApplicationStatus.REJECTED:
        raise InvalidState("This application was rejected.", code="APPLICATION_CLOSED")
    _ensure_future(payload.scheduled_at)

    interview = Interview(
        application_id=application.id,
        job_id=job.id,
        company_id=company.id,
        applicant_id=application.user_id,
        interview_type=payload.interview_type,
        scheduled_at=payload.scheduled_at,
        duration_minutes=payload.duration_minutes,
        location=payload.location,
        meeting_link=payload.meeting_link,
        notes=payload.notes,
        status=InterviewStatus.SCHEDULED,
    )
    db.add(interview)
    if application.status == ApplicationStatus.PENDING:
        application.status = ApplicationStatus.REVIEWING
    db.flush()
    log_audit(
        db,
        actor=actor.label,
        action="INTERVIEW_SCHEDULED",
        entity="Interview",
        entity_id=interview.id,
        data={
            "application_id": application.id,
            "job_id": job.id,
            "scheduled_at": payload.scheduled_at.isoformat(),
        },
    )
    db.commit()
    db.refresh(interview)
    logger.info("Interview scheduled", extra={"interview_id": interview.id, "job_id": job.id})

    notify(
        db,
        application.user_id,
        "INTERVIEW_SCHEDULED",
        "Interview invitation",
        f'{company.name} invited you to an interview for "{job.title}" on '
        f"{payload.scheduled_at:%Y-%m-%d %H:%M} UTC.",
        f"/interviews/{interview.id}",
    )
    return interview


def get_interview(db: Session, interview_id: int, *, actor: Actor) -> Interview:
    interview = db.get(Interview, interview_id)
    if interview is None:
        raise NotFound("Interview not found.", code="INTERVIEW_NOT_FOUND")
    parties = (interview.applicant_id, _company_owner_id(db, interview.company_id))
    if actor.user_id not in parties and not actor.is_admin:
        raise Forbidden("You are not part of this interview.", code="NOT_INTERVIEW_PARTY")
    return interview


def list_interviews(
    db: Session,
    *,
    actor: Actor,
    status: InterviewStatus | None = None,
    upcoming: bool = False,
) -> list[Interview]:
    """Interviews the caller hosts (as company owner) or attends, soonest first."""

    owned = select(Company.id).where(Company.owner_id == actor.user_id)
    stmt = select(Interview).where(
        or_(Interview.company_id.in_(owned), Interview.applicant_id == actor.user_id)
    )
    if status is not None:
        stmt = stmt.where(Interview.status == status)
    if upcoming:
        stmt = stmt.where(Interview.scheduled_at >= utcnow(), Interview.status.in_(LIVE_INTERVIEW_STATES))
    stmt = stmt.order_by(Interview.scheduled_at, Interview.id)
    return list(db.scalars(stmt))


def _resolve_target(interview: Interview, changes: dict, *, is_host: bool) -> InterviewStatus:
    target = changes.pop("status", None)
    if not is_host:
        if target != InterviewStatus.CANCELLED or changes:
            raise Forbidden("Applicants can only cancel an interview.", code="APPLICANT_MAY_ONLY_CANCEL")
        return target

    for field in _REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise InvalidArgument(f"{field} cannot be cleared.", code="FIELD_REQUIRED")
    if target == InterviewStatus.SCHEDULED:
        raise InvalidArgument("An interview cannot be moved back to SCHEDULED.", code="INVALID_INTERVIEW_STATUS")

    if "scheduled_at" in changes:
        if target in (InterviewStatus.COMPLETED, InterviewStatus.CANCELLED):
            raise InvalidArgument("A closed interview cannot get a new time.", code="INVALID_INTERVIEW_STATUS")
        _ensure_future(changes["scheduled_at"])
        return InterviewStatus.RESCHEDULED
    if target == InterviewStatus.RESCHEDULED:
        raise InvalidArgument("Rescheduling needs a new scheduled_at.", code="INVALID_INTERVIEW_STATUS")
    return target or interview.status


def update_interview(db: Session, interview_id: int, payload: InterviewUpdate, *, actor: Actor) -> Interview:
    interview = db.get(Interview, interview_id)
    if interview is None:
        raise NotFound("Interview not found.", code="INTERVIEW_NOT_FOUND")
    host_id = _company_owner_id(db, interview.company_id)
    is_host = actor.user_id == host_id
    if not is_host and actor.user_id != interview.applicant_id:
        raise Forbidden("You are not part of this interview.", code="NOT_INTERVIEW_PARTY")

    changes = payload.model_dump(exclude_unset=True)
    if not changes:
        raise InvalidArgument("Nothing to update.", code="NOTHING_TO_UPDATE")
    target = _resolve_target(interview, changes, is_host=is_host)

    previous = interview.status
    result = db.execute(
        update(Interview)
        .where(Interview.id == interview.id, Interview.status.in_(LIVE_INTERVIEW_STATES))
        .values(status=target, updated_at=utcnow(), **changes)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.info("Interview update lost", extra={"interview_id": interview_id})
        raise InvalidState("This interview is already closed.", code="INTERVIEW_CLOSED")

    log_audit(
        db,
        actor=actor.label,
        action=f"INTERVIEW_{target.value}" if target != previous else "INTERVIEW_UPDATED",
        entity="Interview",
        entity_id=interview.id,
        data={
            "from": previous.value,
            "to": target.value,
            "fields": sorted(changes),
        },
    )
    db.commit()
    db.refresh(interview)
    logger.info("Interview updated", extra={"interview_id": interview.id, "status": target.value})

    recipient = interview.applicant_id if is_host else host_id
    if recipient is not None:
        job = get_job(db, interview.job_id)
        notify(
            db,
            recipient,
            "INTERVIEW_CANCELLED" if target == InterviewStatus.CANCELLED else "INTERVIEW_UPDATED",
            "Interview update",
            f'The interview for "{job.title}" is now {target.value.lower()}.',
            f"/interviews/{interview.id}",
        )
    return interview


__all__ = [
    "schedule_interview",
    "get_interview",
    "list_interviews",
    "update_interview",
]
