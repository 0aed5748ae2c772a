"""Denormalized counter maintenance.

Counters are always recomputed from the live rows rather than incremented,
so a pass of :func:`resync_all` repairs any drift.
"""
from __future__ import annotations

import logging

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from freelancehub.models.contract import Contract, ContractStatus
from freelancehub.models.freelancer_profile import FreelancerProfile
from freelancehub.models.job import Application, Job
from freelancehub.models.project import Project, ProjectStatus
from freelancehub.models.proposal import Proposal, ProposalStatus

logger = logging.getLogger(__name__)


def _count_contracts(db: Session, freelancer_id: int, status: ContractStatus) -> int:
    stmt = select(func.count(Contract.id)).where(
        Contract.freelancer_id == freelancer_id, Contract.status == status
    )
    return int(db.scalar(stmt) or 0)


def compute_success_rate(completed: int, cancelled: int) -> float:
    """Share of finished contracts that completed, as a percentage."""

    finished = completed + cancelled
    if finished == 0:
        return 0.0
    return round(100.0 * completed / finished, 1)


def sync_project_proposal_count(db: Session, project_id: int, *, open_only: bool = False) -> bool:
    """Set ``proposal_count`` to the number of non-withdrawn proposals.

    With ``open_only`` the row is only touched while the project is OPEN;
    the return value tells whether it was.
    """

    live = (
        select(func.count(Proposal.id))
        .where(Proposal.project_id == project_id, Proposal.status != ProposalStatus.WITHDRAWN)
        .scalar_subquery()
    )
    stmt = update(Project).where(Project.id == project_id)
    if open_only:
        stmt = stmt.where(Project.status == ProjectStatus.OPEN)
    result = db.execute(stmt.values(proposal_count=live).execution_options(synchronize_session="fetch"))
    return result.rowcount == 1


def sync_job_application_count(db: Session, job_id: int) -> None:
    total = select(func.count(Application.id)).where(Application.job_id == job_id).scalar_subquery()
    db.execute(
        update(Job)
        .where(Job.id == job_id)
        .values(application_count=total)
        .execution_options(synchronize_session="fetch")
    )


def refresh_success_rate(db: Session, profile: FreelancerProfile) -> None:
    completed = _count_contracts(db, profile.user_id, ContractStatus.COMPLETED)
    cancelled = _count_contracts(db, profile.user_id, ContractStatus.CANCELLED)
    profile.success_rate = compute_success_rate(completed, cancelled)


def recount_completed_projects(db: Session, freelancer_id: int) -> FreelancerProfile | None:
    """Repair ``completed_projects`` and ``success_rate`` from contract rows."""

    profile = db.scalars(
        select(FreelancerProfile).where(FreelancerProfile.user_id == freelancer_id).with_for_update()
    ).first()
    if profile is None:
        return None
    profile.completed_projects = _count_contracts(db, freelancer_id, ContractStatus.COMPLETED)
    refresh_success_rate(db, profile)
    return profile


def resync_all(db: Session) -> dict[str, int]:
    """Recompute every cached counter; returns how many rows were visited."""

    project_ids = list(db.scalars(select(Project.id)))
    for project_id in project_ids:
        sync_project_proposal_count(db, project_id)

    job_ids = list(db.scalars(select(Job.id)))
    for job_id in job_ids:
        sync_job_application_count(db, job_id)

    freelancer_ids = list(db.scalars(select(FreelancerProfile.user_id)))
    for freelancer_id in freelancer_ids:
        recount_completed_projects(db, freelancer_id)

    db.commit()
    summary = {"projects": len(project_ids), "jobs": len(job_ids), "profiles": len(freelancer_ids)}
    logger.info("Counters resynchronised", extra=summary)
    return summary


__all__ = [
    "compute_success_rate",
    "sync_project_proposal_count",
    "sync_job_application_count",
    "refresh_success_rate",
    "recount_completed_projects",
    "resync_all",
]
