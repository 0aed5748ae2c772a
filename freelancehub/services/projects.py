"""Project posting services."""
from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from freelancehub.models.company import Company
from freelancehub.models.project import Project, ProjectCategory, ProjectStatus
from freelancehub.models.proposal import Proposal, ProposalStatus
from freelancehub.schemas.project import ProjectCreate, ProjectUpdate
from freelancehub.security import Actor
from freelancehub.services.notifications import notify
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Forbidden, InvalidArgument, InvalidState, NotFound
from freelancehub.utils.money import to_decimal
from freelancehub.utils.time import utcnow

logger = logging.getLogger(__name__)


def get_project(db: Session, project_id: int) -> Project:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found.", code="PROJECT_NOT_FOUND")
    return project


def _owned_project(db: Session, project_id: int, actor: Actor) -> Project:
    project = get_project(db, project_id)
    if project.client_id != actor.user_id and not actor.is_admin:
        raise Forbidden("Only the project owner can manage this project.", code="NOT_PROJECT_OWNER")
    return project


def _money_or_none(value):
    return to_decimal(value) if value is not None else None


def create_project(db: Session, payload: ProjectCreate, *, actor: Actor) -> Project:
    if payload.company_id is not None:
        company = db.get(Company, payload.company_id)
        if company is None:
            raise NotFound("Company not found.", code="COMPANY_NOT_FOUND")
        if company.owner_id != actor.user_id:
            raise Forbidden("Projects can only be posted for your own company.", code="NOT_COMPANY_OWNER")

    project = Project(
        title=payload.title,
        description=payload.description,
        category=payload.category,
        skills=list(payload.skills),
        budget_type=payload.budget_type,
        budget_min=_money_or_none(payload.budget_min),
        budget_max=_money_or_none(payload.budget_max),
        duration=payload.duration,
        experience_level=payload.experience_level,
        deadline=payload.deadline,
        company_id=payload.company_id,
        attachments=[item.model_dump() for item in payload.attachments],
        client_id=actor.user_id,
        status=ProjectStatus.OPEN,
        proposal_count=0,
    )
    db.add(project)
    db.flush()
    log_audit(
        db,
        actor=actor.label,
        action="PROJECT_CREATED",
        entity="Project",
        entity_id=project.id,
        data={"title": project.title, "category": project.category.value},
    )
    db.commit()
    db.refresh(project)
    logger.info("Project created", extra={"project_id": project.id, "client_id": actor.user_id})
    return project


def update_project(db: Session, project_id: int, payload: ProjectUpdate, *, actor: Actor) -> Project:
    project = _owned_project(db, project_id, actor)
    if project.status != ProjectStatus.OPEN:
        raise InvalidState("Only open projects can be edited.", code="PROJECT_NOT_OPEN")

    changes = payload.model_dump(exclude_unset=True)
    for money_field in ("budget_min", "budget_max"):
        if money_field in changes:
            changes[money_field] = _money_or_none(changes[money_field])
    if "attachments" in changes:
        changes["attachments"] = list(changes["attachments"] or [])
    for field, value in changes.items():
        setattr(project, field, value)

    if project.budget_min is not None and project.budget_max is not None and project.budget_min > project.budget_max:
        db.rollback()
        raise InvalidArgument("budget_min cannot exceed budget_max.", code="INVALID_BUDGET")

    log_audit(
        db,
        actor=actor.label,
        action="PROJECT_UPDATED",
        entity="Project",
        entity_id=project.id,
        data={"fields": sorted(changes)},
    )
    db.commit()
    db.refresh(project)
    return project


def cancel_project(db: Session, project_id: int, *, actor: Actor) -> Project:
    """Cancel an OPEN project and reject its pending proposals."""

    project = _owned_project(db, project_id, actor)
    result = db.execute(
        update(Project)
        .where(Project.id == project.id, Project.status == ProjectStatus.OPEN)
        .values(status=ProjectStatus.CANCELLED, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidState("Only open projects can be cancelled.", code="PROJECT_NOT_OPEN")

    pending = list(
        db.scalars(
            select(Proposal).where(Proposal.project_id == project.id, Proposal.status == ProposalStatus.PENDING)
        )
    )
    for proposal in pending:
        proposal.status = ProposalStatus.REJECTED
    log_audit(
        db,
        actor=actor.label,
        action="PROJECT_CANCELLED",
        entity="Project",
        entity_id=project.id,
        data={"rejected_proposals": [p.id for p in pending]},
    )
    db.commit()
    db.refresh(project)

    for proposal in pending:
        notify(
            db,
            proposal.freelancer_id,
            "PROJECT_CANCELLED",
            "Project cancelled",
            f'The project "{project.title}" was cancelled by its owner.',
            f"/projects/{project.id}",
        )
    return project


def delete_project(db: Session, project_id: int, *, actor: Actor) -> None:
    """Delete an OPEN project; its proposals go with it."""

    project = _owned_project(db, project_id, actor)
    result = db.execute(
        delete(Project)
        .where(Project.id == project.id, Project.status == ProjectStatus.OPEN)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidState("Only open projects can be deleted.", code="PROJECT_NOT_OPEN")
    log_audit(db, actor=actor.label, action="PROJECT_DELETED", entity="Project", entity_id=project_id)
    db.commit()
    db.expunge_all()
    logger.info("Project deleted", extra={"project_id": project_id})


def list_open_projects(
    db: Session,
    *,
    category: ProjectCategory | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Project]:
    stmt = select(Project).where(Project.status == ProjectStatus.OPEN)
    if category is not None:
        stmt = stmt.where(Project.category == category)
    stmt = stmt.order_by(Project.created_at.desc(), Project.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def list_client_projects(
    db: Session,
    client_id: int,
    *,
    status: ProjectStatus | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Project]:
    stmt = select(Project).where(Project.client_id == client_id)
    if status is not None:
        stmt = stmt.where(Project.status == status)
    stmt = stmt.order_by(Project.created_at.desc(), Project.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


__all__ = [
    "get_project",
    "create_project",
    "update_project",
    "cancel_project",
    "delete_project",
    "list_open_projects",
    "list_client_projects",
]
