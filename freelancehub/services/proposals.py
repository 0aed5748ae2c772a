"""Proposal registry: submission, acceptance cascade, rejection and withdrawal."""
from __future__ import annotations

import logging

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.project import Project, ProjectStatus
from freelancehub.models.proposal import Proposal, ProposalStatus
from freelancehub.schemas.proposal import ProposalCreate
from freelancehub.security import Actor
from freelancehub.services import counters
from freelancehub.services.notifications import notify
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, Forbidden, InvalidState, NotFound
from freelancehub.utils.money import positive_amount
from freelancehub.utils.time import utcnow

logger = logging.getLogger(__name__)


def get_proposal(db: Session, proposal_id: int) -> Proposal:
    proposal = db.get(Proposal, proposal_id)
    if proposal is None:
        raise NotFound("Proposal not found.", code="PROPOSAL_NOT_FOUND")
    return proposal


def get_visible_proposal(db: Session, proposal_id: int, *, actor: Actor) -> Proposal:
    """Bids are private to their author and the project owner."""

    proposal = get_proposal(db, proposal_id)
    if actor.user_id not in (proposal.freelancer_id, proposal.project.client_id) and not actor.is_admin:
        raise Forbidden("You cannot view this proposal.", code="PROPOSAL_PRIVATE")
    return proposal


def _live_proposal_exists(db: Session, project_id: int, freelancer_id: int) -> bool:
    stmt = (
        select(Proposal.id)
        .where(
            Proposal.project_id == project_id,
            Proposal.freelancer_id == freelancer_id,
            Proposal.status != ProposalStatus.WITHDRAWN,
        )
        .limit(1)
    )
    return db.scalar(stmt) is not None


def _lock_project(db: Session, project_id: int) -> Project:
    stmt = (
        select(Project)
        .where(Project.id == project_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    project = db.scalars(stmt).first()
    if project is None:
        db.rollback()
        raise NotFound("Project not found.", code="PROJECT_NOT_FOUND")
    return project


def submit_proposal(db: Session, payload: ProposalCreate, *, actor: Actor) -> Proposal:
    """Record a bid on an OPEN project.

    The project row is locked for the whole insert and the count update only
    matches while the project is still OPEN, so a bid can never land after an
    accept or a cancel has swept the pending proposals.
    """

    bid = positive_amount(payload.bid_amount)
    db.flush()
    project = _lock_project(db, payload.project_id)
    if project.client_id == actor.user_id:
        db.rollback()
        raise Forbidden("You cannot bid on your own project.", code="OWN_PROJECT")
    if project.status != ProjectStatus.OPEN:
        db.rollback()
        raise InvalidState("Project is not accepting proposals.", code="PROJECT_NOT_OPEN")
    if _live_proposal_exists(db, project.id, actor.user_id):
        db.rollback()
        raise Conflict("You already have a proposal on this project.", code="PROPOSAL_EXISTS")

    proposal = Proposal(
        project_id=project.id,
        freelancer_id=actor.user_id,
        cover_letter=payload.cover_letter,
        bid_amount=bid,
        estimated_duration=payload.estimated_duration,
        attachments=[item.model_dump() for item in payload.attachments],
        status=ProposalStatus.PENDING,
    )
    db.add(proposal)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("You already have a proposal on this project.", code="PROPOSAL_EXISTS") from exc

    if not counters.sync_project_proposal_count(db, project.id, open_only=True):
        db.rollback()
        raise InvalidState("Project is not accepting proposals.", code="PROJECT_NOT_OPEN")
    log_audit(
        db,
        actor=actor.label,
        action="PROPOSAL_SUBMITTED",
        entity="Proposal",
        entity_id=proposal.id,
        data={"project_id": project.id, "bid_amount": str(bid)},
    )
    db.commit()
    db.refresh(proposal)
    logger.info("Proposal submitted", extra={"proposal_id": proposal.id, "project_id": project.id})

    notify(
        db,
        project.client_id,
        "PROPOSAL_RECEIVED",
        "New proposal received",
        f'You received a new proposal for "{project.title}".',
        f"/projects/{project.id}",
    )
    return proposal


def accept_proposal(db: Session, proposal_id: int, *, actor: Actor) -> Proposal:
    """Accept one proposal and close the project to every other bid.

    The project row is claimed with a conditional UPDATE on ``status = OPEN``;
    of two concurrent accepts only the first one matches a row, the other
    gets ``Conflict`` and leaves nothing behind.
    """

    proposal = get_proposal(db, proposal_id)
    project = db.get(Project, proposal.project_id)
    if project is None:
        raise NotFound("Project not found.", code="PROJECT_NOT_FOUND")
    if project.client_id != actor.user_id:
        raise Forbidden("Only the project owner can accept proposals.", code="NOT_PROJECT_OWNER")
    if project.status == ProjectStatus.IN_PROGRESS:
        raise Conflict("Project already has an accepted proposal.", code="PROJECT_ALREADY_ASSIGNED")
    if project.status != ProjectStatus.OPEN:
        raise InvalidState("Project is no longer open.", code="PROJECT_NOT_OPEN")
    if proposal.status != ProposalStatus.PENDING:
        raise InvalidState("Only pending proposals can be accepted.", code="PROPOSAL_NOT_PENDING")

    now = utcnow()
    claimed = db.execute(
        update(Project)
        .where(Project.id == project.id, Project.status == ProjectStatus.OPEN)
        .values(status=ProjectStatus.IN_PROGRESS, assigned_to_id=proposal.freelancer_id, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if claimed.rowcount != 1:
        db.rollback()
        logger.info("Concurrent accept lost", extra={"proposal_id": proposal_id, "project_id": project.id})
        raise Conflict("Project already has an accepted proposal.", code="PROJECT_ALREADY_ASSIGNED")

    accepted = db.execute(
        update(Proposal)
        .where(Proposal.id == proposal.id, Proposal.status == ProposalStatus.PENDING)
        .values(status=ProposalStatus.ACCEPTED, updated_at=now)
        .execution_options(synchronize_session=False)
    )
    if accepted.rowcount != 1:
        db.rollback()
        raise InvalidState("Only pending proposals can be accepted.", code="PROPOSAL_NOT_PENDING")

    siblings = list(
        db.scalars(
            select(Proposal).where(
                Proposal.project_id == project.id,
                Proposal.id != proposal.id,
                Proposal.status == ProposalStatus.PENDING,
            )
        )
    )
    for sibling in siblings:
        sibling.status = ProposalStatus.REJECTED

    log_audit(
        db,
        actor=actor.label,
        action="PROPOSAL_ACCEPTED",
        entity="Proposal",
        entity_id=proposal.id,
        data={
            "project_id": project.id,
            "freelancer_id": proposal.freelancer_id,
            "rejected": [s.id for s in siblings],
        },
    )
    db.commit()
    db.refresh(proposal)
    db.refresh(project)
    logger.info(
        "Proposal accepted",
        extra={"proposal_id": proposal.id, "project_id": project.id, "rejected": len(siblings)},
    )

    notify(
        db,
        proposal.freelancer_id,
        "PROPOSAL_ACCEPTED",
        "Proposal accepted",
        f'Your proposal for "{project.title}" was accepted.',
        f"/projects/{project.id}",
    )
    for sibling in siblings:
        notify(
            db,
            sibling.freelancer_id,
            "PROPOSAL_REJECTED",
            "Proposal not selected",
            f'Another proposal was selected for "{project.title}".',
            f"/projects/{project.id}",
        )
    return proposal


def reject_proposal(db: Session, proposal_id: int, *, actor: Actor) -> Proposal:
    proposal = get_proposal(db, proposal_id)
    project = proposal.project
    if project.client_id != actor.user_id:
        raise Forbidden("Only the project owner can reject proposals.", code="NOT_PROJECT_OWNER")
    if proposal.status != ProposalStatus.PENDING:
        raise InvalidState("Only pending proposals can be rejected.", code="PROPOSAL_NOT_PENDING")

    proposal.status = ProposalStatus.REJECTED
    log_audit(
        db,
        actor=actor.label,
        action="PROPOSAL_REJECTED",
        entity="Proposal",
        entity_id=proposal.id,
        data={"project_id": project.id},
    )
    db.commit()
    db.refresh(proposal)

    notify(
        db,
        proposal.freelancer_id,
        "PROPOSAL_REJECTED",
        "Proposal declined",
        f'Your proposal for "{project.title}" was declined.',
        f"/projects/{project.id}",
    )
    return proposal


def withdraw_proposal(db: Session, proposal_id: int, *, actor: Actor) -> Proposal:
    proposal = get_proposal(db, proposal_id)
    if proposal.freelancer_id != actor.user_id:
        raise Forbidden("Only the author can withdraw a proposal.", code="NOT_PROPOSAL_OWNER")

    result = db.execute(
        update(Proposal)
        .where(Proposal.id == proposal.id, Proposal.status == ProposalStatus.PENDING)
        .values(status=ProposalStatus.WITHDRAWN, updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidState("Only pending proposals can be withdrawn.", code="PROPOSAL_NOT_PENDING")

    counters.sync_project_proposal_count(db, proposal.project_id)
    log_audit(
        db,
        actor=actor.label,
        action="PROPOSAL_WITHDRAWN",
        entity="Proposal",
        entity_id=proposal.id,
        data={"project_id": proposal.project_id},
    )
    db.commit()
    db.refresh(proposal)
    logger.info("Proposal withdrawn", extra={"proposal_id": proposal.id})
    return proposal


def list_project_proposals(db: Session, project_id: int, *, actor: Actor) -> list[Proposal]:
    project = db.get(Project, project_id)
    if project is None:
        raise NotFound("Project not found.", code="PROJECT_NOT_FOUND")
    if project.client_id != actor.user_id and not actor.is_admin:
        raise Forbidden("Only the project owner can list its proposals.", code="NOT_PROJECT_OWNER")
    stmt = select(Proposal).where(Proposal.project_id == project_id).order_by(Proposal.created_at, Proposal.id)
    return list(db.scalars(stmt))


def list_my_proposals(
    db: Session,
    *,
    actor: Actor,
    status: ProposalStatus | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Proposal]:
    stmt = select(Proposal).where(Proposal.freelancer_id == actor.user_id)
    if status is not None:
        stmt = stmt.where(Proposal.status == status)
    stmt = stmt.order_by(Proposal.created_at.desc(), Proposal.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


__all__ = [
    "get_proposal",
    "get_visible_proposal",
    "submit_proposal",
    "accept_proposal",
    "reject_proposal",
    "withdraw_proposal",
    "list_project_proposals",
    "list_my_proposals",
]
