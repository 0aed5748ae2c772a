"""Contract & milestone engine.

Every mutation loads the contract with a row lock and bumps the contract row,
so the mapper's ``version`` check rejects a write based on a stale read.
Notifications are queued while the transaction is open and delivered only
after it commits.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from freelancehub.config import get_settings
from freelancehub.models.contract import Contract, ContractStatus, Milestone, MilestoneStatus
from freelancehub.models.project import Project, ProjectStatus
from freelancehub.models.proposal import Proposal, ProposalStatus
from freelancehub.schemas.contract import MilestoneSpec
from freelancehub.security import Actor
from freelancehub.services import counters, profiles, wallet
from freelancehub.services.notifications import Outgoing, deliver
from freelancehub.models.audit import AuditLog
from freelancehub.utils.audit import audit_trail, log_audit
from freelancehub.utils.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound
from freelancehub.utils.money import positive_amount
from freelancehub.utils.time import utcnow

logger = logging.getLogger(__name__)

CLIENT = "client"
FREELANCER = "freelancer"


@dataclass(frozen=True)
class _Rule:
    party: str
    sources: frozenset[MilestoneStatus]


TRANSITIONS: dict[MilestoneStatus, _Rule] = {
    MilestoneStatus.IN_PROGRESS: _Rule(
        FREELANCER, frozenset({MilestoneStatus.PENDING, MilestoneStatus.REVISION_REQUESTED})
    ),
    MilestoneStatus.SUBMITTED: _Rule(
        FREELANCER,
        frozenset({MilestoneStatus.PENDING, MilestoneStatus.IN_PROGRESS, MilestoneStatus.REVISION_REQUESTED}),
    ),
    MilestoneStatus.APPROVED: _Rule(CLIENT, frozenset({MilestoneStatus.SUBMITTED})),
    MilestoneStatus.REVISION_REQUESTED: _Rule(CLIENT, frozenset({MilestoneStatus.SUBMITTED})),
    MilestoneStatus.PAID: _Rule(CLIENT, frozenset({MilestoneStatus.APPROVED})),
}


def _contract_link(contract: Contract) -> str:
    return f"/contracts/{contract.id}"


def load_contract(db: Session, contract_id: int, *, for_update: bool = False) -> Contract:
    stmt = select(Contract).where(Contract.id == contract_id)
    if for_update:
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    contract = db.scalars(stmt).first()
    if contract is None:
        raise NotFound("Contract not found.", code="CONTRACT_NOT_FOUND")
    return contract


@contextmanager
def stale_guard(db: Session, contract_id: int) -> Iterator[None]:
    """Turn a lost optimistic version check into ``Conflict``."""

    try:
        yield
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Stale contract write rejected", extra={"contract_id": contract_id})
        raise Conflict("Contract was modified concurrently; reload and retry.", code="CONTRACT_STALE") from exc


def _build_milestones(items: Iterable[MilestoneSpec], start_idx: int = 1) -> list[Milestone]:
    milestones = []
    for offset, item in enumerate(items):
        milestones.append(
            Milestone(
                idx=start_idx + offset,
                title=item.title,
                description=item.description,
                amount=positive_amount(item.amount),
                due_date=item.due_date,
                status=MilestoneStatus.PENDING,
                deliverables=[],
            )
        )
    return milestones


def create_contract(
    db: Session,
    proposal_id: int,
    *,
    actor: Actor,
    milestones: list[MilestoneSpec] | None = None,
) -> Contract:
    """Create the contract for an accepted proposal.

    Without explicit milestones a single one covering the whole bid is used.
    """

    proposal = db.get(Proposal, proposal_id)
    if proposal is None:
        raise NotFound("Proposal not found.", code="PROPOSAL_NOT_FOUND")
    if proposal.status != ProposalStatus.ACCEPTED:
        raise InvalidState("Contracts can only be created from accepted proposals.", code="PROPOSAL_NOT_ACCEPTED")
    project = proposal.project
    if project.client_id != actor.user_id:
        raise Forbidden("Only the project owner can create the contract.", code="NOT_PROJECT_OWNER")
    if db.scalar(select(Contract.id).where(Contract.proposal_id == proposal.id)) is not None:
        raise Conflict("A contract already exists for this proposal.", code="CONTRACT_EXISTS")

    planned = milestones or [
        MilestoneSpec(title=project.title[:100], amount=proposal.bid_amount, description="Full project delivery")
    ]
    contract = Contract(
        project_id=project.id,
        proposal_id=proposal.id,
        client_id=project.client_id,
        freelancer_id=proposal.freelancer_id,
        title=project.title,
        description=project.description,
        total_amount=proposal.bid_amount,
        status=ContractStatus.ACTIVE,
        start_date=utcnow(),
    )
    contract.milestones = _build_milestones(planned)
    db.add(contract)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("A contract already exists for this proposal.", code="CONTRACT_EXISTS") from exc

    log_audit(
        db,
        actor=actor.label,
        action="CONTRACT_CREATED",
        entity="Contract",
        entity_id=contract.id,
        data={
            "project_id": contract.project_id,
            "proposal_id": proposal.id,
            "total_amount": str(contract.total_amount),
            "milestones": [str(m.amount) for m in contract.milestones],
        },
    )
    db.commit()
    db.refresh(contract)
    logger.info("Contract created", extra={"contract_id": contract.id, "proposal_id": proposal.id})

    deliver(
        db,
        [
            Outgoing(
                contract.freelancer_id,
                "CONTRACT_CREATED",
                "New contract",
                f'A contract was created for "{contract.title}".',
                _contract_link(contract),
            )
        ],
    )
    return contract


def get_contract(db: Session, contract_id: int, *, actor: Actor) -> Contract:
    contract = load_contract(db, contract_id)
    if not contract.is_party(actor.user_id) and not actor.is_admin:
        raise Forbidden("Only the contract parties can access this contract.", code="NOT_CONTRACT_PARTY")
    return contract


def contract_history(db: Session, contract_id: int, *, actor: Actor, limit: int = 100) -> list[AuditLog]:
    """Audit rows recorded against the contract, its milestones and disputes."""

    contract = get_contract(db, contract_id, actor=actor)
    return audit_trail(db, contract_id=contract.id, limit=limit)


def list_contracts(
    db: Session,
    *,
    actor: Actor,
    status: ContractStatus | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Contract]:
    stmt = select(Contract).where(
        or_(Contract.client_id == actor.user_id, Contract.freelancer_id == actor.user_id)
    )
    if status is not None:
        stmt = stmt.where(Contract.status == status)
    stmt = stmt.order_by(Contract.created_at.desc(), Contract.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def complete_if_done(db: Session, contract: Contract, *, actor_label: str, outbox: list[Outgoing]) -> bool:
    """Complete an ACTIVE contract whose milestones are all PAID.

    Runs inside the caller's transaction. A contract that is not ACTIVE is
    left alone, so calling this twice never counts a completion twice.
    """

    if contract.status != ContractStatus.ACTIVE:
        return False
    if not contract.milestones or any(m.status != MilestoneStatus.PAID for m in contract.milestones):
        return False

    now = utcnow()
    contract.status = ContractStatus.COMPLETED
    contract.end_date = now
    project = db.get(Project, contract.project_id)
    if project is not None:
        project.status = ProjectStatus.COMPLETED

    profile = profiles.lock_profile(db, contract.freelancer_id)
    profile.completed_projects = (profile.completed_projects or 0) + 1
    db.flush()
    counters.refresh_success_rate(db, profile)

    log_audit(
        db,
        actor=actor_label,
        action="CONTRACT_COMPLETED",
        entity="Contract",
        entity_id=contract.id,
        data={"project_id": contract.project_id, "freelancer_id": contract.freelancer_id},
    )
    for recipient in (contract.client_id, contract.freelancer_id):
        outbox.append(
            Outgoing(
                recipient,
                "CONTRACT_COMPLETED",
                "Contract completed",
                f'All milestones of "{contract.title}" are paid; the contract is complete.',
                _contract_link(contract),
            )
        )
    logger.info("Contract completed", extra={"contract_id": contract.id})
    return True


def check_completion(db: Session, contract_id: int, *, actor_label: str = "system") -> Contract:
    """Run the completion check on its own; safe to repeat."""

    contract = load_contract(db, contract_id, for_update=True)
    outbox: list[Outgoing] = []
    with stale_guard(db, contract_id):
        if not complete_if_done(db, contract, actor_label=actor_label, outbox=outbox):
            db.rollback()
            return contract
        db.commit()
    db.refresh(contract)
    deliver(db, outbox)
    return contract


def cancel_contract(db: Session, contract: Contract, *, actor_label: str, outbox: list[Outgoing]) -> None:
    """Cancel the contract and its project inside the caller's transaction."""

    now = utcnow()
    contract.status = ContractStatus.CANCELLED
    contract.end_date = now
    project = db.get(Project, contract.project_id)
    if project is not None:
        project.status = ProjectStatus.CANCELLED

    profile = profiles.lock_profile(db, contract.freelancer_id)
    db.flush()
    counters.refresh_success_rate(db, profile)

    log_audit(
        db,
        actor=actor_label,
        action="CONTRACT_CANCELLED",
        entity="Contract",
        entity_id=contract.id,
        data={"project_id": contract.project_id},
    )
    for recipient in (contract.client_id, contract.freelancer_id):
        outbox.append(
            Outgoing(
                recipient,
                "CONTRACT_CANCELLED",
                "Contract cancelled",
                f'The contract "{contract.title}" was cancelled.',
                _contract_link(contract),
            )
        )


def _apply_side_effects(
    db: Session,
    contract: Contract,
    milestone: Milestone,
    target: MilestoneStatus,
    outbox: list[Outgoing],
) -> None:
    now = utcnow()
    link = _contract_link(contract)
    if target == MilestoneStatus.SUBMITTED:
        milestone.submitted_at = now
        outbox.append(
            Outgoing(
                contract.client_id,
                "MILESTONE_SUBMITTED",
                "Milestone submitted",
                f'Milestone "{milestone.title}" was submitted for review.',
                link,
            )
        )
    elif target == MilestoneStatus.APPROVED:
        milestone.approved_at = now
        outbox.append(
            Outgoing(
                contract.freelancer_id,
                "MILESTONE_APPROVED",
                "Milestone approved",
                f'Milestone "{milestone.title}" was approved.',
                link,
            )
        )
    elif target == MilestoneStatus.REVISION_REQUESTED:
        outbox.append(
            Outgoing(
                contract.freelancer_id,
                "MILESTONE_REVISION_REQUESTED",
                "Revision requested",
                f'The client requested changes on milestone "{milestone.title}".',
                link,
            )
        )
    elif target == MilestoneStatus.PAID:
        milestone.paid_at = now
        if get_settings().SETTLE_EARNINGS_TO_WALLET:
            # Debit first: a short client balance aborts before anything else moves.
            wallet.settle_milestone(
                db,
                payer_id=contract.client_id,
                payee_id=contract.freelancer_id,
                amount=milestone.amount,
                contract_id=contract.id,
                description=f'Payment for milestone "{milestone.title}"',
            )
        # The only path by which total_earnings changes.
        profile = profiles.lock_profile(db, contract.freelancer_id)
        profile.total_earnings = (profile.total_earnings or 0) + milestone.amount
        outbox.append(
            Outgoing(
                contract.freelancer_id,
                "MILESTONE_PAID",
                "Milestone paid",
                f'Milestone "{milestone.title}" was paid.',
                link,
            )
        )


def update_milestone_status(
    db: Session,
    contract_id: int,
    idx: int,
    target: MilestoneStatus,
    *,
    actor: Actor,
    deliverables: list[dict] | None = None,
) -> Contract:
    """Move one milestone along its state machine.

    Checked in order: the contract exists, the actor is a party, the
    milestone exists, the contract is ACTIVE, the actor is the party allowed to reach
    ``target``, the milestone is in an allowed source state.
    """

    try:
        target = MilestoneStatus(target)
    except ValueError as exc:
        raise InvalidArgument(f"Unknown milestone status {target!r}.", code="INVALID_TARGET_STATUS") from exc
    rule = TRANSITIONS.get(target)
    if rule is None:
        raise InvalidArgument(f"Milestones cannot be moved to {target}.", code="INVALID_TARGET_STATUS")

    contract = load_contract(db, contract_id, for_update=True)
    if not contract.is_party(actor.user_id):
        db.rollback()
        raise Forbidden("Only the contract parties can update milestones.", code="NOT_CONTRACT_PARTY")
    milestone = contract.milestone(idx)
    if milestone is None:
        db.rollback()
        raise NotFound("Milestone not found.", code="MILESTONE_NOT_FOUND")
    if contract.status != ContractStatus.ACTIVE:
        db.rollback()
        raise InvalidState(
            f"Contract is {contract.status.value}; milestones are frozen.", code="CONTRACT_NOT_ACTIVE"
        )
    allowed_user = contract.client_id if rule.party == CLIENT else contract.freelancer_id
    if actor.user_id != allowed_user:
        db.rollback()
        raise Forbidden(f"Only the {rule.party} can move a milestone to {target.value}.", code="WRONG_PARTY")
    if milestone.status not in rule.sources:
        db.rollback()
        raise InvalidState(
            f"Cannot move milestone from {milestone.status.value} to {target.value}.",
            code="INVALID_MILESTONE_TRANSITION",
        )

    previous = milestone.status
    outbox: list[Outgoing] = []
    with stale_guard(db, contract.id):
        milestone.status = target
        if deliverables is not None and target == MilestoneStatus.SUBMITTED:
            milestone.deliverables = list(deliverables)
        _apply_side_effects(db, contract, milestone, target, outbox)
        contract.updated_at = utcnow()

        log_audit(
            db,
            actor=actor.label,
            action=f"MILESTONE_{target.value}",
            entity="Milestone",
            entity_id=milestone.id,
            data={
                "contract_id": contract.id,
                "idx": milestone.idx,
                "from": previous.value,
                "to": target.value,
                "amount": str(milestone.amount),
            },
        )
        complete_if_done(db, contract, actor_label=actor.label, outbox=outbox)
        db.commit()
    db.refresh(contract)
    logger.info(
        "Milestone transitioned",
        extra={"contract_id": contract.id, "idx": idx, "from": previous.value, "to": target.value},
    )
    deliver(db, outbox)
    return contract


def add_milestone(db: Session, contract_id: int, payload: MilestoneSpec, *, actor: Actor) -> Contract:
    contract = load_contract(db, contract_id, for_update=True)
    if contract.client_id != actor.user_id:
        db.rollback()
        raise Forbidden("Only the client can add milestones.", code="NOT_CONTRACT_CLIENT")
    if contract.status != ContractStatus.ACTIVE:
        db.rollback()
        raise InvalidState("Milestones can only be added to active contracts.", code="CONTRACT_NOT_ACTIVE")

    next_idx = max((m.idx for m in contract.milestones), default=0) + 1
    (milestone,) = _build_milestones([payload], start_idx=next_idx)
    with stale_guard(db, contract.id):
        contract.milestones.append(milestone)
        contract.updated_at = utcnow()
        db.flush()
        log_audit(
            db,
            actor=actor.label,
            action="MILESTONE_ADDED",
            entity="Milestone",
            entity_id=milestone.id,
            data={"contract_id": contract.id, "idx": milestone.idx, "amount": str(milestone.amount)},
        )
        db.commit()
    db.refresh(contract)
    deliver(
        db,
        [
            Outgoing(
                contract.freelancer_id,
                "MILESTONE_ADDED",
                "Milestone added",
                f'A new milestone "{milestone.title}" was added to "{contract.title}".',
                _contract_link(contract),
            )
        ],
    )
    return contract


__all__ = [
    "TRANSITIONS",
    "load_contract",
    "stale_guard",
    "create_contract",
    "get_contract",
    "contract_history",
    "list_contracts",
    "complete_if_done",
    "check_completion",
    "cancel_contract",
    "update_milestone_status",
    "add_milestone",
]
