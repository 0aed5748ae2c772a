"""Dispute workflow.

Opening a dispute forces the contract to DISPUTED, which freezes the
milestone state machine until an administrator closes the dispute.
Closing applies this policy:

* REJECTED: the contract goes back to ACTIVE.
* RESOLVED with ``RESUME``: the contract goes back to ACTIVE and the
  completion check runs at once.
* RESOLVED with ``CANCEL``: the contract and its project are CANCELLED.
"""
from __future__ import annotations

import logging

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from freelancehub.models.contract import ContractStatus
from freelancehub.models.dispute import (
    CLOSED_DISPUTE_STATES,
    LIVE_DISPUTE_STATES,
    Dispute,
    DisputeMessage,
    DisputeStatus,
)
from freelancehub.security import Actor
from freelancehub.services.contracts import cancel_contract, complete_if_done, load_contract, stale_guard
from freelancehub.services.notifications import Outgoing, deliver
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound
from freelancehub.utils.time import utcnow

logger = logging.getLogger(__name__)

RESUME = "RESUME"
CANCEL = "CANCEL"


def _dispute_link(dispute: Dispute) -> str:
    return f"/disputes/{dispute.id}"


def _require_admin(actor: Actor) -> None:
    if not actor.is_admin:
        raise Forbidden("Only administrators can do this.", code="ADMIN_ONLY")


def get_dispute(
    db: Session,
    dispute_id: int,
    *,
    actor: Actor | None = None,
    for_update: bool = False,
) -> Dispute:
    stmt = select(Dispute).where(Dispute.id == dispute_id)
    if for_update:
        db.flush()
        stmt = stmt.with_for_update().execution_options(populate_existing=True)
    dispute = db.scalars(stmt).first()
    if dispute is None:
        if for_update:
            db.rollback()
        raise NotFound("Dispute not found.", code="DISPUTE_NOT_FOUND")
    if actor is not None and not dispute.is_participant(actor.user_id) and not actor.is_admin:
        if for_update:
            db.rollback()
        raise Forbidden("Only dispute participants can access this dispute.", code="NOT_DISPUTE_PARTY")
    return dispute


def _move(
    db: Session,
    dispute: Dispute,
    sources: tuple[DisputeStatus, ...],
    target: DisputeStatus,
    *,
    message: str,
    code: str,
) -> None:
    """Claim the status change with a conditional UPDATE; zero rows means another writer won."""

    result = db.execute(
        update(Dispute)
        .where(Dispute.id == dispute.id, Dispute.status.in_(sources))
        .values(status=target)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        db.rollback()
        logger.info("Dispute transition lost", extra={"dispute_id": dispute.id, "target": target.value})
        raise InvalidState(message, code=code)
    dispute.status = target


def open_dispute(
    db: Session,
    contract_id: int,
    *,
    actor: Actor,
    reason: str,
    evidence: list[dict] | None = None,
) -> Dispute:
    contract = load_contract(db, contract_id, for_update=True)
    if not contract.is_party(actor.user_id):
        db.rollback()
        raise Forbidden("Only contract parties can open a dispute.", code="NOT_CONTRACT_PARTY")
    live = db.scalar(
        select(Dispute.id)
        .where(Dispute.contract_id == contract.id, Dispute.status.in_(LIVE_DISPUTE_STATES))
        .limit(1)
    )
    if live is not None:
        db.rollback()
        raise Conflict("This contract already has an open dispute.", code="DISPUTE_EXISTS")
    if contract.status != ContractStatus.ACTIVE:
        db.rollback()
        raise InvalidState("Disputes can only be opened on active contracts.", code="CONTRACT_NOT_ACTIVE")

    defendant_id = contract.freelancer_id if actor.user_id == contract.client_id else contract.client_id
    dispute = Dispute(
        contract_id=contract.id,
        initiator_id=actor.user_id,
        defendant_id=defendant_id,
        reason=reason,
        evidence=list(evidence or []),
        status=DisputeStatus.OPEN,
    )
    with stale_guard(db, contract.id):
        db.add(dispute)
        contract.status = ContractStatus.DISPUTED
        contract.updated_at = utcnow()
        db.flush()
        log_audit(
            db,
            actor=actor.label,
            action="DISPUTE_OPENED",
            entity="Dispute",
            entity_id=dispute.id,
            data={"contract_id": contract.id, "defendant_id": defendant_id},
        )
        db.commit()
    db.refresh(dispute)
    logger.info("Dispute opened", extra={"dispute_id": dispute.id, "contract_id": contract.id})

    deliver(
        db,
        [
            Outgoing(
                defendant_id,
                "DISPUTE_OPENED",
                "Dispute opened",
                f'A dispute was opened on the contract "{contract.title}".',
                _dispute_link(dispute),
            )
        ],
    )
    return dispute


def start_review(db: Session, dispute_id: int, *, actor: Actor) -> Dispute:
    _require_admin(actor)
    dispute = get_dispute(db, dispute_id, for_update=True)
    if dispute.status != DisputeStatus.OPEN:
        db.rollback()
        raise InvalidState("Only open disputes can be taken under review.", code="DISPUTE_NOT_OPEN")

    _move(
        db,
        dispute,
        (DisputeStatus.OPEN,),
        DisputeStatus.UNDER_REVIEW,
        message="Only open disputes can be taken under review.",
        code="DISPUTE_NOT_OPEN",
    )
    log_audit(
        db,
        actor=actor.label,
        action="DISPUTE_UNDER_REVIEW",
        entity="Dispute",
        entity_id=dispute.id,
        data={"contract_id": dispute.contract_id},
    )
    db.commit()
    db.refresh(dispute)

    deliver(
        db,
        [
            Outgoing(
                recipient,
                "DISPUTE_UNDER_REVIEW",
                "Dispute under review",
                "An administrator is now reviewing the dispute.",
                _dispute_link(dispute),
            )
            for recipient in (dispute.initiator_id, dispute.defendant_id)
        ],
    )
    return dispute


def add_message(
    db: Session,
    dispute_id: int,
    *,
    actor: Actor,
    body: str,
    attachments: list[dict] | None = None,
) -> DisputeMessage:
    dispute = get_dispute(db, dispute_id, actor=actor, for_update=True)
    if dispute.status in CLOSED_DISPUTE_STATES:
        db.rollback()
        raise InvalidState("The dispute is closed.", code="DISPUTE_CLOSED")

    message = DisputeMessage(sender_id=actor.user_id, body=body, attachments=list(attachments or []))
    dispute.messages.append(message)
    db.flush()
    log_audit(
        db,
        actor=actor.label,
        action="DISPUTE_MESSAGE_ADDED",
        entity="Dispute",
        entity_id=dispute.id,
        data={"contract_id": dispute.contract_id, "message_id": message.id},
    )
    db.commit()
    db.refresh(message)

    recipients = [r for r in (dispute.initiator_id, dispute.defendant_id) if r != actor.user_id]
    deliver(
        db,
        [
            Outgoing(
                recipient,
                "DISPUTE_MESSAGE",
                "New dispute message",
                "A new message was posted on your dispute.",
                _dispute_link(dispute),
            )
            for recipient in recipients
        ],
    )
    return message


def resolve_dispute(
    db: Session,
    dispute_id: int,
    *,
    actor: Actor,
    decision: str,
    outcome: DisputeStatus | str,
    contract_action: str = RESUME,
) -> Dispute:
    """Close a dispute with an administrator decision."""

    _require_admin(actor)
    try:
        outcome = DisputeStatus(outcome)
    except ValueError as exc:
        raise InvalidArgument("Outcome must be RESOLVED or REJECTED.", code="INVALID_OUTCOME") from exc
    if outcome not in CLOSED_DISPUTE_STATES:
        raise InvalidArgument("Outcome must be RESOLVED or REJECTED.", code="INVALID_OUTCOME")
    if contract_action not in (RESUME, CANCEL):
        raise InvalidArgument("contract_action must be RESUME or CANCEL.", code="INVALID_CONTRACT_ACTION")
    if outcome == DisputeStatus.REJECTED and contract_action == CANCEL:
        raise InvalidArgument("A rejected dispute cannot cancel the contract.", code="INVALID_CONTRACT_ACTION")

    dispute = get_dispute(db, dispute_id, for_update=True)
    if dispute.status in CLOSED_DISPUTE_STATES:
        db.rollback()
        raise InvalidState("The dispute is already closed.", code="DISPUTE_CLOSED")

    contract = load_contract(db, dispute.contract_id, for_update=True)
    outbox: list[Outgoing] = []
    with stale_guard(db, contract.id):
        now = utcnow()
        _move(
            db,
            dispute,
            LIVE_DISPUTE_STATES,
            outcome,
            message="The dispute is already closed.",
            code="DISPUTE_CLOSED",
        )
        dispute.decision = decision
        dispute.decided_by_id = actor.user_id
        dispute.decided_at = now

        if contract.status == ContractStatus.DISPUTED:
            contract.updated_at = now
            if contract_action == CANCEL:
                cancel_contract(db, contract, actor_label=actor.label, outbox=outbox)
            else:
                contract.status = ContractStatus.ACTIVE
                complete_if_done(db, contract, actor_label=actor.label, outbox=outbox)

        log_audit(
            db,
            actor=actor.label,
            action=f"DISPUTE_{outcome.value}",
            entity="Dispute",
            entity_id=dispute.id,
            data={
                "contract_id": contract.id,
                "contract_action": contract_action,
                "contract_status": contract.status.value,
            },
        )
        db.commit()
    db.refresh(dispute)
    logger.info(
        "Dispute closed",
        extra={"dispute_id": dispute.id, "outcome": outcome.value, "contract_status": contract.status.value},
    )

    for recipient in (dispute.initiator_id, dispute.defendant_id):
        outbox.append(
            Outgoing(
                recipient,
                "DISPUTE_CLOSED",
                f"Dispute {outcome.value.lower()}",
                f"Decision: {decision}",
                _dispute_link(dispute),
            )
        )
    deliver(db, outbox)
    return dispute


def list_my_disputes(db: Session, *, actor: Actor, limit: int = 20, offset: int = 0) -> list[Dispute]:
    stmt = (
        select(Dispute)
        .where(or_(Dispute.initiator_id == actor.user_id, Dispute.defendant_id == actor.user_id))
        .order_by(Dispute.created_at.desc(), Dispute.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt))


def list_disputes(
    db: Session,
    *,
    actor: Actor,
    status: DisputeStatus | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[Dispute]:
    _require_admin(actor)
    stmt = select(Dispute)
    if status is not None:
        stmt = stmt.where(Dispute.status == status)
    stmt = stmt.order_by(Dispute.created_at.desc(), Dispute.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


__all__ = [
    "RESUME",
    "CANCEL",
    "get_dispute",
    "open_dispute",
    "start_review",
    "add_message",
    "resolve_dispute",
    "list_my_disputes",
    "list_disputes",
]
