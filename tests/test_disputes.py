"""Dispute lifecycle and its effect on contracts."""
import pytest
from sqlalchemy import select

from freelancehub.models import (
    ContractStatus,
    Dispute,
    DisputeStatus,
    FreelancerProfile,
    MilestoneStatus,
    Notification,
    Project,
    ProjectStatus,
    UserRole,
)
from freelancehub.services import contracts, disputes
from freelancehub.utils.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound


@pytest.fixture
def disputed(db_session, make_contract, make_user, as_actor):
    contract, client, freelancer = make_contract()
    admin = make_user("admin", role=UserRole.ADMIN)
    dispute = disputes.open_dispute(
        db_session,
        contract.id,
        actor=as_actor(client),
        reason="Deliverable never arrived.",
        evidence=[{"name": "chat.png", "url": "https://files.example.com/chat.png"}],
    )
    return dispute, contract, client, freelancer, admin


def test_open_dispute_freezes_contract(db_session, disputed, as_actor):
    dispute, contract, client, freelancer, _ = disputed

    assert dispute.status == DisputeStatus.OPEN
    assert dispute.initiator_id == client.id
    assert dispute.defendant_id == freelancer.id
    assert contracts.load_contract(db_session, contract.id).status == ContractStatus.DISPUTED
    with pytest.raises(InvalidState) as exc:
        contracts.update_milestone_status(
            db_session, contract.id, 1, MilestoneStatus.SUBMITTED, actor=as_actor(freelancer)
        )
    assert exc.value.code == "CONTRACT_NOT_ACTIVE"

    notified = db_session.scalars(select(Notification.kind).where(Notification.user_id == freelancer.id)).all()
    assert "DISPUTE_OPENED" in notified


def test_second_dispute_conflicts(db_session, disputed, as_actor):
    _, contract, _, freelancer, _ = disputed

    with pytest.raises(Conflict) as exc:
        disputes.open_dispute(db_session, contract.id, actor=as_actor(freelancer), reason="Me too.")
    assert exc.value.code == "DISPUTE_EXISTS"


def test_only_parties_open_disputes(db_session, make_contract, make_user, as_actor):
    contract, _, _ = make_contract()

    with pytest.raises(Forbidden):
        disputes.open_dispute(db_session, contract.id, actor=as_actor(make_user("stranger")), reason="?")
    with pytest.raises(NotFound):
        disputes.open_dispute(db_session, 987654, actor=as_actor(make_user("x")), reason="?")


def test_messages_between_participants(db_session, disputed, make_user, as_actor):
    dispute, _, client, freelancer, admin = disputed

    disputes.add_message(db_session, dispute.id, actor=as_actor(freelancer), body="I sent it on Monday.")
    disputes.add_message(db_session, dispute.id, actor=as_actor(admin), body="Please upload proof.")

    refreshed = disputes.get_dispute(db_session, dispute.id, actor=as_actor(client))
    assert [m.body for m in refreshed.messages] == ["I sent it on Monday.", "Please upload proof."]
    with pytest.raises(Forbidden):
        disputes.add_message(db_session, dispute.id, actor=as_actor(make_user("stranger")), body="hi")


def test_review_and_resume(db_session, disputed, as_actor):
    dispute, contract, _, _, admin = disputed

    reviewing = disputes.start_review(db_session, dispute.id, actor=as_actor(admin))
    assert reviewing.status == DisputeStatus.UNDER_REVIEW

    resolved = disputes.resolve_dispute(
        db_session,
        dispute.id,
        actor=as_actor(admin),
        decision="Work continues with a new deadline.",
        outcome=DisputeStatus.RESOLVED,
    )
    assert resolved.status == DisputeStatus.RESOLVED
    assert resolved.decided_by_id == admin.id
    assert resolved.decided_at is not None
    assert contracts.load_contract(db_session, contract.id).status == ContractStatus.ACTIVE

    with pytest.raises(InvalidState):
        disputes.add_message(db_session, dispute.id, actor=as_actor(admin), body="late")


def test_rejected_dispute_reactivates_contract(db_session, disputed, as_actor):
    dispute, contract, _, _, admin = disputed

    disputes.resolve_dispute(
        db_session, dispute.id, actor=as_actor(admin), decision="No grounds.", outcome="REJECTED"
    )

    assert contracts.load_contract(db_session, contract.id).status == ContractStatus.ACTIVE


def test_rejected_dispute_cannot_cancel(db_session, disputed, as_actor):
    dispute, _, _, _, admin = disputed

    with pytest.raises(InvalidArgument):
        disputes.resolve_dispute(
            db_session,
            dispute.id,
            actor=as_actor(admin),
            decision="No grounds.",
            outcome=DisputeStatus.REJECTED,
            contract_action=disputes.CANCEL,
        )


def test_resolve_with_cancel_closes_contract_and_project(db_session, disputed, as_actor):
    dispute, contract, _, freelancer, admin = disputed

    disputes.resolve_dispute(
        db_session,
        dispute.id,
        actor=as_actor(admin),
        decision="Refund the client.",
        outcome=DisputeStatus.RESOLVED,
        contract_action=disputes.CANCEL,
    )

    cancelled = contracts.load_contract(db_session, contract.id)
    assert cancelled.status == ContractStatus.CANCELLED
    assert cancelled.end_date is not None
    assert db_session.get(Project, contract.project_id).status == ProjectStatus.CANCELLED
    profile = db_session.scalars(
        select(FreelancerProfile).where(FreelancerProfile.user_id == freelancer.id)
    ).one()
    assert profile.success_rate == 0.0


def test_only_admins_resolve(db_session, disputed, as_actor):
    dispute, _, client, _, _ = disputed

    with pytest.raises(Forbidden):
        disputes.resolve_dispute(
            db_session, dispute.id, actor=as_actor(client), decision="I win.", outcome="RESOLVED"
        )


def test_closed_dispute_cannot_be_resolved_twice(db_session, disputed, as_actor):
    dispute, _, _, _, admin = disputed
    disputes.resolve_dispute(db_session, dispute.id, actor=as_actor(admin), decision="ok", outcome="RESOLVED")

    with pytest.raises(InvalidState):
        disputes.resolve_dispute(db_session, dispute.id, actor=as_actor(admin), decision="again", outcome="RESOLVED")


def test_stale_admin_cannot_overwrite_a_closed_dispute(db_session, session_factory, disputed, as_actor):
    dispute, contract, _, _, admin = disputed

    first = session_factory()
    second = session_factory()
    try:
        # The second administrator read the dispute while it was still open.
        assert second.get(Dispute, dispute.id).status == DisputeStatus.OPEN

        disputes.resolve_dispute(
            first,
            dispute.id,
            actor=as_actor(admin),
            decision="Refund the client.",
            outcome="RESOLVED",
            contract_action=disputes.CANCEL,
        )
        with pytest.raises(InvalidState) as exc:
            disputes.resolve_dispute(
                second, dispute.id, actor=as_actor(admin), decision="Nothing to see.", outcome="REJECTED"
            )
        assert exc.value.code == "DISPUTE_CLOSED"
    finally:
        first.close()
        second.close()

    db_session.expire_all()
    stored = db_session.get(Dispute, dispute.id)
    assert stored.status == DisputeStatus.RESOLVED
    assert stored.decision == "Refund the client."
    assert contracts.load_contract(db_session, contract.id).status == ContractStatus.CANCELLED


def test_stale_review_start_is_refused(db_session, session_factory, disputed, as_actor):
    dispute, _, _, _, admin = disputed

    first = session_factory()
    second = session_factory()
    try:
        assert second.get(Dispute, dispute.id).status == DisputeStatus.OPEN
        disputes.resolve_dispute(first, dispute.id, actor=as_actor(admin), decision="ok", outcome="REJECTED")

        with pytest.raises(InvalidState):
            disputes.start_review(second, dispute.id, actor=as_actor(admin))
        with pytest.raises(InvalidState):
            disputes.add_message(second, dispute.id, actor=as_actor(admin), body="Late note.")
    finally:
        first.close()
        second.close()

    db_session.expire_all()
    assert db_session.get(Dispute, dispute.id).status == DisputeStatus.REJECTED


def test_new_dispute_allowed_after_close(db_session, disputed, as_actor):
    dispute, contract, _, freelancer, admin = disputed
    disputes.resolve_dispute(db_session, dispute.id, actor=as_actor(admin), decision="ok", outcome="REJECTED")

    second = disputes.open_dispute(db_session, contract.id, actor=as_actor(freelancer), reason="Unpaid work.")
    assert second.initiator_id == freelancer.id
    assert [d.id for d in disputes.list_my_disputes(db_session, actor=as_actor(freelancer))] == [second.id, dispute.id]
