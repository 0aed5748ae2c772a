"""Notification delivery and inbox."""
import logging

import pytest
from sqlalchemy import select

from freelancehub.models import Notification, ProposalStatus
from freelancehub.services import notifications, proposals
from freelancehub.utils.errors import NotFound


def _broken_sink(db, recipient_id, kind, title, body, link=None):
    raise RuntimeError("mail server down")


def test_failed_delivery_does_not_undo_the_state_change(
    db_session, make_user, make_project, make_proposal, as_actor, caplog
):
    owner = make_user("owner")
    project = make_project(owner)
    proposal = make_proposal(project, make_user("f"))
    notifications.set_notification_sink(_broken_sink)

    with caplog.at_level(logging.ERROR, logger="freelancehub.services.notifications"):
        accepted = proposals.accept_proposal(db_session, proposal.id, actor=as_actor(owner))

    assert accepted.status == ProposalStatus.ACCEPTED
    db_session.expire_all()
    assert db_session.get(type(proposal), proposal.id).status == ProposalStatus.ACCEPTED
    assert any("Notification delivery failed" in record.getMessage() for record in caplog.records)


def test_notify_reports_failure(db_session, make_user):
    user = make_user("u")
    notifications.set_notification_sink(_broken_sink)

    assert notifications.notify(db_session, user.id, "TEST", "Title", "Body") is False

    notifications.set_notification_sink(None)
    assert notifications.notify(db_session, user.id, "TEST", "Title", "Body") is True
    assert notifications.unread_count(db_session, user.id) == 1


def test_custom_sink_receives_outbox(db_session, make_user):
    sent = []
    notifications.set_notification_sink(lambda db, recipient_id, kind, title, body, link=None: sent.append(kind))
    user = make_user("u")

    delivered = notifications.deliver(
        db_session,
        [notifications.Outgoing(user.id, "A", "a", "a"), notifications.Outgoing(user.id, "B", "b", "b", "/x")],
    )

    assert delivered == 2
    assert sent == ["A", "B"]
    assert db_session.scalars(select(Notification)).all() == []


def test_inbox_read_flags(db_session, make_user):
    user = make_user("u")
    other = make_user("other")
    for kind in ("ONE", "TWO"):
        notifications.notify(db_session, user.id, kind, kind.title(), "body")

    unread = notifications.list_notifications(db_session, user.id, unread_only=True)
    assert [n.kind for n in unread] == ["TWO", "ONE"]

    notifications.mark_read(db_session, unread[0].id, user_id=user.id)
    assert notifications.unread_count(db_session, user.id) == 1
    with pytest.raises(NotFound):
        notifications.mark_read(db_session, unread[1].id, user_id=other.id)

    assert notifications.mark_all_read(db_session, user_id=user.id) == 1
    assert notifications.unread_count(db_session, user.id) == 0
