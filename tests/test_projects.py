"""Project posting lifecycle."""
import pytest
from sqlalchemy import select

from freelancehub.models import Notification, Project, ProjectStatus, Proposal, ProposalStatus, UserRole
from freelancehub.schemas.project import ProjectUpdate
from freelancehub.services import projects, proposals
from freelancehub.utils.errors import Forbidden, InvalidArgument, InvalidState, NotFound


def test_update_only_while_open(db_session, make_user, make_project, make_proposal, as_actor):
    owner = make_user("owner")
    project = make_project(owner)

    updated = projects.update_project(db_session, project.id, ProjectUpdate(title="New title"), actor=as_actor(owner))
    assert updated.title == "New title"

    with pytest.raises(InvalidArgument):
        projects.update_project(db_session, project.id, ProjectUpdate(budget_min="5000"), actor=as_actor(owner))
    with pytest.raises(Forbidden):
        projects.update_project(db_session, project.id, ProjectUpdate(title="x"), actor=as_actor(make_user("other")))

    proposal = make_proposal(project, make_user("f"))
    proposals.accept_proposal(db_session, proposal.id, actor=as_actor(owner))
    with pytest.raises(InvalidState):
        projects.update_project(db_session, project.id, ProjectUpdate(title="Late"), actor=as_actor(owner))


def test_cancel_rejects_pending_proposals(db_session, make_user, make_project, make_proposal, as_actor):
    owner = make_user("owner")
    bidder = make_user("f")
    project = make_project(owner)
    proposal = make_proposal(project, bidder)

    cancelled = projects.cancel_project(db_session, project.id, actor=as_actor(owner))

    assert cancelled.status == ProjectStatus.CANCELLED
    db_session.expire_all()
    assert db_session.get(Proposal, proposal.id).status == ProposalStatus.REJECTED
    kinds = db_session.scalars(select(Notification.kind).where(Notification.user_id == bidder.id)).all()
    assert kinds == ["PROJECT_CANCELLED"]
    with pytest.raises(InvalidState):
        projects.cancel_project(db_session, project.id, actor=as_actor(owner))


def test_delete_open_project_removes_proposals(db_session, make_user, make_project, make_proposal, as_actor):
    owner = make_user("owner")
    project = make_project(owner)
    proposal = make_proposal(project, make_user("f"))
    project_id, proposal_id = project.id, proposal.id

    projects.delete_project(db_session, project_id, actor=as_actor(owner))

    assert db_session.get(Project, project_id) is None
    assert db_session.get(Proposal, proposal_id) is None
    with pytest.raises(NotFound):
        projects.get_project(db_session, project_id)


def test_listings(db_session, make_user, make_project, as_actor):
    owner = make_user("owner")
    first = make_project(owner, title="First")
    second = make_project(owner, title="Second")
    projects.cancel_project(db_session, first.id, actor=as_actor(owner))

    assert [p.id for p in projects.list_open_projects(db_session)] == [second.id]
    mine = projects.list_client_projects(db_session, owner.id, status=ProjectStatus.CANCELLED)
    assert [p.id for p in mine] == [first.id]


def test_admin_can_cancel_any_project(db_session, make_user, make_project, as_actor):
    project = make_project(make_user("owner"))
    admin = make_user("admin", role=UserRole.ADMIN)

    assert projects.cancel_project(db_session, project.id, actor=as_actor(admin)).status == ProjectStatus.CANCELLED
