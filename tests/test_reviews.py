"""Reviews and rating aggregates."""
import pytest
from sqlalchemy import select

from freelancehub.models import FreelancerProfile, MilestoneStatus, UserRole
from freelancehub.services import contracts, reviews
from freelancehub.utils.errors import Conflict, Forbidden, InvalidArgument, InvalidState


@pytest.fixture
def completed(db_session, make_contract, as_actor):
    """Return ``(contract, client, freelancer)`` for a fully paid contract."""

    contract, client, freelancer = make_contract()
    for target, who in (
        (MilestoneStatus.SUBMITTED, freelancer),
        (MilestoneStatus.APPROVED, client),
        (MilestoneStatus.PAID, client),
    ):
        contract = contracts.update_milestone_status(db_session, contract.id, 1, target, actor=as_actor(who))
    return contract, client, freelancer


def _profile(db_session, user_id):
    profile = db_session.scalars(select(FreelancerProfile).where(FreelancerProfile.user_id == user_id)).one()
    db_session.refresh(profile)
    return profile


def test_review_updates_freelancer_rating(db_session, completed, as_actor):
    contract, client, freelancer = completed

    review = reviews.submit_freelancer_review(
        db_session, contract.id, actor=as_actor(client), rating=4, comment="Solid work.", title="Good"
    )

    assert review.freelancer_id == freelancer.id
    profile = _profile(db_session, freelancer.id)
    assert profile.rating == 4.0
    assert profile.total_reviews == 1


def test_review_requires_completed_contract(db_session, make_contract, as_actor):
    contract, client, _ = make_contract()

    with pytest.raises(InvalidState) as exc:
        reviews.submit_freelancer_review(db_session, contract.id, actor=as_actor(client), rating=5, comment="Early")
    assert exc.value.code == "CONTRACT_NOT_COMPLETED"


def test_only_client_reviews_and_only_once(db_session, completed, as_actor):
    contract, client, freelancer = completed

    with pytest.raises(Forbidden):
        reviews.submit_freelancer_review(db_session, contract.id, actor=as_actor(freelancer), rating=5, comment="Me")

    reviews.submit_freelancer_review(db_session, contract.id, actor=as_actor(client), rating=5, comment="Great")
    with pytest.raises(Conflict):
        reviews.submit_freelancer_review(db_session, contract.id, actor=as_actor(client), rating=1, comment="Again")


@pytest.mark.parametrize("rating", [0, 6, True])
def test_rating_bounds(db_session, completed, as_actor, rating):
    contract, client, _ = completed

    with pytest.raises(InvalidArgument):
        reviews.submit_freelancer_review(db_session, contract.id, actor=as_actor(client), rating=rating, comment="x")


def test_update_and_delete_recompute_aggregate(db_session, completed, as_actor):
    contract, client, freelancer = completed
    review = reviews.submit_freelancer_review(db_session, contract.id, actor=as_actor(client), rating=2, comment="Meh")

    reviews.update_review(db_session, review.id, actor=as_actor(client), rating=5)
    assert _profile(db_session, freelancer.id).rating == 5.0

    with pytest.raises(Forbidden):
        reviews.update_review(db_session, review.id, actor=as_actor(freelancer), rating=1)

    reviews.delete_review(db_session, review.id, actor=as_actor(client))
    profile = _profile(db_session, freelancer.id)
    assert profile.rating == 0.0
    assert profile.total_reviews == 0


def test_company_reviews_average_and_distribution(db_session, make_company, make_user, as_actor):
    company = make_company()
    for rating in (5, 4, 4):
        reviews.submit_company_review(
            db_session, company.id, actor=as_actor(make_user("reviewer")), rating=rating, comment="ok"
        )

    summary = reviews.company_reviews(db_session, company.id)

    assert summary["total"] == 3
    assert summary["average"] == 4.3
    assert summary["distribution"] == {1: 0, 2: 0, 3: 0, 4: 2, 5: 1}
    db_session.refresh(company)
    assert company.rating == 4.3
    assert company.total_reviews == 3


def test_company_owner_cannot_self_review(db_session, make_company, make_user, as_actor):
    owner = make_user("owner", role=UserRole.COMPANY)
    company = make_company(owner=owner)

    with pytest.raises(Forbidden):
        reviews.submit_company_review(db_session, company.id, actor=as_actor(owner), rating=5, comment="Best")
