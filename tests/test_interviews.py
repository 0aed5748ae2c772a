"""Interview scheduling on job applications."""
from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError
from sqlalchemy import select

from freelancehub.models import ApplicationStatus, InterviewStatus, InterviewType, Notification
from freelancehub.schemas.interview import InterviewCreate, InterviewUpdate
from freelancehub.services import interviews, jobs
from freelancehub.utils.errors import Forbidden, InvalidArgument, InvalidState, NotFound


def _at(days: int) -> datetime:
    return datetime.now(tz=UTC) + timedelta(days=days)


@pytest.fixture
def applied(db_session, open_job, make_user, make_application):
    job, owner, _ = open_job
    applicant = make_user("applicant")
    application = make_application(job, applicant)
    return application, owner, applicant


def _schedule(db_session, application, owner, as_actor, days: int = 3):
    payload = InterviewCreate(application_id=application.id, scheduled_at=_at(days), meeting_link="https://meet.example.com/x")
    return interviews.schedule_interview(db_session, payload, actor=as_actor(owner))


def test_schedule_moves_application_to_review_and_invites(db_session, applied, as_actor):
    application, owner, applicant = applied

    interview = _schedule(db_session, application, owner, as_actor)

    assert interview.status == InterviewStatus.SCHEDULED
    assert interview.interview_type == InterviewType.VIDEO
    assert interview.applicant_id == applicant.id
    db_session.refresh(application)
    assert application.status == ApplicationStatus.REVIEWING
    kinds = db_session.scalars(select(Notification.kind).where(Notification.user_id == applicant.id)).all()
    assert "INTERVIEW_SCHEDULED" in kinds


def test_only_the_hiring_company_schedules(db_session, applied, make_user, as_actor):
    application, _, applicant = applied

    with pytest.raises(Forbidden):
        _schedule(db_session, application, applicant, as_actor)
    with pytest.raises(Forbidden):
        _schedule(db_session, application, make_user("stranger"), as_actor)
    with pytest.raises(NotFound):
        interviews.schedule_interview(
            db_session, InterviewCreate(application_id=424242, scheduled_at=_at(1)), actor=as_actor(applicant)
        )


def test_past_times_and_rejected_applications_are_refused(db_session, applied, as_actor):
    application, owner, _ = applied

    with pytest.raises(InvalidArgument) as exc:
        _schedule(db_session, application, owner, as_actor, days=-1)
    assert exc.value.code == "INTERVIEW_IN_PAST"

    jobs.set_application_status(db_session, application.id, ApplicationStatus.REJECTED, actor=as_actor(owner))
    with pytest.raises(InvalidState) as exc:
        _schedule(db_session, application, owner, as_actor)
    assert exc.value.code == "APPLICATION_CLOSED"


def test_naive_datetimes_are_rejected_by_the_schema():
    with pytest.raises(ValidationError):
        InterviewCreate(application_id=1, scheduled_at=datetime(2030, 1, 1, 10, 0))


def test_both_sides_list_their_interviews(db_session, applied, make_user, as_actor):
    application, owner, applicant = applied
    later = _schedule(db_session, application, owner, as_actor, days=5)
    sooner = _schedule(db_session, application, owner, as_actor, days=2)

    assert [i.id for i in interviews.list_interviews(db_session, actor=as_actor(owner))] == [sooner.id, later.id]
    assert [i.id for i in interviews.list_interviews(db_session, actor=as_actor(applicant))] == [sooner.id, later.id]
    assert interviews.list_interviews(db_session, actor=as_actor(make_user("other"))) == []
    with pytest.raises(Forbidden):
        interviews.get_interview(db_session, sooner.id, actor=as_actor(make_user("nosy")))


def test_reschedule_then_complete(db_session, applied, as_actor):
    application, owner, applicant = applied
    interview = _schedule(db_session, application, owner, as_actor)

    moved = interviews.update_interview(
        db_session, interview.id, InterviewUpdate(scheduled_at=_at(7), location="Room 4"), actor=as_actor(owner)
    )
    assert moved.status == InterviewStatus.RESCHEDULED
    assert moved.location == "Room 4"

    done = interviews.update_interview(
        db_session, interview.id, InterviewUpdate(status=InterviewStatus.COMPLETED), actor=as_actor(owner)
    )
    assert done.status == InterviewStatus.COMPLETED
    assert [i.id for i in interviews.list_interviews(db_session, actor=as_actor(applicant), upcoming=True)] == []

    with pytest.raises(InvalidState) as exc:
        interviews.update_interview(db_session, interview.id, InterviewUpdate(notes="late"), actor=as_actor(owner))
    assert exc.value.code == "INTERVIEW_CLOSED"


def test_applicant_may_only_cancel(db_session, applied, as_actor):
    application, owner, applicant = applied
    interview = _schedule(db_session, application, owner, as_actor)

    with pytest.raises(Forbidden) as exc:
        interviews.update_interview(db_session, interview.id, InterviewUpdate(scheduled_at=_at(9)), actor=as_actor(applicant))
    assert exc.value.code == "APPLICANT_MAY_ONLY_CANCEL"

    cancelled = interviews.update_interview(
        db_session, interview.id, InterviewUpdate(status=InterviewStatus.CANCELLED), actor=as_actor(applicant)
    )
    assert cancelled.status == InterviewStatus.CANCELLED
    kinds = db_session.scalars(select(Notification.kind).where(Notification.user_id == owner.id)).all()
    assert "INTERVIEW_CANCELLED" in kinds


def test_rescheduling_needs_a_time_and_scheduled_is_not_a_target(db_session, applied, as_actor):
    application, owner, _ = applied
    interview = _schedule(db_session, application, owner, as_actor)

    for payload in (
        InterviewUpdate(status=InterviewStatus.RESCHEDULED),
        InterviewUpdate(status=InterviewStatus.SCHEDULED),
        InterviewUpdate(duration_minutes=None),
        InterviewUpdate(),
    ):
        with pytest.raises(InvalidArgument):
            interviews.update_interview(db_session, interview.id, payload, actor=as_actor(owner))


def test_cancel_read_before_complete_cannot_revive(db_session, session_factory, applied, as_actor):
    application, owner, applicant = applied
    interview = _schedule(db_session, application, owner, as_actor)

    host = session_factory()
    guest = session_factory()
    try:
        # Both sides load the interview while it is still SCHEDULED.
        interviews.get_interview(host, interview.id, actor=as_actor(owner))
        interviews.get_interview(guest, interview.id, actor=as_actor(applicant))

        interviews.update_interview(
            host, interview.id, InterviewUpdate(status=InterviewStatus.COMPLETED), actor=as_actor(owner)
        )
        with pytest.raises(InvalidState):
            interviews.update_interview(
                guest, interview.id, InterviewUpdate(status=InterviewStatus.CANCELLED), actor=as_actor(applicant)
            )
    finally:
        host.close()
        guest.close()

    db_session.expire_all()
    assert interviews.get_interview(db_session, interview.id, actor=as_actor(owner)).status == InterviewStatus.COMPLETED


@pytest.mark.anyio
async def test_interview_endpoints(client, applied, headers_for):
    application, owner, applicant = applied

    created = await client.post(
        "/interviews",
        headers=headers_for(owner),
        json={"application_id": application.id, "scheduled_at": _at(4).isoformat(), "interview_type": "PHONE"},
    )
    assert created.status_code == 201, created.text
    interview_id = created.json()["id"]

    refused = await client.post(
        "/interviews",
        headers=headers_for(applicant),
        json={"application_id": application.id, "scheduled_at": _at(4).isoformat()},
    )
    assert refused.status_code == 403

    mine = await client.get("/interviews", headers=headers_for(applicant))
    assert [i["id"] for i in mine.json()] == [interview_id]

    cancelled = await client.patch(
        f"/interviews/{interview_id}", headers=headers_for(applicant), json={"status": "CANCELLED"}
    )
    assert cancelled.status_code == 200
    assert cancelled.json()["status"] == "CANCELLED"
