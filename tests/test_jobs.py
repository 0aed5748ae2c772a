"""Companies, job postings and applications."""
import pytest

from freelancehub.models import ApplicationStatus, CompanyStatus, JobStatus, JobType, User, UserRole
from freelancehub.schemas.company import CompanyCreate
from freelancehub.schemas.job import ApplicationCreate, JobCreate
from freelancehub.services import companies, jobs
from freelancehub.utils.errors import Conflict, Forbidden, InvalidState, NotFound


def _job_payload(title: str = "Backend engineer") -> JobCreate:
    return JobCreate(title=title, description="Python services.", location="Remote", job_type=JobType.REMOTE)


def test_company_registration_and_moderation(db_session, make_user, as_actor):
    owner = make_user("acme", role=UserRole.COMPANY)
    admin = make_user("admin", role=UserRole.ADMIN)

    company = companies.create_company(
        db_session, CompanyCreate(name="Acme", email="hr@acme.example.com"), actor=as_actor(owner)
    )
    assert company.status == CompanyStatus.PENDING
    assert companies.list_companies(db_session) == []

    with pytest.raises(Conflict):
        companies.create_company(db_session, CompanyCreate(name="Acme 2", email="x@acme.example.com"), actor=as_actor(owner))
    with pytest.raises(Forbidden):
        companies.set_company_status(db_session, company.id, CompanyStatus.APPROVED, actor=as_actor(owner))

    companies.set_company_status(db_session, company.id, CompanyStatus.APPROVED, actor=as_actor(admin))
    assert [c.id for c in companies.list_companies(db_session)] == [company.id]


def test_plain_users_cannot_register_companies(db_session, make_user, as_actor):
    with pytest.raises(Forbidden):
        companies.create_company(
            db_session, CompanyCreate(name="Nope", email="n@example.com"), actor=as_actor(make_user("u"))
        )


def test_jobs_need_an_approved_company(db_session, make_company, as_actor):
    company = make_company(status=CompanyStatus.PENDING)
    owner = db_session.get(User, company.owner_id)

    with pytest.raises(InvalidState) as exc:
        jobs.create_job(db_session, _job_payload(), actor=as_actor(owner))
    assert exc.value.code == "COMPANY_NOT_APPROVED"


def test_apply_counts_and_notifies(db_session, open_job, make_user, as_actor):
    job, owner, _ = open_job
    applicant = make_user("applicant")

    application = jobs.apply(
        db_session, ApplicationCreate(job_id=job.id, cv_url="https://cv.example.com/me.pdf"), actor=as_actor(applicant)
    )

    assert application.status == ApplicationStatus.PENDING
    db_session.refresh(job)
    assert job.application_count == 1
    with pytest.raises(Conflict):
        jobs.apply(
            db_session, ApplicationCreate(job_id=job.id, cv_url="https://cv.example.com/2.pdf"), actor=as_actor(applicant)
        )
    with pytest.raises(Forbidden):
        jobs.apply(
            db_session, ApplicationCreate(job_id=job.id, cv_url="https://cv.example.com/o.pdf"), actor=as_actor(owner)
        )


def test_withdraw_application_decrements_count(db_session, open_job, make_user, as_actor):
    job, owner, _ = open_job
    applicant = make_user("applicant")
    application = jobs.apply(
        db_session, ApplicationCreate(job_id=job.id, cv_url="https://cv.example.com/me.pdf"), actor=as_actor(applicant)
    )

    jobs.withdraw_application(db_session, application.id, actor=as_actor(applicant))

    db_session.refresh(job)
    assert job.application_count == 0
    assert jobs.list_my_applications(db_session, actor=as_actor(applicant)) == []


def test_reviewed_application_cannot_be_withdrawn(db_session, open_job, make_user, as_actor):
    job, owner, _ = open_job
    applicant = make_user("applicant")
    application = jobs.apply(
        db_session, ApplicationCreate(job_id=job.id, cv_url="https://cv.example.com/me.pdf"), actor=as_actor(applicant)
    )

    jobs.set_application_status(db_session, application.id, ApplicationStatus.REVIEWING, actor=as_actor(owner))

    with pytest.raises(InvalidState):
        jobs.withdraw_application(db_session, application.id, actor=as_actor(applicant))
    assert [a.id for a in jobs.list_job_applications(db_session, job.id, actor=as_actor(owner))] == [application.id]


def test_owner_may_only_close_jobs(db_session, open_job, as_actor):
    job, owner, admin = open_job

    with pytest.raises(Forbidden):
        jobs.set_job_status(db_session, job.id, JobStatus.REJECTED, actor=as_actor(owner))

    closed = jobs.set_job_status(db_session, job.id, JobStatus.CLOSED, actor=as_actor(owner))
    assert closed.status == JobStatus.CLOSED
    assert jobs.list_jobs(db_session) == []
    with pytest.raises(InvalidState):
        jobs.set_job_status(db_session, job.id, JobStatus.APPROVED, actor=as_actor(admin))


def test_saved_jobs_are_private_bookmarks(db_session, open_job, make_user, as_actor):
    job, _, _ = open_job
    reader = make_user("reader")

    saved = jobs.save_job(db_session, job.id, actor=as_actor(reader))
    with pytest.raises(Conflict) as exc:
        jobs.save_job(db_session, job.id, actor=as_actor(reader))
    assert exc.value.code == "JOB_ALREADY_SAVED"
    with pytest.raises(NotFound):
        jobs.save_job(db_session, 424242, actor=as_actor(reader))

    listed = jobs.list_saved_jobs(db_session, actor=as_actor(reader))
    assert [(s.id, s.job.title) for s in listed] == [(saved.id, job.title)]
    assert jobs.list_saved_jobs(db_session, actor=as_actor(make_user("other"))) == []

    with pytest.raises(NotFound):
        jobs.unsave_job(db_session, saved.id, actor=as_actor(make_user("thief")))
    jobs.unsave_job(db_session, saved.id, actor=as_actor(reader))
    assert jobs.list_saved_jobs(db_session, actor=as_actor(reader)) == []
