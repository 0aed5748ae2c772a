"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from decimal import Decimal
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

# --- Default environment, set before the application is imported
os.environ.setdefault("DATABASE_URL", "sqlite:///./freelancehub_test.db")
os.environ.setdefault("FREELANCEHUB_ENV", "test")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from freelancehub.db import get_db, get_engine, get_sessionmaker  # noqa: E402
from freelancehub.main import app  # noqa: E402
from freelancehub.models import (  # noqa: E402
    ApiKey,
    Application,
    Base,
    Company,
    CompanyStatus,
    Contract,
    Duration,
    Job,
    JobStatus,
    JobType,
    Project,
    ProjectCategory,
    Proposal,
    User,
    UserRole,
)
from freelancehub.schemas.contract import MilestoneSpec  # noqa: E402
from freelancehub.schemas.job import ApplicationCreate, JobCreate  # noqa: E402
from freelancehub.schemas.project import ProjectCreate  # noqa: E402
from freelancehub.schemas.proposal import ProposalCreate  # noqa: E402
from freelancehub.security import Actor  # noqa: E402
from freelancehub.services import contracts, jobs, projects, proposals  # noqa: E402
from freelancehub.services.notifications import set_notification_sink  # noqa: E402
from freelancehub.utils.apikey import hash_key  # noqa: E402

ROOT = Path(__file__).resolve().parents[1]
DB_PATH = Path("./freelancehub_test.db")


def _run_migrations() -> None:
    cfg = Config(str(ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(ROOT / "alembic"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    cfg.attributes["explicit_url"] = True
    command.upgrade(cfg, "head")


# --- Fresh file database, schema built by Alembic only
if DB_PATH.exists():
    DB_PATH.unlink()
_run_migrations()


def _truncate_all() -> None:
    with get_engine().begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def session_factory():
    return get_sessionmaker()


@pytest.fixture
def db_session(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()
        _truncate_all()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture(autouse=True)
def reset_notification_sink() -> Iterator[None]:
    yield
    set_notification_sink(None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _factory(
        name: str = "user",
        *,
        role: UserRole = UserRole.USER,
        balance: str = "0",
        is_active: bool = True,
    ) -> User:
        suffix = uuid4().hex[:8]
        user = User(
            username=f"{name}-{suffix}",
            email=f"{name}-{suffix}@example.com",
            role=role,
            balance=Decimal(balance),
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory


def actor_for(user: User) -> Actor:
    return Actor(user_id=user.id, role=user.role)


@pytest.fixture
def as_actor() -> Callable[[User], Actor]:
    return actor_for


@pytest.fixture
def headers_for(db_session: Session) -> Callable[[User], dict[str, str]]:
    """Issue an API key bound to ``user`` and return request headers."""

    def _factory(user: User) -> dict[str, str]:
        token = f"fh_test.{uuid4().hex}"
        db_session.add(
            ApiKey(
                name=f"key-{uuid4().hex}",
                prefix="fh_test",
                key_hash=hash_key(token),
                user_id=user.id,
                is_active=True,
            )
        )
        db_session.commit()
        return {"Authorization": f"Bearer {token}"}

    return _factory


@pytest.fixture
def make_project(db_session: Session) -> Callable[..., Project]:
    def _factory(owner: User, *, title: str = "Landing page", company_id: int | None = None) -> Project:
        payload = ProjectCreate(
            title=title,
            description="Build a small marketing site.",
            category=ProjectCategory.WEB_DEVELOPMENT,
            skills=["python"],
            budget_min=Decimal("100"),
            budget_max=Decimal("1000"),
            company_id=company_id,
        )
        return projects.create_project(db_session, payload, actor=actor_for(owner))

    return _factory


@pytest.fixture
def make_proposal(db_session: Session) -> Callable[..., Proposal]:
    def _factory(project: Project, freelancer: User, *, bid: str = "500.00") -> Proposal:
        payload = ProposalCreate(
            project_id=project.id,
            cover_letter="I can do this.",
            bid_amount=Decimal(bid),
            estimated_duration=Duration.LESS_THAN_1_MONTH,
        )
        return proposals.submit_proposal(db_session, payload, actor=actor_for(freelancer))

    return _factory


@pytest.fixture
def make_contract(
    db_session: Session,
    make_user: Callable[..., User],
    make_project: Callable[..., Project],
    make_proposal: Callable[..., Proposal],
) -> Callable[..., tuple[Contract, User, User]]:
    """Post a project, accept one bid and open its contract.

    Returns ``(contract, client, freelancer)``.
    """

    def _factory(
        amounts: list[str] | None = None,
        *,
        bid: str = "500.00",
        client_balance: str = "10000.00",
    ) -> tuple[Contract, User, User]:
        client_user = make_user("client", balance=client_balance)
        freelancer = make_user("freelancer")
        project = make_project(client_user)
        proposal = make_proposal(project, freelancer, bid=bid)
        proposals.accept_proposal(db_session, proposal.id, actor=actor_for(client_user))
        planned = None
        if amounts is not None:
            planned = [
                MilestoneSpec(title=f"Milestone {position}", amount=Decimal(amount))
                for position, amount in enumerate(amounts, start=1)
            ]
        contract = contracts.create_contract(db_session, proposal.id, actor=actor_for(client_user), milestones=planned)
        return contract, client_user, freelancer

    return _factory


@pytest.fixture
def make_company(db_session: Session, make_user: Callable[..., User]) -> Callable[..., Company]:
    def _factory(*, status: CompanyStatus = CompanyStatus.APPROVED, owner: User | None = None) -> Company:
        owner = owner or make_user("company", role=UserRole.COMPANY)
        company = Company(
            owner_id=owner.id,
            name=f"Acme {uuid4().hex[:6]}",
            description="",
            email=f"hr-{uuid4().hex[:6]}@acme.example.com",
            status=status,
        )
        db_session.add(company)
        db_session.commit()
        db_session.refresh(company)
        return company

    return _factory


@pytest.fixture
def open_job(
    db_session: Session, make_company: Callable[..., Company], make_user: Callable[..., User]
) -> tuple[Job, User, User]:
    """An APPROVED job; returns ``(job, company_owner, admin)``."""

    company = make_company()
    owner = db_session.get(User, company.owner_id)
    admin = make_user("admin", role=UserRole.ADMIN)
    payload = JobCreate(title="Backend engineer", description="Python services.", location="Remote", job_type=JobType.REMOTE)
    job = jobs.create_job(db_session, payload, actor=actor_for(owner))
    job = jobs.set_job_status(db_session, job.id, JobStatus.APPROVED, actor=actor_for(admin))
    return job, owner, admin


@pytest.fixture
def make_application(db_session: Session) -> Callable[..., Application]:
    def _factory(job: Job, applicant: User) -> Application:
        payload = ApplicationCreate(job_id=job.id, cv_url="https://cv.example.com/me.pdf")
        return jobs.apply(db_session, payload, actor=actor_for(applicant))

    return _factory
