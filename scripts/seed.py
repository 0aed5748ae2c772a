"""Seed a demo marketplace: a client, a freelancer, a company and an open project."""
from __future__ import annotations

from decimal import Decimal

from dotenv import load_dotenv

load_dotenv()

from freelancehub import models  # noqa: E402
from freelancehub.config import get_settings  # noqa: E402
from freelancehub.db import session_scope  # noqa: E402
from freelancehub.schemas.company import CompanyCreate  # noqa: E402
from freelancehub.schemas.profile import ProfileUpsert  # noqa: E402
from freelancehub.schemas.project import ProjectCreate  # noqa: E402
from freelancehub.security import Actor  # noqa: E402
from freelancehub.services import companies, profiles, projects  # noqa: E402


def main() -> None:
    settings = get_settings()
    print(f"Using database: {settings.database_url}")

    with session_scope() as session:
        alice = models.User(username="alice", email="alice@example.com")
        bob = models.User(username="bob", email="bob@example.com")
        acme = models.User(username="acme", email="jobs@acme.example.com", role=models.UserRole.COMPANY)
        session.add_all([alice, bob, acme])
        session.commit()

        profiles.upsert_profile(
            session,
            ProfileUpsert(title="Backend developer", skills=["python", "fastapi"], hourly_rate=Decimal("45")),
            actor=Actor(user_id=bob.id, role=bob.role),
        )
        companies.create_company(
            session,
            CompanyCreate(name="Acme", email="jobs@acme.example.com", website="https://acme.example.com"),
            actor=Actor(user_id=acme.id, role=acme.role),
        )
        projects.create_project(
            session,
            ProjectCreate(
                title="Build a landing page",
                description="Single page marketing site with a contact form.",
                category=models.ProjectCategory.WEB_DEVELOPMENT,
                skills=["html", "css"],
                budget_min=Decimal("300"),
                budget_max=Decimal("800"),
            ),
            actor=Actor(user_id=alice.id, role=alice.role),
        )
        print("Seed data inserted.")


if __name__ == "__main__":
    main()
