"""Recompute cached counters (proposal/application counts, completed projects)."""
from __future__ import annotations

from dotenv import load_dotenv

load_dotenv()

from freelancehub.config import get_settings  # noqa: E402
from freelancehub.core.logging import setup_logging  # noqa: E402
from freelancehub.db import session_scope  # noqa: E402
from freelancehub.services.counters import resync_all  # noqa: E402


def main() -> None:
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, env=settings.app_env, fmt=settings.LOG_FORMAT)
    with session_scope() as session:
        summary = resync_all(session)
    print(f"Counters resynchronised: {summary}")


if __name__ == "__main__":
    main()
