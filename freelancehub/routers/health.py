"""Liveness and readiness report for the marketplace backend."""
from __future__ import annotations

import logging

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import APIRouter

from freelancehub import db
from freelancehub.config import AppInfo, get_settings
from freelancehub.services.notifications import get_notification_sink

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger(__name__)


def _expected_migration_head() -> str | None:
    try:
        return ScriptDirectory.from_config(Config("alembic.ini")).get_current_head()
    except Exception:  # noqa: BLE001
        logger.exception("Alembic head revision unavailable")
        return None


def _database_report() -> dict[str, object]:
    """Reachability, locking support and schema revision of the database."""

    report: dict[str, object] = {
        "ok": False,
        "dialect": None,
        "row_locks": False,
        "revision": None,
        "migrations": "unknown",
    }
    try:
        db.ping()
    except Exception:  # noqa: BLE001
        logger.exception("Database unreachable")
        return report

    engine = db.get_engine()
    report.update(ok=True, dialect=engine.dialect.name, row_locks=db.supports_row_locks(engine))
    try:
        report["revision"] = db.current_revision()
    except Exception:  # noqa: BLE001
        logger.exception("Schema revision unavailable")
        return report

    expected = _expected_migration_head()
    if expected is not None:
        report["migrations"] = "up_to_date" if report["revision"] == expected else "out_of_date"
    return report


@router.get("", summary="Health check")
def healthcheck() -> dict[str, object]:
    settings = get_settings()
    info = AppInfo()
    database = _database_report()
    healthy = database["ok"] and database["migrations"] == "up_to_date"
    sink = get_notification_sink()
    return {
        "status": "ok" if healthy else "degraded",
        "app": info.name,
        "version": info.version,
        "env": settings.app_env,
        "database": database,
        "notification_sink": getattr(sink, "__name__", type(sink).__name__),
        "settle_earnings_to_wallet": settings.SETTLE_EARNINGS_TO_WALLET,
    }
