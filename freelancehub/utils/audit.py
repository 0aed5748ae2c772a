"""Audit logging helper utilities."""
from __future__ import annotations

from typing import Any, Mapping

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from freelancehub.models.audit import AuditLog
from freelancehub.utils.time import utcnow


SENSITIVE_KEYS = {
    "email",
    "account_number",
    "payment_details",
    "url",
}


def _mask_value(key: str, value: Any) -> Any:
    if value is None:
        return None

    if key == "account_number":
        stripped = str(value).replace(" ", "")
        if len(stripped) <= 4:
            return f"***{stripped}"
        return f"***{stripped[-4:]}"

    if key == "email":
        text = str(value)
        if "@" in text:
            _, domain = text.split("@", 1)
            return f"***@{domain}"
        return "***"

    if key == "url":
        text = str(value)
        base = text.split("?", 1)[0]
        if "/" in base:
            prefix = base.rsplit("/", 1)[0]
            return f"{prefix}/***"
        return "***/***"

    if key == "payment_details":
        return "***"

    return value


def sanitize_payload_for_audit(data: Any) -> Any:
    """Return a copy of ``data`` with obvious PII fields masked."""

    if isinstance(data, Mapping):
        sanitized: dict[str, Any] = {}
        for key, value in data.items():
            masked_value = _mask_value(key, value) if key in SENSITIVE_KEYS else value
            sanitized[key] = sanitize_payload_for_audit(masked_value)
        return sanitized

    if isinstance(data, list):
        return [sanitize_payload_for_audit(item) for item in data]

    return data


def log_audit(
    db: Session,
    *,
    actor: str,
    action: str,
    entity: str,
    entity_id: int | None,
    data: dict | None = None,
) -> None:
    """Persist an audit entry in the shared AuditLog table.

    The contract and project references are filled from the entity itself
    or from ``contract_id``/``project_id`` keys in ``data``.
    """

    data = data or {}
    contract_id = entity_id if entity == "Contract" else data.get("contract_id")
    project_id = entity_id if entity == "Project" else data.get("project_id")
    db.add(
        AuditLog(
            actor=actor,
            actor_user_id=parse_actor_label(actor),
            action=action,
            entity=entity,
            entity_id=entity_id if entity_id is not None else 0,
            contract_id=contract_id,
            project_id=project_id,
            data_json=sanitize_payload_for_audit(data),
            at=utcnow(),
        )
    )


def actor_label(user_id: int | None, fallback: str = "system") -> str:
    """Return the canonical actor string stored in audit rows."""

    if user_id is None:
        return fallback
    return f"user:{user_id}"


def parse_actor_label(label: str) -> int | None:
    """Inverse of :func:`actor_label`; ``None`` for system actors."""

    prefix, _, raw_id = label.partition(":")
    if prefix != "user" or not raw_id.isdigit():
        return None
    return int(raw_id)


def audit_trail(
    db: Session,
    *,
    contract_id: int | None = None,
    project_id: int | None = None,
    limit: int = 100,
) -> list[AuditLog]:
    """Audit rows touching a contract and/or a project, oldest first."""

    clauses = []
    if contract_id is not None:
        clauses.append(AuditLog.contract_id == contract_id)
    if project_id is not None:
        clauses.append(AuditLog.project_id == project_id)
    if not clauses:
        return []
    stmt = select(AuditLog).where(or_(*clauses)).order_by(AuditLog.at, AuditLog.id).limit(limit)
    return list(db.scalars(stmt))


__all__ = ["sanitize_payload_for_audit", "log_audit", "actor_label", "parse_actor_label", "audit_trail"]
