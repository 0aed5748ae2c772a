"""Company services."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.company import Company, CompanyStatus
from freelancehub.models.user import UserRole
from freelancehub.schemas.company import CompanyCreate
from freelancehub.security import Actor
from freelancehub.services.notifications import notify
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, Forbidden, NotFound

logger = logging.getLogger(__name__)


def get_company(db: Session, company_id: int) -> Company:
    company = db.get(Company, company_id)
    if company is None:
        raise NotFound("Company not found.", code="COMPANY_NOT_FOUND")
    return company


def get_owned_company(db: Session, *, actor: Actor) -> Company:
    company = db.scalars(select(Company).where(Company.owner_id == actor.user_id)).first()
    if company is None:
        raise NotFound("You do not own a company.", code="COMPANY_NOT_FOUND")
    return company


def create_company(db: Session, payload: CompanyCreate, *, actor: Actor) -> Company:
    if actor.role not in (UserRole.COMPANY, UserRole.ADMIN):
        raise Forbidden("Only company accounts can register a company.", code="NOT_COMPANY_ACCOUNT")
    if db.scalar(select(Company.id).where(Company.owner_id == actor.user_id)) is not None:
        raise Conflict("You already own a company.", code="COMPANY_EXISTS")

    company = Company(
        owner_id=actor.user_id,
        name=payload.name,
        description=payload.description,
        email=str(payload.email),
        website=payload.website,
        status=CompanyStatus.PENDING,
    )
    db.add(company)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("You already own a company.", code="COMPANY_EXISTS") from exc
    log_audit(
        db,
        actor=actor.label,
        action="COMPANY_CREATED",
        entity="Company",
        entity_id=company.id,
        data={"name": company.name, "email": company.email},
    )
    db.commit()
    db.refresh(company)
    logger.info("Company created", extra={"company_id": company.id})
    return company


def set_company_status(db: Session, company_id: int, status: CompanyStatus, *, actor: Actor) -> Company:
    if not actor.is_admin:
        raise Forbidden("Only administrators can moderate companies.", code="ADMIN_ONLY")
    company = get_company(db, company_id)
    previous = company.status
    company.status = status
    log_audit(
        db,
        actor=actor.label,
        action="COMPANY_STATUS_CHANGED",
        entity="Company",
        entity_id=company.id,
        data={"from": previous.value, "to": status.value},
    )
    db.commit()
    db.refresh(company)
    notify(
        db,
        company.owner_id,
        "COMPANY_STATUS_CHANGED",
        "Company status updated",
        f'"{company.name}" is now {status.value.lower()}.',
        f"/companies/{company.id}",
    )
    return company


def list_companies(
    db: Session,
    *,
    status: CompanyStatus | None = CompanyStatus.APPROVED,
    limit: int = 20,
    offset: int = 0,
) -> list[Company]:
    stmt = select(Company)
    if status is not None:
        stmt = stmt.where(Company.status == status)
    stmt = stmt.order_by(Company.rating.desc(), Company.id).limit(limit).offset(offset)
    return list(db.scalars(stmt))


__all__ = ["get_company", "get_owned_company", "create_company", "set_company_status", "list_companies"]
