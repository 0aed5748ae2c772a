"""Company endpoints."""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.company import Company, CompanyStatus
from freelancehub.models.user import UserRole
from freelancehub.schemas.company import CompanyCreate, CompanyRead, CompanyStatusUpdate
from freelancehub.schemas.review import ReviewSummary
from freelancehub.security import Actor, require_actor, require_role
from freelancehub.services import companies as companies_service
from freelancehub.services import reviews as reviews_service

router = APIRouter(prefix="/companies", tags=["companies"])
settings = get_settings()


@router.post("", response_model=CompanyRead, status_code=status.HTTP_201_CREATED)
def create_company(
    payload: CompanyCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.COMPANY})),
) -> Company:
    return companies_service.create_company(db, payload, actor=actor)


@router.get("", response_model=list[CompanyRead])
def list_companies(
    company_status: CompanyStatus | None = Query(default=CompanyStatus.APPROVED, alias="status"),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Company]:
    return companies_service.list_companies(db, status=company_status, limit=limit, offset=offset)


@router.get("/mine", response_model=CompanyRead)
def get_my_company(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Company:
    return companies_service.get_owned_company(db, actor=actor)


@router.get("/{company_id}", response_model=CompanyRead)
def get_company(
    company_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Company:
    return companies_service.get_company(db, company_id)


@router.post("/{company_id}/status", response_model=CompanyRead)
def set_company_status(
    company_id: int,
    payload: CompanyStatusUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> Company:
    return companies_service.set_company_status(db, company_id, payload.status, actor=actor)


@router.get("/{company_id}/reviews", response_model=ReviewSummary)
def get_company_reviews(
    company_id: int,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> dict:
    return reviews_service.company_reviews(db, company_id, limit=limit, offset=offset)
