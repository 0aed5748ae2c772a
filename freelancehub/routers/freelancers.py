"""Freelancer profile endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.freelancer_profile import FreelancerProfile
from freelancehub.models.project import ProjectCategory
from freelancehub.schemas.profile import ProfileRead, ProfileUpsert
from freelancehub.schemas.review import ReviewSummary
from freelancehub.security import Actor, require_actor
from freelancehub.services import profiles as profiles_service
from freelancehub.services import reviews as reviews_service

router = APIRouter(prefix="/freelancers", tags=["freelancers"])
settings = get_settings()


@router.put("/me", response_model=ProfileRead)
def upsert_my_profile(
    payload: ProfileUpsert,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> FreelancerProfile:
    return profiles_service.upsert_profile(db, payload, actor=actor)


@router.get("", response_model=list[ProfileRead])
def list_freelancers(
    category: ProjectCategory | None = None,
    skill: str | None = None,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[FreelancerProfile]:
    return profiles_service.list_profiles(db, category=category, skill=skill, limit=limit, offset=offset)


@router.get("/{user_id}", response_model=ProfileRead)
def get_freelancer(
    user_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> FreelancerProfile:
    return profiles_service.get_profile(db, user_id)


@router.get("/{user_id}/reviews", response_model=ReviewSummary)
def get_freelancer_reviews(
    user_id: int,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> dict:
    return reviews_service.freelancer_reviews(db, user_id, limit=limit, offset=offset)
