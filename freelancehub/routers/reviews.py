"""Review endpoints."""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from freelancehub.db import get_db
from freelancehub.models.review import Review
from freelancehub.schemas.review import CompanyReviewCreate, FreelancerReviewCreate, ReviewRead, ReviewUpdate
from freelancehub.security import Actor, require_actor
from freelancehub.services import reviews as reviews_service

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.post("/freelancer", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def review_freelancer(
    payload: FreelancerReviewCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Review:
    return reviews_service.submit_freelancer_review(
        db,
        payload.contract_id,
        actor=actor,
        rating=payload.rating,
        comment=payload.comment,
        title=payload.title,
    )


@router.post("/company", response_model=ReviewRead, status_code=status.HTTP_201_CREATED)
def review_company(
    payload: CompanyReviewCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Review:
    return reviews_service.submit_company_review(
        db,
        payload.company_id,
        actor=actor,
        rating=payload.rating,
        comment=payload.comment,
        title=payload.title,
    )


@router.patch("/{review_id}", response_model=ReviewRead)
def update_review(
    review_id: int,
    payload: ReviewUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Review:
    return reviews_service.update_review(
        db,
        review_id,
        actor=actor,
        rating=payload.rating,
        comment=payload.comment,
        title=payload.title,
    )


@router.delete("/{review_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_review(
    review_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Response:
    reviews_service.delete_review(db, review_id, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
