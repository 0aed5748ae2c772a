"""Review & reputation aggregator.

Ratings are never nudged incrementally: after each write the target's
average and count are recomputed from the review rows while the target's
row is locked.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.company import Company
from freelancehub.models.contract import Contract, ContractStatus
from freelancehub.models.review import Review
from freelancehub.security import Actor
from freelancehub.services import profiles
from freelancehub.services.notifications import notify
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, Forbidden, InvalidArgument, InvalidState, NotFound

logger = logging.getLogger(__name__)


def _check_rating(rating: int) -> int:
    if not isinstance(rating, int) or isinstance(rating, bool) or not 1 <= rating <= 5:
        raise InvalidArgument("Rating must be an integer between 1 and 5.", code="INVALID_RATING")
    return rating


def _aggregate(db: Session, column, target_id: int) -> tuple[float, int]:
    avg, count = db.execute(
        select(func.avg(Review.rating), func.count(Review.id)).where(column == target_id)
    ).one()
    if not count:
        return 0.0, 0
    return round(float(avg), 1), int(count)


def _lock_company(db: Session, company_id: int) -> Company:
    db.flush()
    company = db.scalars(
        select(Company)
        .where(Company.id == company_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).first()
    if company is None:
        raise NotFound("Company not found.", code="COMPANY_NOT_FOUND")
    return company


def _refresh_freelancer_rating(db: Session, freelancer_id: int) -> None:
    profile = profiles.lock_profile(db, freelancer_id)
    db.flush()
    profile.rating, profile.total_reviews = _aggregate(db, Review.freelancer_id, freelancer_id)


def _refresh_company_rating(db: Session, company_id: int) -> None:
    company = _lock_company(db, company_id)
    db.flush()
    company.rating, company.total_reviews = _aggregate(db, Review.company_id, company_id)


def _refresh_target(db: Session, review: Review) -> None:
    if review.freelancer_id is not None:
        _refresh_freelancer_rating(db, review.freelancer_id)
    elif review.company_id is not None:
        _refresh_company_rating(db, review.company_id)


def _flush_new_review(db: Session, review: Review) -> None:
    db.add(review)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("You have already reviewed this.", code="REVIEW_EXISTS") from exc


def submit_freelancer_review(
    db: Session,
    contract_id: int,
    *,
    actor: Actor,
    rating: int,
    comment: str,
    title: str | None = None,
) -> Review:
    contract = db.get(Contract, contract_id)
    if contract is None:
        raise NotFound("Contract not found.", code="CONTRACT_NOT_FOUND")
    if contract.client_id != actor.user_id:
        raise Forbidden("Only the client of the contract can review the freelancer.", code="NOT_CONTRACT_CLIENT")
    if contract.status != ContractStatus.COMPLETED:
        raise InvalidState("Only completed contracts can be reviewed.", code="CONTRACT_NOT_COMPLETED")
    _check_rating(rating)
    existing = db.scalar(
        select(Review.id).where(Review.contract_id == contract.id, Review.reviewer_id == actor.user_id)
    )
    if existing is not None:
        raise Conflict("You have already reviewed this contract.", code="REVIEW_EXISTS")

    profiles.lock_profile(db, contract.freelancer_id)
    review = Review(
        reviewer_id=actor.user_id,
        freelancer_id=contract.freelancer_id,
        contract_id=contract.id,
        rating=rating,
        title=title,
        comment=comment,
    )
    _flush_new_review(db, review)
    _refresh_freelancer_rating(db, contract.freelancer_id)
    log_audit(
        db,
        actor=actor.label,
        action="REVIEW_CREATED",
        entity="Review",
        entity_id=review.id,
        data={"freelancer_id": contract.freelancer_id, "contract_id": contract.id, "rating": rating},
    )
    db.commit()
    db.refresh(review)
    logger.info("Freelancer review created", extra={"review_id": review.id, "freelancer_id": review.freelancer_id})

    notify(
        db,
        contract.freelancer_id,
        "REVIEW_RECEIVED",
        "New review",
        f"You received a {rating}-star review.",
        f"/freelancers/{contract.freelancer_id}",
    )
    return review


def submit_company_review(
    db: Session,
    company_id: int,
    *,
    actor: Actor,
    rating: int,
    comment: str,
    title: str | None = None,
) -> Review:
    company = db.get(Company, company_id)
    if company is None:
        raise NotFound("Company not found.", code="COMPANY_NOT_FOUND")
    if company.owner_id == actor.user_id:
        raise Forbidden("You cannot review your own company.", code="OWN_COMPANY")
    _check_rating(rating)
    existing = db.scalar(
        select(Review.id).where(Review.company_id == company.id, Review.reviewer_id == actor.user_id)
    )
    if existing is not None:
        raise Conflict("You have already reviewed this company.", code="REVIEW_EXISTS")

    _lock_company(db, company.id)
    review = Review(reviewer_id=actor.user_id, company_id=company.id, rating=rating, title=title, comment=comment)
    _flush_new_review(db, review)
    _refresh_company_rating(db, company.id)
    log_audit(
        db,
        actor=actor.label,
        action="REVIEW_CREATED",
        entity="Review",
        entity_id=review.id,
        data={"company_id": company.id, "rating": rating},
    )
    db.commit()
    db.refresh(review)
    logger.info("Company review created", extra={"review_id": review.id, "company_id": company.id})

    notify(
        db,
        company.owner_id,
        "REVIEW_RECEIVED",
        "New company review",
        f'"{company.name}" received a {rating}-star review.',
        f"/companies/{company.id}",
    )
    return review


def _get_review(db: Session, review_id: int) -> Review:
    review = db.get(Review, review_id)
    if review is None:
        raise NotFound("Review not found.", code="REVIEW_NOT_FOUND")
    return review


def update_review(
    db: Session,
    review_id: int,
    *,
    actor: Actor,
    rating: int | None = None,
    comment: str | None = None,
    title: str | None = None,
) -> Review:
    review = _get_review(db, review_id)
    if review.reviewer_id != actor.user_id:
        raise Forbidden("Only the author can edit a review.", code="NOT_REVIEW_AUTHOR")
    if rating is not None:
        review.rating = _check_rating(rating)
    if comment is not None:
        review.comment = comment
    if title is not None:
        review.title = title
    _refresh_target(db, review)
    log_audit(
        db,
        actor=actor.label,
        action="REVIEW_UPDATED",
        entity="Review",
        entity_id=review.id,
        data={"rating": review.rating},
    )
    db.commit()
    db.refresh(review)
    return review


def delete_review(db: Session, review_id: int, *, actor: Actor) -> None:
    review = _get_review(db, review_id)
    if review.reviewer_id != actor.user_id and not actor.is_admin:
        raise Forbidden("Only the author or an administrator can delete a review.", code="NOT_REVIEW_AUTHOR")
    db.delete(review)
    _refresh_target(db, review)
    log_audit(db, actor=actor.label, action="REVIEW_DELETED", entity="Review", entity_id=review_id)
    db.commit()
    logger.info("Review deleted", extra={"review_id": review_id})


def _summary(db: Session, column, target_id: int, *, limit: int, offset: int) -> dict[str, Any]:
    reviews = list(
        db.scalars(
            select(Review)
            .where(column == target_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset(offset)
        )
    )
    distribution = {star: 0 for star in range(1, 6)}
    for star, count in db.execute(
        select(Review.rating, func.count(Review.id)).where(column == target_id).group_by(Review.rating)
    ):
        distribution[int(star)] = int(count)
    average, total = _aggregate(db, column, target_id)
    return {"average": average, "total": total, "distribution": distribution, "reviews": reviews}


def freelancer_reviews(db: Session, freelancer_id: int, *, limit: int = 20, offset: int = 0) -> dict[str, Any]:
    return _summary(db, Review.freelancer_id, freelancer_id, limit=limit, offset=offset)


def company_reviews(db: Session, company_id: int, *, limit: int = 20, offset: int = 0) -> dict[str, Any]:
    if db.get(Company, company_id) is None:
        raise NotFound("Company not found.", code="COMPANY_NOT_FOUND")
    return _summary(db, Review.company_id, company_id, limit=limit, offset=offset)


__all__ = [
    "submit_freelancer_review",
    "submit_company_review",
    "update_review",
    "delete_review",
    "freelancer_reviews",
    "company_reviews",
]
