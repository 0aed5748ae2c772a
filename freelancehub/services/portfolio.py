"""Freelancer portfolio: showcase items, view counts and likes."""
from __future__ import annotations

import logging
from uuid import uuid4

from slugify import slugify
from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.portfolio import PortfolioItem, PortfolioLike
from freelancehub.models.user import UserRole
from freelancehub.schemas.portfolio import PortfolioItemCreate, PortfolioItemUpdate
from freelancehub.security import Actor
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Forbidden, InvalidArgument, NotFound

logger = logging.getLogger(__name__)

_REQUIRED_FIELDS = ("title", "description", "cover_image", "images", "skills")


def make_slug(title: str) -> str:
    """URL slug of ``title`` with a random suffix so equal titles never clash."""

    base = slugify(title, max_length=120) or "item"
    return f"{base}-{uuid4().hex[:8]}"


def get_item(db: Session, slug: str) -> PortfolioItem:
    item = db.scalars(select(PortfolioItem).where(PortfolioItem.slug == slug)).first()
    if item is None:
        raise NotFound("Portfolio item not found.", code="PORTFOLIO_ITEM_NOT_FOUND")
    return item


def _owned_item(db: Session, slug: str, actor: Actor) -> PortfolioItem:
    item = get_item(db, slug)
    if item.freelancer_id != actor.user_id and not actor.is_admin:
        raise Forbidden("Only the author can change this portfolio item.", code="NOT_PORTFOLIO_OWNER")
    return item


def create_item(db: Session, payload: PortfolioItemCreate, *, actor: Actor) -> PortfolioItem:
    if actor.role == UserRole.COMPANY:
        raise Forbidden("Company accounts do not keep a portfolio.", code="NOT_FREELANCER_ACCOUNT")

    item = PortfolioItem(
        freelancer_id=actor.user_id,
        slug=make_slug(payload.title),
        views=0,
        **payload.model_dump(),
    )
    db.add(item)
    db.flush()
    log_audit(
        db,
        actor=actor.label,
        action="PORTFOLIO_ITEM_CREATED",
        entity="PortfolioItem",
        entity_id=item.id,
        data={"slug": item.slug},
    )
    db.commit()
    db.refresh(item)
    logger.info("Portfolio item created", extra={"item_id": item.id, "freelancer_id": actor.user_id})
    return item


def list_items(db: Session, freelancer_id: int, *, limit: int = 20, offset: int = 0) -> list[PortfolioItem]:
    stmt = (
        select(PortfolioItem)
        .where(PortfolioItem.freelancer_id == freelancer_id)
        .order_by(PortfolioItem.created_at.desc(), PortfolioItem.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(db.scalars(stmt))


def view_item(db: Session, slug: str) -> PortfolioItem:
    """Return the item and count one view."""

    item = get_item(db, slug)
    db.execute(
        update(PortfolioItem)
        .where(PortfolioItem.id == item.id)
        .values(views=PortfolioItem.views + 1)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    db.refresh(item)
    return item


def update_item(db: Session, slug: str, payload: PortfolioItemUpdate, *, actor: Actor) -> PortfolioItem:
    item = _owned_item(db, slug, actor)
    changes = payload.model_dump(exclude_unset=True)
    for field in _REQUIRED_FIELDS:
        if field in changes and changes[field] is None:
            raise InvalidArgument(f"{field} cannot be cleared.", code="FIELD_REQUIRED")

    for field, value in changes.items():
        setattr(item, field, value)
    if "title" in changes:
        item.slug = make_slug(item.title)
    log_audit(
        db,
        actor=actor.label,
        action="PORTFOLIO_ITEM_UPDATED",
        entity="PortfolioItem",
        entity_id=item.id,
        data={"fields": sorted(changes), "slug": item.slug},
    )
    db.commit()
    db.refresh(item)
    return item


def delete_item(db: Session, slug: str, *, actor: Actor) -> None:
    item = _owned_item(db, slug, actor)
    item_id = item.id
    db.delete(item)
    log_audit(db, actor=actor.label, action="PORTFOLIO_ITEM_DELETED", entity="PortfolioItem", entity_id=item_id)
    db.commit()
    logger.info("Portfolio item deleted", extra={"item_id": item_id})


def _like_count(db: Session, item_id: int) -> int:
    return int(db.scalar(select(func.count(PortfolioLike.id)).where(PortfolioLike.item_id == item_id)) or 0)


def toggle_like(db: Session, slug: str, *, actor: Actor) -> tuple[bool, int]:
    """Like the item, or remove the caller's like; returns ``(liked, like_count)``."""

    item = get_item(db, slug)
    removed = db.execute(
        delete(PortfolioLike)
        .where(PortfolioLike.item_id == item.id, PortfolioLike.user_id == actor.user_id)
        .execution_options(synchronize_session=False)
    )
    liked = removed.rowcount == 0
    if liked:
        db.add(PortfolioLike(item_id=item.id, user_id=actor.user_id))
        try:
            db.flush()
        except IntegrityError:
            # A concurrent request liked it first; the like stands.
            db.rollback()
            return True, _like_count(db, item.id)
    db.commit()
    db.expire(item, ["likes"])
    return liked, _like_count(db, item.id)


__all__ = [
    "make_slug",
    "get_item",
    "create_item",
    "list_items",
    "view_item",
    "update_item",
    "delete_item",
    "toggle_like",
]
