"""Freelancer profile services."""
from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.models.freelancer_profile import FreelancerProfile
from freelancehub.models.user import User
from freelancehub.schemas.profile import ProfileUpsert
from freelancehub.security import Actor
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, NotFound

logger = logging.getLogger(__name__)


def get_profile(db: Session, user_id: int) -> FreelancerProfile:
    profile = db.scalars(select(FreelancerProfile).where(FreelancerProfile.user_id == user_id)).first()
    if profile is None:
        raise NotFound("Freelancer profile not found.", code="PROFILE_NOT_FOUND")
    return profile


def lock_profile(db: Session, user_id: int) -> FreelancerProfile:
    """Return the profile row locked for update, creating an empty one if needed.

    The caller owns the transaction; nothing is committed here.
    """

    # populate_existing would discard unflushed changes on an already loaded row.
    db.flush()
    stmt = (
        select(FreelancerProfile)
        .where(FreelancerProfile.user_id == user_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    profile = db.scalars(stmt).first()
    if profile is None:
        profile = FreelancerProfile(user_id=user_id)
        db.add(profile)
        db.flush()
    return profile


def upsert_profile(db: Session, payload: ProfileUpsert, *, actor: Actor) -> FreelancerProfile:
    """Create or update the caller's own profile; aggregates are never touched."""

    if db.get(User, actor.user_id) is None:
        raise NotFound("User not found.", code="USER_NOT_FOUND")

    profile = db.scalars(select(FreelancerProfile).where(FreelancerProfile.user_id == actor.user_id)).first()
    created = profile is None
    if profile is None:
        profile = FreelancerProfile(user_id=actor.user_id)
        db.add(profile)

    profile.title = payload.title
    profile.bio = payload.bio
    profile.skills = list(payload.skills)
    profile.category = payload.category
    profile.hourly_rate = payload.hourly_rate
    profile.availability = payload.availability
    profile.experience_level = payload.experience_level

    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Profile was created concurrently; retry the update.", code="PROFILE_EXISTS") from exc

    log_audit(
        db,
        actor=actor.label,
        action="PROFILE_CREATED" if created else "PROFILE_UPDATED",
        entity="FreelancerProfile",
        entity_id=profile.id,
        data={"title": profile.title, "category": profile.category.value},
    )
    db.commit()
    db.refresh(profile)
    logger.info("Freelancer profile saved", extra={"user_id": actor.user_id, "created": created})
    return profile


def list_profiles(
    db: Session,
    *,
    category=None,
    skill: str | None = None,
    limit: int = 20,
    offset: int = 0,
) -> list[FreelancerProfile]:
    stmt = select(FreelancerProfile)
    if category is not None:
        stmt = stmt.where(FreelancerProfile.category == category)
    stmt = stmt.order_by(FreelancerProfile.rating.desc(), FreelancerProfile.id)
    profiles = list(db.scalars(stmt))
    if skill:
        # JSON containment differs per backend; filter the skill list in Python.
        needle = skill.lower()
        profiles = [p for p in profiles if any(needle == s.lower() for s in (p.skills or []))]
    return profiles[offset : offset + limit]


__all__ = ["get_profile", "lock_profile", "upsert_profile", "list_profiles"]
