"""Security dependencies resolving the authenticated actor from an API key."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Set

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from freelancehub.db import get_db
from freelancehub.models.api_key import ApiKey
from freelancehub.models.user import User, UserRole
from freelancehub.utils.apikey import find_valid_key
from freelancehub.utils.errors import error_response
from freelancehub.utils.time import utcnow


@dataclass(frozen=True)
class Actor:
    """Identity of the caller as seen by the engagement services."""

    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def label(self) -> str:
        return f"user:{self.user_id}"


def _extract_key(
    authorization: str | None = Header(default=None),
    x_api_key: str | None = Header(default=None, alias="X-API-Key"),
) -> str | None:
    """Read the key from ``Authorization: Bearer ...`` or ``X-API-Key``."""
    if x_api_key:
        return x_api_key.strip()
    if authorization and authorization.startswith("Bearer "):
        return authorization.split(" ", 1)[1].strip()
    return None


def require_api_key(
    db: Session = Depends(get_db),
    token: str | None = Depends(_extract_key),
) -> ApiKey:
    """Validate API key tokens and return the corresponding row."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("NO_API_KEY", "API key required."),
        )

    key = find_valid_key(db, token)
    if key is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=error_response("UNAUTHORIZED", "Invalid or expired API key"),
        )

    key.last_used_at = utcnow()
    db.commit()
    return key


def require_actor(
    api_key: ApiKey = Depends(require_api_key),
    db: Session = Depends(get_db),
) -> Actor:
    """Return the actor owning the API key; inactive accounts are refused."""

    user = db.get(User, api_key.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response("USER_INACTIVE", "User account is missing or disabled."),
        )
    return Actor(user_id=user.id, role=user.role)


def require_role(allowed: Set[UserRole]) -> Callable:
    """Enforce that the actor holds one of the allowed roles (admins always pass)."""

    if not allowed:
        raise RuntimeError("require_role needs a non-empty set of UserRole")

    def _dep(actor: Actor = Depends(require_actor)) -> Actor:
        if actor.is_admin or actor.role in allowed:
            return actor
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=error_response(
                "INSUFFICIENT_ROLE",
                f"Requires one of: {sorted(role.value for role in allowed)}",
            ),
        )

    return _dep


__all__ = ["Actor", "require_api_key", "require_actor", "require_role"]
