"""API key issuance and revocation (administrators only)."""
from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict, field_validator
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from freelancehub.db import get_db
from freelancehub.models.api_key import ApiKey
from freelancehub.models.user import User, UserRole
from freelancehub.security import Actor, require_role
from freelancehub.utils.apikey import gen_key
from freelancehub.utils.audit import log_audit
from freelancehub.utils.errors import Conflict, NotFound
from freelancehub.utils.time import utcnow

router = APIRouter(prefix="/apikeys", tags=["apikeys"])


class CreateKeyIn(BaseModel):
    name: str
    user_id: int
    days_valid: int | None = 90

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("name cannot be blank")
        return value.strip()


class ApiKeyCreateOut(BaseModel):
    """The raw key is returned exactly once."""

    id: int
    name: str
    user_id: int
    key: str
    expires_at: datetime | None


class ApiKeyRead(BaseModel):
    id: int
    name: str
    user_id: int
    prefix: str
    is_active: bool
    created_at: datetime
    expires_at: datetime | None
    last_used_at: datetime | None

    model_config = ConfigDict(from_attributes=True)


def _get_key_or_404(db: Session, api_key_id: int) -> ApiKey:
    row = db.get(ApiKey, api_key_id)
    if not row:
        raise NotFound("API key not found.", code="APIKEY_NOT_FOUND")
    return row


@router.post("", response_model=ApiKeyCreateOut, status_code=status.HTTP_201_CREATED)
def create_api_key(
    payload: CreateKeyIn,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> ApiKeyCreateOut:
    if db.get(User, payload.user_id) is None:
        raise NotFound("User not found.", code="USER_NOT_FOUND")

    raw, prefix, key_hash = gen_key()
    now = utcnow()
    row = ApiKey(
        name=payload.name,
        prefix=prefix,
        key_hash=key_hash,
        user_id=payload.user_id,
        expires_at=now + timedelta(days=payload.days_valid) if payload.days_valid else None,
        is_active=True,
    )
    db.add(row)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Key name already exists.", code="APIKEY_EXISTS") from exc

    log_audit(
        db,
        actor=actor.label,
        action="CREATE_API_KEY",
        entity="ApiKey",
        entity_id=row.id,
        data={"name": row.name, "user_id": row.user_id},
    )
    db.commit()
    db.refresh(row)
    return ApiKeyCreateOut(id=row.id, name=row.name, user_id=row.user_id, key=raw, expires_at=row.expires_at)


@router.get("/{api_key_id}", response_model=ApiKeyRead)
def get_apikey(
    api_key_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> ApiKey:
    return _get_key_or_404(db, api_key_id)


@router.delete("/{api_key_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def revoke_apikey(
    api_key_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_role({UserRole.ADMIN})),
) -> Response:
    row = _get_key_or_404(db, api_key_id)
    if row.is_active:
        row.is_active = False
        log_audit(
            db,
            actor=actor.label,
            action="REVOKE_API_KEY",
            entity="ApiKey",
            entity_id=api_key_id,
            data={"name": row.name},
        )
        db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
