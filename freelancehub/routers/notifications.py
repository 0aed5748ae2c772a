"""Notification inbox endpoints."""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.notification import Notification
from freelancehub.schemas.notification import NotificationRead
from freelancehub.security import Actor, require_actor
from freelancehub.services import notifications as notifications_service

router = APIRouter(prefix="/notifications", tags=["notifications"])
settings = get_settings()


@router.get("", response_model=list[NotificationRead])
def list_notifications(
    unread_only: bool = False,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[Notification]:
    return notifications_service.list_notifications(
        db, actor.user_id, unread_only=unread_only, limit=limit, offset=offset
    )


@router.get("/unread-count")
def unread_count(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> dict[str, int]:
    return {"unread": notifications_service.unread_count(db, actor.user_id)}


@router.post("/{notification_id}/read", response_model=NotificationRead)
def mark_read(
    notification_id: int,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Notification:
    return notifications_service.mark_read(db, notification_id, user_id=actor.user_id)


@router.post("/read-all")
def mark_all_read(
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> dict[str, int]:
    return {"updated": notifications_service.mark_all_read(db, user_id=actor.user_id)}
