"""Notification sink boundary and in-app notification listing.

Engagement services call :func:`notify` only after their transaction has
committed. Delivery is best-effort: a failing sink is logged and never
undoes the state change that triggered it.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from freelancehub.models.notification import Notification
from freelancehub.utils.errors import NotFound

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def __call__(
        self,
        db: Session,
        recipient_id: int,
        kind: str,
        title: str,
        body: str,
        link: str | None = None,
    ) -> None: ...


def database_sink(
    db: Session,
    recipient_id: int,
    kind: str,
    title: str,
    body: str,
    link: str | None = None,
) -> None:
    """Persist the notification as an in-app ``Notification`` row."""

    db.add(Notification(user_id=recipient_id, kind=kind, title=title, body=body, link=link))
    db.commit()


_sink: NotificationSink = database_sink


def set_notification_sink(sink: NotificationSink | None) -> None:
    """Replace the active sink; ``None`` restores the database sink."""

    global _sink
    _sink = sink or database_sink


def get_notification_sink() -> NotificationSink:
    return _sink


def notify(
    db: Session,
    recipient_id: int,
    kind: str,
    title: str,
    body: str,
    link: str | None = None,
) -> bool:
    """Deliver one notification; returns False when the sink failed."""

    try:
        _sink(db, recipient_id, kind, title, body, link)
    except Exception:  # noqa: BLE001
        db.rollback()
        logger.exception(
            "Notification delivery failed",
            extra={"recipient_id": recipient_id, "kind": kind},
        )
        return False
    return True


def list_notifications(
    db: Session,
    user_id: int,
    *,
    unread_only: bool = False,
    limit: int = 20,
    offset: int = 0,
) -> list[Notification]:
    stmt = select(Notification).where(Notification.user_id == user_id)
    if unread_only:
        stmt = stmt.where(Notification.is_read.is_(False))
    stmt = stmt.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).offset(offset)
    return list(db.scalars(stmt))


def unread_count(db: Session, user_id: int) -> int:
    stmt = select(func.count(Notification.id)).where(
        Notification.user_id == user_id, Notification.is_read.is_(False)
    )
    return int(db.scalar(stmt) or 0)


def mark_read(db: Session, notification_id: int, *, user_id: int) -> Notification:
    notification = db.get(Notification, notification_id)
    # Another user's notification is reported as missing.
    if notification is None or notification.user_id != user_id:
        raise NotFound("Notification not found.", code="NOTIFICATION_NOT_FOUND")
    notification.is_read = True
    db.commit()
    db.refresh(notification)
    return notification


def mark_all_read(db: Session, *, user_id: int) -> int:
    result = db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session=False)
    )
    db.commit()
    return result.rowcount or 0


@dataclass(frozen=True)
class Outgoing:
    """A notification queued during a transaction, sent after commit."""

    recipient_id: int
    kind: str
    title: str
    body: str
    link: str | None = None


def deliver(db: Session, outbox: list[Outgoing]) -> int:
    """Send queued notifications; returns how many were delivered."""

    delivered = 0
    for item in outbox:
        if notify(db, item.recipient_id, item.kind, item.title, item.body, item.link):
            delivered += 1
    return delivered


__all__ = [
    "NotificationSink",
    "Outgoing",
    "deliver",
    "database_sink",
    "set_notification_sink",
    "get_notification_sink",
    "notify",
    "list_notifications",
    "unread_count",
    "mark_read",
    "mark_all_read",
]
