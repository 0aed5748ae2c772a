"""Audit trail rows."""
from datetime import datetime

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class AuditLog(Base):
    """One recorded action on a marketplace entity.

    ``entity``/``entity_id`` name the row acted on. ``contract_id`` and
    ``project_id`` are plain indexed ids rather than foreign keys so that the
    trail outlives deleted projects; ``actor_user_id`` is set for actions
    taken by a user and cleared if that user row ever goes away.
    """

    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_logs_entity", "entity", "entity_id"),)

    actor: Mapped[str] = mapped_column(String(100), nullable=False)
    actor_user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    action: Mapped[str] = mapped_column(String(100), nullable=False)
    entity: Mapped[str] = mapped_column(String(100), nullable=False)
    entity_id: Mapped[int] = mapped_column(nullable=False)
    contract_id: Mapped[int | None] = mapped_column(nullable=True, index=True)
    project_id: Mapped[int | None] = mapped_column(nullable=True, index=True)
    data_json: Mapped[dict] = mapped_column(JSON, nullable=False)
    at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    actor_user = relationship("User")
