"""Freelancer portfolio showcase."""
from datetime import date

from sqlalchemy import CheckConstraint, Date, ForeignKey, Integer, JSON, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class PortfolioItem(Base):
    """A finished piece of work a freelancer publishes on their profile."""

    __tablename__ = "portfolio_items"
    __table_args__ = (CheckConstraint("views >= 0", name="ck_portfolio_views_non_negative"),)

    freelancer_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)
    slug: Mapped[str] = mapped_column(String(140), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    cover_image: Mapped[str] = mapped_column(String(500), nullable=False)
    images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    video_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    completion_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    skills: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    likes = relationship("PortfolioLike", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def like_count(self) -> int:
        return len(self.likes)


class PortfolioLike(Base):
    """One user's like on a portfolio item."""

    __tablename__ = "portfolio_likes"
    __table_args__ = (UniqueConstraint("item_id", "user_id", name="uq_portfolio_likes_item_user"),)

    item_id: Mapped[int] = mapped_column(ForeignKey("portfolio_items.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
