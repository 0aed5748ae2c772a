"""Portfolio endpoints."""
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from freelancehub.config import get_settings
from freelancehub.db import get_db
from freelancehub.models.portfolio import PortfolioItem
from freelancehub.schemas.portfolio import (
    LikeState,
    PortfolioItemCreate,
    PortfolioItemRead,
    PortfolioItemUpdate,
)
from freelancehub.security import Actor, require_actor
from freelancehub.services import portfolio as portfolio_service

router = APIRouter(prefix="/portfolio", tags=["portfolio"])
settings = get_settings()


@router.post("", response_model=PortfolioItemRead, status_code=status.HTTP_201_CREATED)
def create_item(
    payload: PortfolioItemCreate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> PortfolioItem:
    return portfolio_service.create_item(db, payload, actor=actor)


@router.get("/freelancer/{freelancer_id}", response_model=list[PortfolioItemRead])
def list_items(
    freelancer_id: int,
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> list[PortfolioItem]:
    return portfolio_service.list_items(db, freelancer_id, limit=limit, offset=offset)


@router.get("/{slug}", response_model=PortfolioItemRead)
def view_item(
    slug: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> PortfolioItem:
    return portfolio_service.view_item(db, slug)


@router.patch("/{slug}", response_model=PortfolioItemRead)
def update_item(
    slug: str,
    payload: PortfolioItemUpdate,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> PortfolioItem:
    return portfolio_service.update_item(db, slug, payload, actor=actor)


@router.delete("/{slug}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
def delete_item(
    slug: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> Response:
    portfolio_service.delete_item(db, slug, actor=actor)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{slug}/like", response_model=LikeState)
def toggle_like(
    slug: str,
    db: Session = Depends(get_db),
    actor: Actor = Depends(require_actor),
) -> LikeState:
    liked, count = portfolio_service.toggle_like(db, slug, actor=actor)
    return LikeState(liked=liked, like_count=count)
