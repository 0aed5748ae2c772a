"""Freelancer portfolio items, views and likes."""
from datetime import date

import pytest
from sqlalchemy import select

from freelancehub.models import PortfolioItem, PortfolioLike, UserRole
from freelancehub.schemas.portfolio import PortfolioItemCreate, PortfolioItemUpdate
from freelancehub.services import portfolio
from freelancehub.utils.errors import Forbidden, InvalidArgument, NotFound


def _payload(title: str = "Café website") -> PortfolioItemCreate:
    return PortfolioItemCreate(
        title=title,
        description="Menu, booking form and a map.",
        cover_image="https://img.example.com/cover.png",
        skills=["html", "css"],
        completion_date=date(2026, 5, 1),
    )


def test_slugs_are_readable_and_unique(db_session, make_user, as_actor):
    author = make_user("designer")

    first = portfolio.create_item(db_session, _payload(), actor=as_actor(author))
    second = portfolio.create_item(db_session, _payload(), actor=as_actor(author))

    assert first.slug.startswith("cafe-website-")
    assert first.slug != second.slug
    assert first.views == 0
    assert first.like_count == 0
    listed = portfolio.list_items(db_session, author.id)
    assert [item.id for item in listed] == [second.id, first.id]


def test_company_accounts_have_no_portfolio(db_session, make_user, as_actor):
    with pytest.raises(Forbidden):
        portfolio.create_item(db_session, _payload(), actor=as_actor(make_user("acme", role=UserRole.COMPANY)))


def test_viewing_counts_views(db_session, make_user, as_actor):
    item = portfolio.create_item(db_session, _payload(), actor=as_actor(make_user("designer")))

    portfolio.view_item(db_session, item.slug)
    seen = portfolio.view_item(db_session, item.slug)

    assert seen.views == 2
    with pytest.raises(NotFound):
        portfolio.view_item(db_session, "no-such-slug")


def test_only_author_or_admin_edits(db_session, make_user, as_actor):
    author = make_user("designer")
    item = portfolio.create_item(db_session, _payload(), actor=as_actor(author))
    old_slug = item.slug

    with pytest.raises(Forbidden):
        portfolio.update_item(db_session, item.slug, PortfolioItemUpdate(link="https://x.example.com"), actor=as_actor(make_user("other")))
    with pytest.raises(InvalidArgument):
        portfolio.update_item(db_session, item.slug, PortfolioItemUpdate(title=None), actor=as_actor(author))

    renamed = portfolio.update_item(db_session, item.slug, PortfolioItemUpdate(title="Bakery shop"), actor=as_actor(author))
    assert renamed.slug.startswith("bakery-shop-")
    assert renamed.slug != old_slug

    admin = make_user("admin", role=UserRole.ADMIN)
    portfolio.delete_item(db_session, renamed.slug, actor=as_actor(admin))
    assert db_session.scalars(select(PortfolioItem).where(PortfolioItem.id == item.id)).first() is None


def test_like_toggles(db_session, make_user, as_actor):
    item = portfolio.create_item(db_session, _payload(), actor=as_actor(make_user("designer")))
    fan = make_user("fan")

    assert portfolio.toggle_like(db_session, item.slug, actor=as_actor(fan)) == (True, 1)
    assert portfolio.toggle_like(db_session, item.slug, actor=as_actor(make_user("fan2"))) == (True, 2)
    assert portfolio.toggle_like(db_session, item.slug, actor=as_actor(fan)) == (False, 1)


def test_deleting_an_item_drops_its_likes(db_session, make_user, as_actor):
    author = make_user("designer")
    item = portfolio.create_item(db_session, _payload(), actor=as_actor(author))
    portfolio.toggle_like(db_session, item.slug, actor=as_actor(make_user("fan")))

    portfolio.delete_item(db_session, item.slug, actor=as_actor(author))

    assert db_session.scalars(select(PortfolioLike).where(PortfolioLike.item_id == item.id)).all() == []


@pytest.mark.anyio
async def test_portfolio_endpoints(client, make_user, headers_for):
    author = make_user("designer")
    headers = headers_for(author)

    created = await client.post("/portfolio", headers=headers, json=_payload().model_dump(mode="json"))
    assert created.status_code == 201, created.text
    slug = created.json()["slug"]

    viewed = await client.get(f"/portfolio/{slug}", headers=headers)
    assert viewed.json()["views"] == 1

    liked = await client.post(f"/portfolio/{slug}/like", headers=headers_for(make_user("fan")))
    assert liked.json() == {"liked": True, "like_count": 1}

    listed = await client.get(f"/portfolio/freelancer/{author.id}", headers=headers)
    assert [item["slug"] for item in listed.json()] == [slug]

    deleted = await client.delete(f"/portfolio/{slug}", headers=headers)
    assert deleted.status_code == 204
