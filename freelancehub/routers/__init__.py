"""API routers for the freelancehub backend."""
from fastapi import APIRouter

from . import (
    apikeys,
    applications,
    companies,
    contracts,
    disputes,
    freelancers,
    health,
    interviews,
    jobs,
    notifications,
    portfolio,
    projects,
    proposals,
    reviews,
    users,
    wallet,
)


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(users.router)
    api_router.include_router(apikeys.router)
    api_router.include_router(projects.router)
    api_router.include_router(proposals.router)
    api_router.include_router(contracts.router)
    api_router.include_router(disputes.router)
    api_router.include_router(wallet.router)
    api_router.include_router(reviews.router)
    api_router.include_router(freelancers.router)
    api_router.include_router(companies.router)
    api_router.include_router(jobs.router)
    api_router.include_router(applications.router)
    api_router.include_router(interviews.router)
    api_router.include_router(portfolio.router)
    api_router.include_router(notifications.router)
    return api_router
