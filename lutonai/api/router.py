"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from lutonai.api.routes import (
    admin,
    auth,
    community,
    event_registrations,
    events,
    opportunities,
    posts,
    projects,
    sponsors,
    users,
)
from lutonai.core.config import get_settings

settings = get_settings()

api_router = APIRouter(prefix=settings.API_PREFIX)
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(event_registrations.router)
api_router.include_router(sponsors.router)
api_router.include_router(projects.router)
api_router.include_router(posts.router)
api_router.include_router(opportunities.router)
api_router.include_router(community.router)
api_router.include_router(admin.router)
api_router.include_router(users.router)
