"""API route aggregation.

All routers registered here get mounted in main.py under /api.

Learn: unlike a blanket include_router(dependencies=...), each protected
route declares its own require_* dependency, because routes in the same
router need different roles. Health and login are open.
"""

from fastapi import APIRouter

from maitre.api.auth import router as auth_router
from maitre.api.health import router as health_router
from maitre.api.restaurants import router as restaurants_router

api_router = APIRouter(prefix="/api")

api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])
api_router.include_router(restaurants_router, tags=["restaurants"])
