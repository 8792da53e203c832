from fastapi import FastAPI

from .content import router as content_router
from .groups import router as groups_router
from .notifications import router as notifications_router
from .profiles import router as profiles_router
from .requests import router as requests_router
from .sweeps import router as sweeps_router


def register_routes(app: FastAPI) -> None:
    """Register every API router on the FastAPI application."""

    app.include_router(profiles_router)
    app.include_router(groups_router)
    app.include_router(requests_router)
    app.include_router(content_router)
    app.include_router(notifications_router)
    app.include_router(sweeps_router)
