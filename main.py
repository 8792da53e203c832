from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.interfaces.api.routes import register_routes
from app.infrastructure.database import engine, initialize_database


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables at startup and release the pool on shutdown."""

    initialize_database()
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    app = FastAPI(title="Community Membership API", lifespan=lifespan)
    register_routes(app)
    return app


app = create_app()
