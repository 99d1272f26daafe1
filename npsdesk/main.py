"""FastAPI application factory."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from npsdesk.api.v1.router import api_router
from npsdesk.core.config import settings
from npsdesk.core.exceptions import register_exception_handlers
from npsdesk.core.logging import setup_logging
from npsdesk.db.session import dispose_engine
from npsdesk.services.limits import close_client


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENV})")
    yield
    await close_client()
    await dispose_engine()
    logger.info(f"Stopped {settings.PROJECT_NAME}")


def create_application() -> FastAPI:
    """
    Build the FastAPI application with routers and error handlers
    """
    app = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    register_exception_handlers(app)
    app.include_router(api_router, prefix=f"{settings.API_PREFIX}/v1")

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok", "env": settings.ENV}

    return app


app = create_application()
