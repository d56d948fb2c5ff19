from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from servicehub.api.health import router as health_router
from servicehub.api.router import api_router
from servicehub.config import get_settings
from servicehub.db import create_tables, dispose_engine, get_engine
from servicehub.exceptions import setup_exception_handlers
from servicehub.middleware import setup_middleware

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager for startup and shutdown."""
    settings = get_settings()
    logger.info("Starting %s v%s [%s]", settings.app_name, settings.app_version, settings.environment)
    if settings.create_tables_on_startup:
        await create_tables(get_engine())
    yield
    await dispose_engine()
    logger.info("Shutting down %s", settings.app_name)


def configure_logging(level: str, fmt: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(level=level.upper(), format=fmt)


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    application = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
        docs_url="/docs" if settings.environment != "production" else None,
        redoc_url="/redoc" if settings.environment != "production" else None,
    )

    setup_middleware(application, settings)
    setup_exception_handlers(application)

    application.include_router(health_router)
    application.include_router(api_router)

    return application


app = create_app()
