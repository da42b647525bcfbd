"""LoreRAG FastAPI application entry point.

Loads configuration from ``config/config.yaml``, ``.env`` and the
environment, configures structured logging, wires providers and services
via :func:`lorerag.wiring.build_components`, and mounts the API router.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI

from lorerag import __version__
from lorerag.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from lorerag.api.routes import router as api_router
from lorerag.config import Settings, load_settings
from lorerag.utils.logging import configure_logging, get_logger
from lorerag.wiring import build_components

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build all components and open the chunk store; close it on shutdown."""
    settings: Settings = application.state.settings
    components = build_components(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    await components["store"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        embedding_provider=components["embedding_gateway"].provider_name,
        chat_provider=components["chat_provider"].get_provider_name(),
    )

    yield

    await components["store"].close()
    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    settings = settings or load_settings()
    configure_logging(
        log_level=settings.log_level,
        json_output=(settings.app_env == "production"),
    )

    application = FastAPI(
        title="LoreRAG API",
        version=__version__,
        description=(
            "Hybrid (dense + full-text) search over a Markdown knowledge base, "
            "with answers grounded in the retrieved excerpts."
        ),
        lifespan=_lifespan,
    )
    application.state.settings = settings

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.cors_origins)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    _settings: Settings = app.state.settings
    uvicorn.run(
        "lorerag.main:app",
        host=_settings.app_host,
        port=_settings.app_port,
        reload=(_settings.app_env == "development"),
    )
