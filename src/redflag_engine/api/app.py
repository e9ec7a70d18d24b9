"""
FastAPI application for the red-flag engine.

The engine itself is stateless per request: every scoring, clustering or
briefing call builds its detectors from the registries in the request body
and the tunables in ``settings``. The app only adds transport concerns.
"""

from contextlib import asynccontextmanager
from typing import List, Optional

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..logging_config import setup_logging
from ..red_flags.default_patterns import DEFAULT_RED_FLAG_PATTERNS
from ..version import API_VERSION, get_current_engine_version
from .middleware import (
    REQUEST_ID_HEADER,
    setup_error_handling_middleware,
    setup_logging_middleware,
    setup_metrics_middleware,
    setup_request_context_middleware,
)
from .routes import briefing, health, red_flags, topics, version

setup_logging()
logger = structlog.get_logger(__name__)

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log the engine build and the tunables most likely to explain odd scores."""
    logger.info(
        "api_starting",
        version=API_VERSION,
        engine_version=get_current_engine_version().to_repr(),
        pattern_count=len(DEFAULT_RED_FLAG_PATTERNS),
        fuzzy_matching=settings.keyword_enable_fuzzy_matching,
        flag_threshold=settings.scorer_flag_threshold,
        stable_ordering=settings.cluster_stable_ordering,
    )
    yield
    logger.info("api_stopping")


def create_app(cors_origins: Optional[List[str]] = None) -> FastAPI:
    """
    Build the application.

    Middleware is registered innermost first (Starlette wraps each new one
    around the previous ones): timing, logging, error handling, request context.

    Args:
        cors_origins: Allowed CORS origins (default: any)

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="Red-Flag Engine",
        description="Heuristic red-flag scoring, topic clustering and briefing assembly for email",
        version=API_VERSION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER, "X-Process-Time"],
    )

    if settings.enable_metrics:
        setup_metrics_middleware(app)
    setup_logging_middleware(app)
    setup_error_handling_middleware(app)
    setup_request_context_middleware(app)

    app.include_router(health.router, tags=["Health"])
    app.include_router(version.router, prefix=API_PREFIX, tags=["Version"])
    for router in (red_flags.router, topics.router, briefing.router):
        app.include_router(router)

    return app


app = create_app()


def main() -> None:
    """``redflag-api`` entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "redflag_engine.api.app:app",
        host=settings.api_host,
        port=settings.api_port,
        workers=settings.api_workers,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
