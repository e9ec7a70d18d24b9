"""
HTTP middleware and exception handlers.

Order on the way in (outermost first): request context, error handling,
request logging, timing. Each is installed by its own ``setup_*`` function so
the app factory decides what runs.
"""

import time
import uuid
from typing import Callable

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import settings
from ..logging_config import bind_context, clear_context

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


def setup_request_context_middleware(app: FastAPI) -> None:
    """
    Give every request an ID and bind it to the logging context.

    A client-supplied ``X-Request-ID`` is reused; otherwise a UUID4 is
    generated. The ID is echoed in the response header and stored on
    ``request.state.request_id``.
    """

    @app.middleware("http")
    async def request_context(request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        clear_context()
        bind_context(request_id=request_id, method=request.method, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


def setup_logging_middleware(app: FastAPI) -> None:
    """Log request start and completion; method and path come from the bound context."""

    @app.middleware("http")
    async def log_requests(request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        logger.info("request_started", client=request.client.host if request.client else None)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
                exc_info=True,
            )
            raise

        logger.info(
            "request_completed",
            status_code=response.status_code,
            process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response


def setup_metrics_middleware(app: FastAPI) -> None:
    """
    Time every request.

    Sets ``X-Process-Time`` (seconds) and warns when a request takes longer
    than ``settings.api_slow_request_ms``; scoring and clustering are O(n²) in
    the worst case, so slow batches are worth seeing.
    """

    @app.middleware("http")
    async def collect_metrics(request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start_time

        response.headers["X-Process-Time"] = f"{elapsed:.6f}"

        elapsed_ms = round(elapsed * 1000, 2)
        if elapsed_ms > settings.api_slow_request_ms:
            logger.warning("request_slow", duration_ms=elapsed_ms, status_code=response.status_code)
        else:
            logger.debug("request_metrics", duration_ms=elapsed_ms, status_code=response.status_code)

        return response


def setup_error_handling_middleware(app: FastAPI) -> None:
    """
    Turn failures into JSON error envelopes.

    - Body validation errors: 422 with pydantic's error list, logged with the
      offending locations.
    - Anything unhandled: 500; the exception text is only exposed in debug mode.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = jsonable_encoder(exc.errors())
        logger.warning(
            "request_validation_failed",
            error_count=len(errors),
            locations=[".".join(str(part) for part in e.get("loc", ())) for e in errors[:5]],
        )
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"success": False, "detail": errors},
        )

    @app.middleware("http")
    async def handle_errors(request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.error("unhandled_exception", error=str(e), exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "success": False,
                    "error": "internal_error",
                    "detail": str(e) if app.debug else "Scoring service failed; see logs for this request ID",
                    "request_id": getattr(request.state, "request_id", None),
                },
            )
