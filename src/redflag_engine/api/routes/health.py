"""
Health check endpoint for monitoring.

Besides liveness, reports which engine build is serving and how many default
red-flag patterns it loaded, so a deploy with a broken pattern table shows up
as ``degraded`` instead of silently scoring every keyword signal as 0.
"""

import time

from fastapi import APIRouter

from ...models.api_models import HealthResponse
from ...red_flags.default_patterns import DEFAULT_RED_FLAG_PATTERNS
from ...version import API_VERSION, get_current_engine_version

router = APIRouter()

_start_time = time.time()


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness plus engine build and pattern count."""
    pattern_count = len(DEFAULT_RED_FLAG_PATTERNS)

    return HealthResponse(
        status="healthy" if pattern_count else "degraded",
        version=API_VERSION,
        engine_version=get_current_engine_version().to_repr(),
        pattern_count=pattern_count,
        uptime_seconds=round(time.time() - _start_time, 3),
    )
