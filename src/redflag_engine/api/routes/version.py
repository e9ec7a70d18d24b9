"""
Version endpoint.

Scores are only comparable across runs with the same engine build, so
clients store ``engine_id`` next to any score they persist.
"""

from fastapi import APIRouter

from ...models.api_models import VersionResponse
from ...version import API_VERSION, get_current_engine_version

router = APIRouter()


@router.get("/version", response_model=VersionResponse)
async def get_version() -> VersionResponse:
    engine_version = get_current_engine_version()
    return VersionResponse(
        api_version=API_VERSION,
        engine_id=engine_version.to_repr(),
        engine_version=engine_version,
    )
