"""
Briefing API route.

Provides:
- POST /api/v1/briefing - Score, cluster and rank a batch of messages
"""

from fastapi import APIRouter, HTTPException, status
import structlog

from ...briefing import build_briefing
from ...models.api_models import BriefingRequest, BriefingResponse
from ...pipeline import RedFlagPipeline


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Briefing"])


@router.post("/briefing", response_model=BriefingResponse, status_code=status.HTTP_200_OK)
async def briefing_endpoint(request: BriefingRequest) -> BriefingResponse:
    """
    Build a ranked topic briefing.

    Args:
        request: Messages, registries and an optional topic limit

    Returns:
        Briefing data with ranked topics and per-message scores

    Raises:
        HTTPException: 422 on invalid input, 500 on unexpected errors
    """
    logger.info(
        "briefing_request_received",
        messages_count=len(request.messages),
        max_topics=request.max_topics,
    )

    try:
        pipeline = RedFlagPipeline.from_registries(
            vips=request.vips, contacts=request.contacts, events=request.events
        )
        briefing = build_briefing(request.messages, pipeline=pipeline, max_topics=request.max_topics)

    except ValueError as e:
        logger.error("briefing_validation_error", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Validation error: {str(e)}"
        )

    except Exception as e:
        logger.error("briefing_failed", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Briefing failed: {str(e)}"
        )

    return BriefingResponse(success=True, briefing=briefing)
