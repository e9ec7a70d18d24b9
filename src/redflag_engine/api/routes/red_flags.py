"""
Red-flag scoring API routes.

Provides:
- POST /api/v1/red-flags/score - Score a batch of messages
"""

from fastapi import APIRouter, HTTPException, status
import structlog

from ...models.api_models import ScoreRequest, ScoreResponse
from ...pipeline import RedFlagPipeline


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/red-flags", tags=["Red Flags"])


@router.post("/score", response_model=ScoreResponse, status_code=status.HTTP_200_OK)
async def score_endpoint(request: ScoreRequest) -> ScoreResponse:
    """
    Score messages against the supplied registries.

    Messages sharing a thread ID in the request are used as each other's
    velocity context.

    Args:
        request: Messages plus VIPs, contacts and upcoming events

    Returns:
        Per-message red-flag scores

    Raises:
        HTTPException: 422 on invalid input, 500 on unexpected errors
    """
    logger.info(
        "score_request_received",
        messages_count=len(request.messages),
        vips_count=len(request.vips),
        contacts_count=len(request.contacts),
        events_count=len(request.events),
    )

    try:
        pipeline = RedFlagPipeline.from_registries(
            vips=request.vips, contacts=request.contacts, events=request.events
        )
        scores = pipeline.score_messages(request.messages)

    except ValueError as e:
        logger.error("score_validation_error", error=str(e))
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Validation error: {str(e)}"
        )

    except Exception as e:
        logger.error("score_failed", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Scoring failed: {str(e)}"
        )

    flagged_count = sum(1 for s in scores.values() if s.is_flagged)
    logger.info("score_completed", total_count=len(scores), flagged_count=flagged_count)

    return ScoreResponse(
        success=True,
        total_count=len(scores),
        flagged_count=flagged_count,
        scores=scores,
    )
