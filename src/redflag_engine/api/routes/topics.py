"""
Topic clustering API routes.

Provides:
- POST /api/v1/topics/cluster - Cluster a batch of messages
"""

from dataclasses import replace

from fastapi import APIRouter, HTTPException, status
import structlog

from ...clustering.topic_clusterer import TopicClusterer, TopicClustererOptions
from ...models.api_models import ClusterRequest, ClusterResponse


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/topics", tags=["Topics"])


def _clusterer_for(request: ClusterRequest) -> TopicClusterer:
    """Clusterer from settings with the request's overrides applied."""
    overrides = {
        "similarity_threshold": request.similarity_threshold,
        "min_cluster_size": request.min_cluster_size,
        "use_thread_ids": request.use_thread_ids,
        "stable_ordering": request.stable_ordering,
    }
    options = replace(
        TopicClustererOptions.from_config(),
        **{name: value for name, value in overrides.items() if value is not None},
    )
    return TopicClusterer(options)


@router.post("/cluster", response_model=ClusterResponse, status_code=status.HTTP_200_OK)
async def cluster_endpoint(request: ClusterRequest) -> ClusterResponse:
    """
    Cluster messages into topics.

    Args:
        request: Messages plus optional clusterer overrides

    Returns:
        Clustering result

    Raises:
        HTTPException: 500 on unexpected errors
    """
    logger.info("cluster_request_received", messages_count=len(request.messages))

    try:
        result = _clusterer_for(request).cluster_emails(request.messages)

    except Exception as e:
        logger.error("cluster_failed", error=str(e), exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Clustering failed: {str(e)}"
        )

    return ClusterResponse(success=True, result=result)
