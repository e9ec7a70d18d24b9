"""
Deterministic briefing assembly.

Scores every message, clusters the batch into topics and ranks the topics so
the most pressing ones come first:

1. Flagged message count (descending)
2. Highest message score (descending)
3. Topic size (descending)

Messages outside any cluster are collected in a catch-all "Other Messages"
topic that competes in the same ranking.
"""

import time
from datetime import datetime
from typing import Dict, List, Optional

import structlog
from pydantic import BaseModel, Field

from .clustering.topic_clusterer import TopicClusterer
from .config import settings
from .models.message import Message
from .pipeline import RedFlagPipeline
from .red_flags.schemas import RedFlagScore, Severity


logger = structlog.get_logger(__name__)


UNCLUSTERED_TOPIC_ID = "unclustered"
UNCLUSTERED_TOPIC_LABEL = "Other Messages"


# ============================================================================
# MODELS
# ============================================================================

class BriefingItem(BaseModel):
    """A scored message inside a briefing topic."""
    message_id: str
    subject: str = ""
    sender: str = ""
    score: float = Field(0.0, description="Composite red-flag score")
    severity: Severity = Severity.NONE
    is_flagged: bool = False


class BriefingTopic(BaseModel):
    """A ranked topic of the briefing."""
    id: str
    label: str
    keywords: List[str] = Field(default_factory=list)
    items: List[BriefingItem] = Field(default_factory=list, description="Items, highest score first")
    max_score: float = 0.0
    flagged_count: int = 0

    @property
    def size(self) -> int:
        return len(self.items)


class BriefingData(BaseModel):
    """Ranked topics plus the per-message scores they were built from."""
    topics: List[BriefingTopic] = Field(default_factory=list)
    total_messages: int = 0
    total_flagged: int = 0
    scores: Dict[str, RedFlagScore] = Field(default_factory=dict)
    duration_ms: int = 0


# ============================================================================
# ASSEMBLY
# ============================================================================

def _build_topic(
    topic_id: str,
    label: str,
    keywords: List[str],
    message_ids: List[str],
    messages_by_id: Dict[str, Message],
    scores: Dict[str, RedFlagScore],
) -> BriefingTopic:
    items = []
    for message_id in message_ids:
        message = messages_by_id.get(message_id)
        score = scores.get(message_id)
        if message is None or score is None:
            continue
        items.append(
            BriefingItem(
                message_id=message_id,
                subject=message.subject,
                sender=message.sender.display,
                score=score.score,
                severity=score.severity,
                is_flagged=score.is_flagged,
            )
        )

    items.sort(key=lambda item: item.score, reverse=True)

    return BriefingTopic(
        id=topic_id,
        label=label,
        keywords=keywords,
        items=items,
        max_score=max((item.score for item in items), default=0.0),
        flagged_count=sum(1 for item in items if item.is_flagged),
    )


def build_briefing(
    messages: List[Message],
    pipeline: Optional[RedFlagPipeline] = None,
    clusterer: Optional[TopicClusterer] = None,
    max_topics: Optional[int] = None,
    reference_time: Optional[datetime] = None,
) -> BriefingData:
    """
    Score, cluster and rank a batch of messages.

    Args:
        messages: Messages to brief
        pipeline: Red-flag pipeline (default: pipeline with empty registries)
        clusterer: Topic clusterer (default: configured from settings)
        max_topics: Maximum topics to keep (default: settings.briefing_max_topics)
        reference_time: "Now" for recency and calendar windows

    Returns:
        BriefingData with ranked topics
    """
    start_time = time.time()

    pipeline = pipeline or RedFlagPipeline()
    clusterer = clusterer or TopicClusterer()
    limit = max_topics if max_topics is not None else settings.briefing_max_topics

    if not messages:
        return BriefingData(duration_ms=int((time.time() - start_time) * 1000))

    scores = pipeline.score_messages(messages, reference_time)
    clustering = clusterer.cluster_emails(messages)

    messages_by_id: Dict[str, Message] = {}
    for message in messages:
        messages_by_id.setdefault(message.id, message)

    topics = [
        _build_topic(cluster.id, cluster.topic, cluster.keywords, cluster.email_ids, messages_by_id, scores)
        for cluster in clustering.clusters
    ]

    if clustering.unclustered_email_ids:
        catch_all = _build_topic(
            UNCLUSTERED_TOPIC_ID,
            UNCLUSTERED_TOPIC_LABEL,
            [],
            clustering.unclustered_email_ids,
            messages_by_id,
            scores,
        )
        if catch_all.items:
            topics.append(catch_all)

    topics.sort(key=lambda t: (t.flagged_count, t.max_score, t.size), reverse=True)
    topics = topics[:limit]

    briefing = BriefingData(
        topics=topics,
        total_messages=len(messages),
        total_flagged=sum(1 for s in scores.values() if s.is_flagged),
        scores=scores,
        duration_ms=int((time.time() - start_time) * 1000),
    )

    logger.info(
        "briefing_built",
        total_messages=briefing.total_messages,
        total_flagged=briefing.total_flagged,
        topic_count=len(topics),
        duration_ms=briefing.duration_ms,
    )

    return briefing
