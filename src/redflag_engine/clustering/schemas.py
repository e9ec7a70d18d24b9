"""
Topic clustering schemas.
"""

from typing import List

from pydantic import BaseModel, Field


class TopicCluster(BaseModel):
    """A group of related messages (same thread or similar subjects)."""
    id: str = Field(..., description="Cluster ID (cluster-N)")
    topic: str = Field(..., description="Normalized subject of the first member")
    email_ids: List[str] = Field(default_factory=list, description="Member message IDs")
    thread_ids: List[str] = Field(default_factory=list, description="Distinct member thread IDs")
    size: int = Field(..., ge=0, description="Number of member messages")
    keywords: List[str] = Field(default_factory=list, description="Top keywords by frequency (max 5)")
    coherence: float = Field(
        ..., ge=0.0, le=1.0, description="Average pairwise keyword similarity, rounded to 2 decimals"
    )


class TopicClusteringResult(BaseModel):
    """Result of clustering a batch of messages."""
    clusters: List[TopicCluster] = Field(default_factory=list, description="Clusters, largest first")
    total_emails: int = 0
    cluster_count: int = 0
    unclustered_email_ids: List[str] = Field(default_factory=list)
