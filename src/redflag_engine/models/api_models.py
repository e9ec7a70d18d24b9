"""
API request and response models for FastAPI endpoints.

This module defines the Pydantic models used for API request/response validation.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..briefing import BriefingData
from ..clustering.schemas import TopicClusteringResult
from ..red_flags.schemas import RedFlagScore
from .engine_version import EngineVersion
from .message import CalendarEvent, Message
from .registry import Contact, VipEntry


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="healthy, or degraded when no default patterns loaded", examples=["healthy"])
    version: str = Field(description="API version", examples=["1.0.0"])
    engine_version: str = Field(description="Short engine build identifier")
    pattern_count: int = Field(description="Default red-flag patterns loaded")
    uptime_seconds: float = Field(description="Seconds since process start")


class VersionResponse(BaseModel):
    """Version information response."""

    api_version: str = Field(description="API version")
    engine_id: str = Field(description="Short engine build identifier, stored alongside persisted scores")
    engine_version: EngineVersion = Field(description="Current engine component versions")


class ScoreRequest(BaseModel):
    """Messages to score plus the registries detectors read from."""

    messages: List[Message] = Field(..., description="Messages to score")
    vips: List[VipEntry] = Field(default_factory=list, description="Explicit VIP registry")
    contacts: List[Contact] = Field(default_factory=list, description="Known contacts")
    events: List[CalendarEvent] = Field(default_factory=list, description="Upcoming calendar events")


class ScoreResponse(BaseModel):
    """Per-message red-flag scores."""

    success: bool
    total_count: int
    flagged_count: int
    scores: Dict[str, RedFlagScore] = Field(default_factory=dict)


class ClusterRequest(BaseModel):
    """Messages to cluster with optional clusterer overrides."""

    messages: List[Message] = Field(..., description="Message corpus to cluster")
    similarity_threshold: Optional[float] = Field(None, description="Jaccard merge threshold")
    min_cluster_size: Optional[int] = Field(None, ge=1, description="Minimum cluster size")
    use_thread_ids: Optional[bool] = Field(None, description="Enable thread-based clustering")
    stable_ordering: Optional[bool] = Field(None, description="Order groups by earliest receive time")


class ClusterResponse(BaseModel):
    """Clustering result envelope."""

    success: bool
    result: TopicClusteringResult


class BriefingRequest(ScoreRequest):
    """Score + cluster request for briefing assembly."""

    max_topics: Optional[int] = Field(None, ge=1, description="Maximum topics to return")


class BriefingResponse(BaseModel):
    """Briefing envelope."""

    success: bool
    briefing: BriefingData
