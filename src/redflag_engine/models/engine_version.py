"""
Engine version model for deterministic scoring.

Tracks every component version so that a stored score can be traced back to
the exact heuristics that produced it: same versions + same input = same output.
"""

from pydantic import BaseModel, Field


class EngineVersion(BaseModel):
    """
    Immutable version contract for the red-flag engine.

    All version fields are tracked for audit trail and backtesting.
    """

    keyword_matcher_version: str = Field(
        description="Keyword matcher algorithm version", examples=["keyword-matcher-1.0.0"]
    )
    pattern_set_version: str = Field(
        description="Default red-flag pattern set version", examples=["patterns-en-2026.1"]
    )
    vip_detector_version: str = Field(
        description="VIP detector algorithm version", examples=["vip-detector-1.0.0"]
    )
    thread_velocity_version: str = Field(
        description="Thread velocity detector version", examples=["thread-velocity-1.0.0"]
    )
    calendar_proximity_version: str = Field(
        description="Calendar proximity detector version", examples=["calendar-proximity-1.0.0"]
    )
    scorer_version: str = Field(
        description="Composite red-flag scorer version", examples=["red-flag-scorer-1.0.0"]
    )
    clusterer_version: str = Field(
        description="Topic clusterer version", examples=["topic-clusterer-1.0.0"]
    )
    stoplist_version: str = Field(
        description="Keyword stopword list version", examples=["stopwords-en-2026.1"]
    )

    model_config = {"frozen": True}

    def to_repr(self) -> str:
        """
        Short representation for logging and metrics.

        Returns:
            Compact string representation with key version components.
        """
        return f"Engine-{self.scorer_version}-{self.clusterer_version}-{self.pattern_set_version}"
