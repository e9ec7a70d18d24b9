"""
Version constants for the red-flag engine.

This module defines all version constants used throughout the engine to ensure
deterministic scoring and complete audit trail.
"""

from .models.engine_version import EngineVersion

# API Version
API_VERSION = "1.0.0"

# Component versions (update these when implementations change)
KEYWORD_MATCHER_VERSION = "keyword-matcher-1.0.0"
PATTERN_SET_VERSION = "patterns-en-2026.1"
VIP_DETECTOR_VERSION = "vip-detector-1.0.0"
THREAD_VELOCITY_VERSION = "thread-velocity-1.0.0"
CALENDAR_PROXIMITY_VERSION = "calendar-proximity-1.0.0"
SCORER_VERSION = "red-flag-scorer-1.0.0"
CLUSTERER_VERSION = "topic-clusterer-1.0.0"
STOPLIST_VERSION = "stopwords-en-2026.1"


def get_current_engine_version() -> EngineVersion:
    """
    Get current engine version configuration.

    Returns:
        EngineVersion instance with current versions
    """
    return EngineVersion(
        keyword_matcher_version=KEYWORD_MATCHER_VERSION,
        pattern_set_version=PATTERN_SET_VERSION,
        vip_detector_version=VIP_DETECTOR_VERSION,
        thread_velocity_version=THREAD_VELOCITY_VERSION,
        calendar_proximity_version=CALENDAR_PROXIMITY_VERSION,
        scorer_version=SCORER_VERSION,
        clusterer_version=CLUSTERER_VERSION,
        stoplist_version=STOPLIST_VERSION,
    )
