"""
Application configuration management.

This module handles configuration from environment variables using Pydantic Settings.
Every detector weight and threshold lives here so the engine can be tuned
without code changes.
"""

from typing import Any, Dict

import structlog
from pydantic_settings import BaseSettings


logger = structlog.get_logger(__name__)


class Settings(BaseSettings):
    """
    Application configuration from environment variables.

    All settings can be overridden via environment variables with the same name.
    """

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    api_workers: int = 4
    api_slow_request_ms: int = 2000  # requests slower than this log a warning

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Monitoring
    enable_metrics: bool = True

    # Keyword matcher
    keyword_enable_fuzzy_matching: bool = True
    keyword_fuzzy_match_threshold: float = 0.8  # similarity ratio required
    keyword_max_fuzzy_distance: int = 2  # Levenshtein distance

    # VIP detector
    vip_match_weight: float = 0.8
    vip_high_interaction_threshold: int = 50
    vip_medium_interaction_threshold: int = 20
    vip_high_interaction_weight: float = 0.6
    vip_medium_interaction_weight: float = 0.4
    vip_recency_boost_days: int = 7
    vip_recency_boost_multiplier: float = 0.2

    # Thread velocity detector
    velocity_high_window_hours: float = 2.0
    velocity_high_threshold: int = 4
    velocity_high_weight: float = 0.7
    velocity_medium_window_hours: float = 6.0
    velocity_medium_threshold: int = 3
    velocity_medium_weight: float = 0.5
    velocity_escalation_language_weight: float = 0.8

    # Calendar proximity detector
    calendar_upcoming_window_days: int = 7
    calendar_time_proximity_weight: float = 0.6
    calendar_content_match_weight: float = 0.7
    calendar_attendee_overlap_weight: float = 0.8
    calendar_organizer_match_weight: float = 0.9
    calendar_content_similarity_threshold: float = 0.3

    # Red flag scorer: signal weights
    scorer_keyword_weight: float = 0.8
    scorer_vip_weight: float = 0.7
    scorer_velocity_weight: float = 0.9
    scorer_calendar_weight: float = 0.6

    # Red flag scorer: flag + severity thresholds
    scorer_flag_threshold: float = 0.3
    scorer_critical_threshold: float = 0.9  # score >= 0.9 → critical
    scorer_high_threshold: float = 0.7      # score >= 0.7 → high
    scorer_medium_threshold: float = 0.5    # score >= 0.5 → medium
    scorer_low_threshold: float = 0.3       # score >= 0.3 → low

    # Topic clusterer
    cluster_similarity_threshold: float = 0.5
    cluster_use_thread_ids: bool = True
    cluster_normalize_subjects: bool = True
    cluster_min_cluster_size: int = 2
    cluster_stable_ordering: bool = False

    # Briefing
    briefing_max_topics: int = 10

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


# Global settings instance
settings = Settings()


def warn_out_of_range(component: str, values: Dict[str, Any], low: float = 0.0, high: float = 1.0) -> None:
    """
    Log a warning for every numeric option outside [low, high].

    Values are never clamped; the warning only makes unusual tuning visible.

    Args:
        component: Component name used in the log event
        values: Mapping of option name to value (non-numeric entries are ignored)
        low: Lower bound of the expected range
        high: Upper bound of the expected range
    """
    for name, value in values.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        if value < low or value > high:
            logger.warning(
                "option_out_of_range",
                component=component,
                option=name,
                value=value,
                expected_range=[low, high],
            )
