"""
Unit tests for settings and option range warnings.
"""

import pytest
from unittest.mock import patch

from redflag_engine.config import Settings, warn_out_of_range
from redflag_engine.red_flags.scorer import RedFlagScorer, RedFlagScorerOptions

pytestmark = pytest.mark.unit


class TestSettings:
    """Test defaults and environment overrides."""

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.scorer_keyword_weight == 0.8
        assert settings.scorer_flag_threshold == 0.3
        assert settings.cluster_min_cluster_size == 2
        assert settings.cluster_stable_ordering is False
        assert settings.briefing_max_topics == 10
        assert settings.keyword_enable_fuzzy_matching is True

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("SCORER_FLAG_THRESHOLD", "0.45")
        monkeypatch.setenv("CLUSTER_STABLE_ORDERING", "true")

        settings = Settings(_env_file=None)

        assert settings.scorer_flag_threshold == 0.45
        assert settings.cluster_stable_ordering is True


class TestWarnOutOfRange:
    """Out-of-range options are logged, never clamped."""

    @patch("redflag_engine.config.logger")
    def test_in_range_is_silent(self, mock_logger):
        warn_out_of_range("scorer", {"a": 0.0, "b": 1.0, "c": 0.5})

        mock_logger.warning.assert_not_called()

    @patch("redflag_engine.config.logger")
    def test_out_of_range_warns(self, mock_logger):
        warn_out_of_range("scorer", {"a": 1.5, "b": -0.1, "c": 0.5})

        assert mock_logger.warning.call_count == 2
        event = mock_logger.warning.call_args_list[0]
        assert event.args == ("option_out_of_range",)
        assert event.kwargs["component"] == "scorer"
        assert event.kwargs["option"] == "a"
        assert event.kwargs["value"] == 1.5

    @patch("redflag_engine.config.logger")
    def test_non_numeric_ignored(self, mock_logger):
        warn_out_of_range("clusterer", {"flag": True, "name": "x", "none": None})

        mock_logger.warning.assert_not_called()

    @patch("redflag_engine.config.logger")
    def test_scorer_keeps_out_of_range_weight(self, mock_logger):
        scorer = RedFlagScorer(RedFlagScorerOptions(keyword_weight=2.0))

        assert scorer.options.keyword_weight == 2.0
        assert mock_logger.warning.call_count == 1
