"""
Unit tests for calendar proximity detection and the event registry.
"""

import pytest
from unittest.mock import patch

from redflag_engine.red_flags.calendar_proximity import (
    CalendarProximityDetector,
    CalendarProximityOptions,
    time_proximity_score,
)

from tests.fixtures.messages import NOW, make_event, make_message

pytestmark = pytest.mark.unit


def detect(events, message=None, **options):
    detector = CalendarProximityDetector(events, CalendarProximityOptions(**options))
    return detector.detect_proximity(message or make_message(), reference_time=NOW)


class TestTimeBands:
    """Test the time proximity bands."""

    @pytest.mark.parametrize(
        "hours,expected",
        [(0.5, 1.0), (1.0, 1.0), (12, 0.8), (24, 0.8), (48, 0.6), (100, 0.4), (168, 0.4), (200, 0.0)],
    )
    def test_bands(self, hours, expected):
        assert time_proximity_score(hours) == expected


class TestCalendarProximityOptions:
    """Test options defaults and config loading."""

    def test_defaults(self):
        options = CalendarProximityOptions()
        assert options.upcoming_window_days == 7
        assert options.time_proximity_weight == 0.6
        assert options.content_match_weight == 0.7
        assert options.attendee_overlap_weight == 0.8
        assert options.organizer_match_weight == 0.9
        assert options.content_similarity_threshold == 0.3

    @patch("redflag_engine.red_flags.calendar_proximity.settings")
    def test_from_config(self, mock_settings):
        mock_settings.calendar_upcoming_window_days = 3
        mock_settings.calendar_time_proximity_weight = 0.5
        mock_settings.calendar_content_match_weight = 0.5
        mock_settings.calendar_attendee_overlap_weight = 0.5
        mock_settings.calendar_organizer_match_weight = 0.5
        mock_settings.calendar_content_similarity_threshold = 0.2

        options = CalendarProximityOptions.from_config()

        assert options.upcoming_window_days == 3
        assert options.content_similarity_threshold == 0.2


class TestDetectProximity:
    """Test per-event scoring and aggregation."""

    def test_no_events(self):
        result = detect([])

        assert result.score == 0.0
        assert result.has_proximity is False
        assert result.relevant_events == []

    def test_time_proximity_only(self):
        result = detect([make_event(hours_from_now=2)])

        assert result.score == pytest.approx(0.48)
        assert result.has_proximity is False
        assert [r.type for r in result.reasons] == ["time_proximity"]
        assert result.reasons[0].description == 'Event "Quarterly planning" in 2 hours'
        assert result.relevant_events[0].time_to_event_hours == 2.0

    def test_organizer_match(self):
        message = make_message(sender="Organizer@example.com")
        result = detect([make_event(hours_from_now=2)], message)

        assert result.score == 1.0
        assert result.has_proximity is True
        assert result.relevant_events[0].is_organizer_match is True
        assert "organizer_match" in [r.type for r in result.reasons]

    def test_attendee_overlap(self):
        event = make_event(hours_from_now=2, attendees=["alice@example.com"])
        result = detect([event])

        assert result.score == 1.0
        assert result.relevant_events[0].attendee_overlap == ["alice@example.com"]

    def test_content_match(self):
        message = make_message(subject="Quarterly planning agenda", body="Slides for quarterly planning")
        result = detect([make_event(hours_from_now=50)], message)

        content = [r for r in result.reasons if r.type == "content_match"]
        assert len(content) == 1
        assert content[0].description == "Content similarity: 50%"
        assert result.relevant_events[0].content_similarity == 0.5
        assert result.score == pytest.approx(0.6 * 0.6 + 0.7 * 0.5)

    def test_content_below_threshold_ignored(self):
        message = make_message(subject="Quarterly numbers", body="See the spreadsheet attached here")
        result = detect([make_event(hours_from_now=50)], message)

        assert "content_match" not in [r.type for r in result.reasons]

    def test_events_outside_window_skipped(self):
        events = [
            make_event(id="past", hours_from_now=-1, organizer="alice@example.com"),
            make_event(id="far", hours_from_now=8 * 24, organizer="alice@example.com"),
        ]

        assert detect(events).score == 0.0

    def test_cancelled_event_skipped(self):
        event = make_event(status="cancelled", organizer="alice@example.com")
        assert detect([event]).score == 0.0

    def test_zero_score_event_not_relevant(self):
        result = detect([make_event(hours_from_now=200)], upcoming_window_days=10)

        assert result.score == 0.0
        assert result.relevant_events == []

    def test_best_event_wins_and_sorted(self):
        events = [
            make_event(id="soon", hours_from_now=2),
            make_event(id="owned", hours_from_now=30, organizer="alice@example.com"),
        ]

        result = detect(events)

        assert result.score == 1.0
        assert [r.event.id for r in result.relevant_events] == ["owned", "soon"]


class TestEventRegistry:
    """Test event registry operations."""

    def test_add_event_rejects_duplicate_ids(self):
        detector = CalendarProximityDetector(options=CalendarProximityOptions())

        assert detector.add_event(make_event(id="e1")) is True
        assert detector.add_event(make_event(id="e1", title="Other")) is False
        assert [e.title for e in detector.get_upcoming_events()] == ["Quarterly planning"]

    def test_remove_event(self):
        detector = CalendarProximityDetector([make_event(id="e1")], CalendarProximityOptions())

        assert detector.remove_event("e1") is True
        assert detector.remove_event("e1") is False
        assert detector.has_events is False

    def test_set_upcoming_events(self):
        detector = CalendarProximityDetector(options=CalendarProximityOptions())
        detector.set_upcoming_events([make_event(id="a"), make_event(id="b")])

        assert [e.id for e in detector.get_upcoming_events()] == ["a", "b"]
        assert detector.has_events is True

    def test_events_in_window(self):
        detector = CalendarProximityDetector(
            [
                make_event(id="soon"),
                make_event(id="cancelled", status="cancelled"),
                make_event(id="far", hours_from_now=24 * 8),
                make_event(id="past", hours_from_now=-1),
            ],
            CalendarProximityOptions(upcoming_window_days=7),
        )

        assert [e.id for e in detector.events_in_window(NOW)] == ["soon"]
        assert detector.has_events_in_window(NOW) is True
        detector.remove_event("soon")
        assert detector.has_events is True
        assert detector.has_events_in_window(NOW) is False

    def test_detect_proximity_batch(self):
        detector = CalendarProximityDetector(
            [make_event(organizer="boss@acme.com")], CalendarProximityOptions()
        )
        messages = [make_message(id="a", sender="boss@acme.com"), make_message(id="b")]

        results = detector.detect_proximity_batch(messages, reference_time=NOW)

        assert results["a"].has_proximity is True
        assert results["b"].has_proximity is False
