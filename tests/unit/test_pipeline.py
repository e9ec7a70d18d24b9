"""
Unit tests for the red-flag pipeline (detectors + scorer).
"""

import pytest

from redflag_engine.pipeline import RedFlagPipeline
from redflag_engine.red_flags.schemas import Severity, SignalKind

from tests.fixtures.messages import NOW, make_event, make_message, make_thread_messages, make_vip

pytestmark = pytest.mark.unit


def present_kinds(score):
    return [c.signal for c in score.signal_breakdown if c.is_present]


class TestCollectSignals:
    """Test which detectors run for a message."""

    def test_keyword_and_vip_always_run(self, neutral_message):
        signals = RedFlagPipeline().collect_signals(neutral_message, reference_time=NOW)

        assert signals.keyword_match is not None
        assert signals.vip_detection is not None
        assert signals.thread_velocity is None
        assert signals.calendar_proximity is None

    def test_velocity_needs_two_thread_messages(self, neutral_message):
        pipeline = RedFlagPipeline()

        assert pipeline.collect_signals(neutral_message, [neutral_message]).thread_velocity is None

        thread = make_thread_messages("t1", 2, gap_minutes=5)
        assert pipeline.collect_signals(thread[-1], thread).thread_velocity is not None

    def test_calendar_needs_events(self, neutral_message):
        pipeline = RedFlagPipeline.from_registries(events=[make_event()])

        signals = pipeline.collect_signals(neutral_message, reference_time=NOW)

        assert signals.calendar_proximity is not None

    def test_cancelled_event_leaves_calendar_absent(self, neutral_message):
        pipeline = RedFlagPipeline.from_registries(events=[make_event(status="cancelled")])

        signals = pipeline.collect_signals(neutral_message, reference_time=NOW)

        assert signals.calendar_proximity is None

    def test_events_outside_window_leave_calendar_absent(self, neutral_message):
        events = [
            make_event(id="far", hours_from_now=24 * 30),
            make_event(id="past", hours_from_now=-3),
        ]
        pipeline = RedFlagPipeline.from_registries(events=events)

        signals = pipeline.collect_signals(neutral_message, reference_time=NOW)

        assert signals.calendar_proximity is None

    def test_out_of_window_event_does_not_dilute_score(self):
        pipeline = RedFlagPipeline.from_registries(events=[make_event(id="far", hours_from_now=24 * 30)])
        message = make_message(subject="Urgent: please review")

        with_far_event = pipeline.score_message(message, reference_time=NOW)
        without_events = RedFlagPipeline().score_message(message, reference_time=NOW)

        assert SignalKind.CALENDAR not in present_kinds(with_far_event)
        assert with_far_event.score == without_events.score


class TestScoreMessage:
    """Test end-to-end scoring."""

    def test_neutral_message_not_flagged(self, neutral_message):
        score = RedFlagPipeline().score_message(neutral_message, reference_time=NOW)

        assert score.score == 0.0
        assert score.is_flagged is False
        assert score.severity == Severity.NONE
        assert present_kinds(score) == [SignalKind.KEYWORD, SignalKind.VIP]

    def test_urgent_vip_thread_is_flagged(self, urgent_vip_thread):
        pipeline = RedFlagPipeline.from_registries(vips=[make_vip()])
        last = urgent_vip_thread[-1]

        score = pipeline.score_message(last, urgent_vip_thread, reference_time=NOW)

        assert score.score >= 0.7
        assert score.severity in (Severity.HIGH, Severity.CRITICAL)
        assert score.is_flagged is True
        assert present_kinds(score) == [SignalKind.KEYWORD, SignalKind.VIP, SignalKind.VELOCITY]
        assert "explicit_vip" in [r.type for r in score.reasons]

    def test_calendar_signal_contributes(self):
        pipeline = RedFlagPipeline.from_registries(events=[make_event(organizer="alice@example.com")])

        score = pipeline.score_message(make_message(), reference_time=NOW)

        assert SignalKind.CALENDAR in present_kinds(score)
        # keyword and VIP run with zero raw scores and share the weight
        assert score.score == round(0.6 / 2.1, 2)
        assert score.is_flagged is False


class TestScoreMessages:
    """Test batch scoring with thread context from the batch."""

    def test_batch_uses_thread_context(self, urgent_vip_thread, neutral_message):
        pipeline = RedFlagPipeline.from_registries(vips=[make_vip()])

        scores = pipeline.score_messages(urgent_vip_thread + [neutral_message], reference_time=NOW)

        assert list(scores) == [m.id for m in urgent_vip_thread] + [neutral_message.id]
        assert scores[urgent_vip_thread[-1].id].signal_breakdown[2].is_present is True
        assert scores[neutral_message.id].signal_breakdown[2].is_present is False
        assert scores[neutral_message.id].is_flagged is False

    def test_empty_thread_id_has_no_velocity(self):
        messages = [make_message(id="a", minutes_ago=5), make_message(id="b")]

        scores = RedFlagPipeline().score_messages(messages, reference_time=NOW)

        assert all(not s.signal_breakdown[2].is_present for s in scores.values())
