"""
Red-flag pipeline: runs the detectors for a message and scores the result.

Signal assembly rules:
- keyword and VIP detection always run
- thread velocity runs only with thread context of at least 2 messages
- calendar proximity runs only when a non-cancelled event starts inside the
  upcoming window

Skipped detectors leave their signal absent, so they never dilute the score.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional

import structlog

from .models.message import CalendarEvent, Message
from .models.registry import Contact, VipEntry
from .red_flags.calendar_proximity import CalendarProximityDetector
from .red_flags.keyword_matcher import KeywordMatcher
from .red_flags.schemas import RedFlagScore, RedFlagSignals
from .red_flags.scorer import RedFlagScorer
from .red_flags.thread_velocity import ThreadVelocityDetector
from .red_flags.vip_detector import VipDetector, VipRegistry


logger = structlog.get_logger(__name__)


MIN_THREAD_CONTEXT = 2


class RedFlagPipeline:
    """Owns one instance of each detector plus the scorer."""

    def __init__(
        self,
        keyword_matcher: Optional[KeywordMatcher] = None,
        vip_detector: Optional[VipDetector] = None,
        velocity_detector: Optional[ThreadVelocityDetector] = None,
        calendar_detector: Optional[CalendarProximityDetector] = None,
        scorer: Optional[RedFlagScorer] = None,
    ):
        self.keyword_matcher = keyword_matcher or KeywordMatcher()
        self.vip_detector = vip_detector or VipDetector()
        self.velocity_detector = velocity_detector or ThreadVelocityDetector()
        self.calendar_detector = calendar_detector or CalendarProximityDetector()
        self.scorer = scorer or RedFlagScorer()

        self.logger = logger.bind(component="red_flag_pipeline")

    @classmethod
    def from_registries(
        cls,
        vips: Iterable[VipEntry] = (),
        contacts: Iterable[Contact] = (),
        events: Iterable[CalendarEvent] = (),
    ) -> "RedFlagPipeline":
        """
        Build a pipeline with default detectors over the given registries.

        Args:
            vips: Explicit VIP entries
            contacts: Known contacts
            events: Upcoming calendar events

        Returns:
            RedFlagPipeline configured from settings
        """
        return cls(
            vip_detector=VipDetector(registry=VipRegistry(vips=vips, contacts=contacts)),
            calendar_detector=CalendarProximityDetector(events=events),
        )

    def collect_signals(
        self,
        message: Message,
        thread_messages: Optional[List[Message]] = None,
        reference_time: Optional[datetime] = None,
    ) -> RedFlagSignals:
        """
        Run the applicable detectors for a message.

        Args:
            message: Message to analyze
            thread_messages: Messages of the message's thread (velocity context)
            reference_time: "Now" for recency and calendar windows

        Returns:
            RedFlagSignals with absent slots for skipped detectors
        """
        velocity = None
        if thread_messages and len(thread_messages) >= MIN_THREAD_CONTEXT:
            velocity = self.velocity_detector.analyze_emails(thread_messages)

        calendar = None
        if self.calendar_detector.has_events_in_window(reference_time):
            calendar = self.calendar_detector.detect_proximity(message, reference_time)

        return RedFlagSignals(
            keyword_match=self.keyword_matcher.match_email(message),
            vip_detection=self.vip_detector.detect_vip(message, reference_time),
            thread_velocity=velocity,
            calendar_proximity=calendar,
        )

    def score_message(
        self,
        message: Message,
        thread_messages: Optional[List[Message]] = None,
        reference_time: Optional[datetime] = None,
    ) -> RedFlagScore:
        """Collect signals for a message and score them."""
        return self.scorer.score_email(self.collect_signals(message, thread_messages, reference_time))

    def score_messages(
        self, messages: List[Message], reference_time: Optional[datetime] = None
    ) -> Dict[str, RedFlagScore]:
        """
        Score a batch, using each message's thread in the batch as velocity context.

        Messages without a thread ID are scored without velocity context.

        Args:
            messages: Messages to score
            reference_time: "Now" for recency and calendar windows

        Returns:
            Message ID → RedFlagScore, in input order
        """
        threads: Dict[str, List[Message]] = {}
        for message in messages:
            if message.thread_id:
                threads.setdefault(message.thread_id, []).append(message)

        scores: Dict[str, RedFlagScore] = {}
        for message in messages:
            thread_messages = threads.get(message.thread_id) if message.thread_id else None
            scores[message.id] = self.score_message(message, thread_messages, reference_time)

        self.logger.info(
            "messages_scored",
            total=len(scores),
            flagged=sum(1 for s in scores.values() if s.is_flagged),
            threads=len(threads),
        )

        return scores
