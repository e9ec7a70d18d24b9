"""
Thread velocity and escalation detection.

A thread is "hot" when replies pile up quickly or when its language turns to
escalation idioms. Signals (additive, capped at 1.0):
- Windowed reply count relative to the latest message (high window first,
  medium window only if the high one did not trigger)
- Rapid back-and-forth: average gap under 15 minutes with at least 3 messages
- Escalation language anywhere in the thread
"""

import re
from dataclasses import asdict, dataclass, replace
from datetime import timedelta
from typing import Dict, List, Optional

import structlog

from ..config import settings, warn_out_of_range
from ..datetime_utils import hours_between, minutes_between
from ..models.message import Message, MessageThread
from .schemas import ThreadVelocityResult, VelocityReason


logger = structlog.get_logger(__name__)


HIGH_VELOCITY_SCORE_THRESHOLD = 0.6
RAPID_EXCHANGE_MAX_AVG_MINUTES = 15.0
RAPID_EXCHANGE_MIN_MESSAGES = 3
RAPID_EXCHANGE_WEIGHT = 0.6
MAX_REPORTED_PHRASES = 3


ESCALATION_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in [
        r"\bescalat(e|ed|ing)\b",
        r"\bneeds?\s+(immediate|urgent)\s+(attention|response)\b",
        r"\bloop(ing)?\s+in\s+(management|leadership|exec)\b",
        r"\bcc['\"]?ing\s+(boss|manager|director|vp|ceo|cto)\b",
        r"\bradioactive\b",
        r"\bfire\s+drill\b",
        r"\ball\s+hands\s+on\s+deck\b",
        r"\bcode\s+red\b",
        r"\bdefcon\s+\d\b",
        r"\bwar\s+room\b",
        r"\bemergency\s+(meeting|call)\b",
        r"\btaking\s+this\s+offline\b",
        r"\bneed\s+to\s+discuss\s+(urgently|immediately)\b",
        r"\bget\s+on\s+a\s+call\s+(now|asap)\b",
        r"\bthis\s+is\s+(critical|urgent|important)\b",
        r"\bnot\s+(acceptable|happy|satisfied)\b",
        r"\b(disappointed|frustrated|concerned)\s+(with|about|by)\b",
        r"\bstop\s+everything\b",
        r"\bdrop\s+everything\b",
        r"\bpriority\s+(zero|one|1|0)\b",
    ]
]


def detect_escalation_language(message: Message) -> List[str]:
    """Escalation phrases found in a message (first hit per pattern)."""
    text = message.analysis_text
    phrases = []
    for pattern in ESCALATION_PATTERNS:
        found = pattern.search(text)
        if found:
            phrases.append(found.group(0))
    return phrases


def count_in_window(messages: List[Message], window_hours: float) -> int:
    """Messages received within ``window_hours`` of the latest one (sorted input)."""
    cutoff = messages[-1].received_at - timedelta(hours=window_hours)
    return sum(1 for m in messages if m.received_at >= cutoff)


@dataclass(frozen=True)
class ThreadVelocityOptions:
    """Windows, thresholds and weights for velocity detection."""
    high_velocity_window_hours: float = 2.0
    high_velocity_threshold: int = 4
    high_velocity_weight: float = 0.7
    medium_velocity_window_hours: float = 6.0
    medium_velocity_threshold: int = 3
    medium_velocity_weight: float = 0.5
    escalation_language_weight: float = 0.8

    @classmethod
    def from_config(cls) -> "ThreadVelocityOptions":
        """Load options from settings."""
        return cls(
            high_velocity_window_hours=settings.velocity_high_window_hours,
            high_velocity_threshold=settings.velocity_high_threshold,
            high_velocity_weight=settings.velocity_high_weight,
            medium_velocity_window_hours=settings.velocity_medium_window_hours,
            medium_velocity_threshold=settings.velocity_medium_threshold,
            medium_velocity_weight=settings.velocity_medium_weight,
            escalation_language_weight=settings.velocity_escalation_language_weight,
        )

    def weights(self) -> Dict[str, float]:
        return {
            "high_velocity_weight": self.high_velocity_weight,
            "medium_velocity_weight": self.medium_velocity_weight,
            "escalation_language_weight": self.escalation_language_weight,
        }


class ThreadVelocityDetector:
    """Analyzes reply cadence and escalation language of a thread."""

    def __init__(self, options: Optional[ThreadVelocityOptions] = None):
        self.options = options or ThreadVelocityOptions.from_config()

        self.logger = logger.bind(component="thread_velocity")
        warn_out_of_range("thread_velocity", self.options.weights())

    def analyze_thread(self, thread: MessageThread) -> ThreadVelocityResult:
        """Analyze a thread's messages."""
        return self.analyze_emails(thread.messages)

    def analyze_threads(self, threads: List[MessageThread]) -> Dict[str, ThreadVelocityResult]:
        """Batch analysis; keyed by thread ID."""
        return {thread.id: self.analyze_thread(thread) for thread in threads}

    def analyze_emails(self, messages: List[Message]) -> ThreadVelocityResult:
        """
        Analyze velocity of a set of messages belonging to one thread.

        Args:
            messages: Thread messages in any order

        Returns:
            ThreadVelocityResult; zero-valued when fewer than 2 messages
        """
        if len(messages) < 2:
            return ThreadVelocityResult(message_count=len(messages))

        opts = self.options
        ordered = sorted(messages, key=lambda m: m.received_at)
        reasons: List[VelocityReason] = []
        score = 0.0

        timespan_hours = abs(hours_between(ordered[0].received_at, ordered[-1].received_at))
        gaps = [
            minutes_between(prev.received_at, curr.received_at)
            for prev, curr in zip(ordered, ordered[1:])
        ]
        avg_gap_minutes = sum(gaps) / len(gaps)
        reply_frequency = len(messages) / timespan_hours if timespan_hours > 0 else 0.0

        # Windowed cadence: high window wins, medium only as fallback
        high_count = count_in_window(ordered, opts.high_velocity_window_hours)
        if high_count >= opts.high_velocity_threshold:
            score += opts.high_velocity_weight
            reasons.append(
                VelocityReason(
                    type="high_velocity",
                    description=f"{high_count} replies in {opts.high_velocity_window_hours:g} hours",
                    weight=opts.high_velocity_weight,
                )
            )
        else:
            medium_count = count_in_window(ordered, opts.medium_velocity_window_hours)
            if medium_count >= opts.medium_velocity_threshold:
                score += opts.medium_velocity_weight
                reasons.append(
                    VelocityReason(
                        type="medium_velocity",
                        description=f"{medium_count} replies in {opts.medium_velocity_window_hours:g} hours",
                        weight=opts.medium_velocity_weight,
                    )
                )

        if avg_gap_minutes < RAPID_EXCHANGE_MAX_AVG_MINUTES and len(messages) >= RAPID_EXCHANGE_MIN_MESSAGES:
            score += RAPID_EXCHANGE_WEIGHT
            reasons.append(
                VelocityReason(
                    type="rapid_back_and_forth",
                    description=f"Rapid back-and-forth: avg {round(avg_gap_minutes)} min between replies",
                    weight=RAPID_EXCHANGE_WEIGHT,
                )
            )

        phrases: List[str] = []
        for message in ordered:
            for phrase in detect_escalation_language(message):
                if phrase not in phrases:
                    phrases.append(phrase)

        if phrases:
            score += opts.escalation_language_weight
            quoted = '", "'.join(phrases[:MAX_REPORTED_PHRASES])
            reasons.append(
                VelocityReason(
                    type="escalation_language",
                    description=f'Escalation language detected: "{quoted}"',
                    weight=opts.escalation_language_weight,
                )
            )

        score = min(score, 1.0)

        result = ThreadVelocityResult(
            is_high_velocity=score >= HIGH_VELOCITY_SCORE_THRESHOLD,
            score=score,
            reply_frequency=reply_frequency,
            avg_time_between_replies=round(avg_gap_minutes, 1),
            has_escalation_language=bool(phrases),
            escalation_phrases=phrases,
            reasons=reasons,
            message_count=len(messages),
            thread_timespan_hours=round(timespan_hours, 1),
        )

        self.logger.debug(
            "thread_velocity_analyzed",
            message_count=len(messages),
            score=score,
            is_high_velocity=result.is_high_velocity,
            escalation_phrases=len(phrases),
        )

        return result

    def get_options(self) -> Dict[str, object]:
        """Options as a JSON-serializable dict."""
        return asdict(self.options)

    def update_options(self, **changes) -> None:
        """Replace selected options."""
        self.options = replace(self.options, **changes)
        warn_out_of_range("thread_velocity", self.options.weights())
