"""
Calendar proximity detection.

Relates a message to the recipient's upcoming events. For every non-cancelled
event starting within the upcoming window, the event score is the sum of:
- Time proximity band x ``time_proximity_weight``
    <= 1h: 1.0, <= 24h: 0.8, <= 72h: 0.6, <= 168h: 0.4, beyond: 0.0
- Keyword similarity x ``content_match_weight`` (only above the threshold)
- ``attendee_overlap_weight`` when the sender is an attendee
- ``organizer_match_weight`` when the sender organizes the event

Event scores are capped at 1.0; the message score is the best event score.
"""

import threading
from dataclasses import asdict, dataclass, replace
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

import structlog

from ..config import settings, warn_out_of_range
from ..datetime_utils import ensure_utc, hours_between, utc_now
from ..models.message import CalendarEvent, Message
from ..models.registry import normalize_email
from ..text.keywords import extract_keywords, keyword_similarity
from .schemas import CalendarProximityResult, ProximityReason, RelevantEvent


logger = structlog.get_logger(__name__)


PROXIMITY_SCORE_THRESHOLD = 0.5

# (max hours to event, band score)
TIME_PROXIMITY_BANDS = [
    (1.0, 1.0),
    (24.0, 0.8),
    (72.0, 0.6),
    (168.0, 0.4),
]


def time_proximity_score(hours_to_event: float) -> float:
    """Band score for the distance to an event."""
    distance = abs(hours_to_event)
    for max_hours, band_score in TIME_PROXIMITY_BANDS:
        if distance <= max_hours:
            return band_score
    return 0.0


@dataclass(frozen=True)
class CalendarProximityOptions:
    """Window, weights and threshold for calendar proximity."""
    upcoming_window_days: int = 7
    time_proximity_weight: float = 0.6
    content_match_weight: float = 0.7
    attendee_overlap_weight: float = 0.8
    organizer_match_weight: float = 0.9
    content_similarity_threshold: float = 0.3

    @classmethod
    def from_config(cls) -> "CalendarProximityOptions":
        """Load options from settings."""
        return cls(
            upcoming_window_days=settings.calendar_upcoming_window_days,
            time_proximity_weight=settings.calendar_time_proximity_weight,
            content_match_weight=settings.calendar_content_match_weight,
            attendee_overlap_weight=settings.calendar_attendee_overlap_weight,
            organizer_match_weight=settings.calendar_organizer_match_weight,
            content_similarity_threshold=settings.calendar_content_similarity_threshold,
        )

    def weights(self) -> Dict[str, float]:
        return {
            "time_proximity_weight": self.time_proximity_weight,
            "content_match_weight": self.content_match_weight,
            "attendee_overlap_weight": self.attendee_overlap_weight,
            "organizer_match_weight": self.organizer_match_weight,
            "content_similarity_threshold": self.content_similarity_threshold,
        }


class CalendarProximityDetector:
    """
    Scores how closely a message relates to upcoming calendar events.

    The event list is an owned registry; updates are serialized by a lock and
    detection works on a snapshot.
    """

    def __init__(
        self,
        events: Optional[Iterable[CalendarEvent]] = None,
        options: Optional[CalendarProximityOptions] = None,
    ):
        self.options = options or CalendarProximityOptions.from_config()
        self._lock = threading.RLock()
        self._events: List[CalendarEvent] = []
        self.set_upcoming_events(events or [])

        self.logger = logger.bind(component="calendar_proximity")
        warn_out_of_range("calendar_proximity", self.options.weights())

    # ------------------------------------------------------------------
    # Event registry
    # ------------------------------------------------------------------

    def get_upcoming_events(self) -> List[CalendarEvent]:
        with self._lock:
            return list(self._events)

    def set_upcoming_events(self, events: Iterable[CalendarEvent]) -> None:
        with self._lock:
            self._events = list(events)

    def add_event(self, event: CalendarEvent) -> bool:
        """Add an event; False if an event with the same ID exists."""
        with self._lock:
            if any(e.id == event.id for e in self._events):
                return False
            self._events = self._events + [event]
            return True

    def remove_event(self, event_id: str) -> bool:
        """Remove an event by ID; True if one was removed."""
        with self._lock:
            remaining = [e for e in self._events if e.id != event_id]
            removed = len(remaining) != len(self._events)
            self._events = remaining
            return removed

    @property
    def has_events(self) -> bool:
        with self._lock:
            return bool(self._events)

    def events_in_window(self, reference_time: Optional[datetime] = None) -> List[CalendarEvent]:
        """Non-cancelled events starting between now and the end of the upcoming window."""
        now = ensure_utc(reference_time) if reference_time else utc_now()
        window_end = now + timedelta(days=self.options.upcoming_window_days)
        return [
            e
            for e in self.get_upcoming_events()
            if e.status != "cancelled" and now <= e.start_time <= window_end
        ]

    def has_events_in_window(self, reference_time: Optional[datetime] = None) -> bool:
        return bool(self.events_in_window(reference_time))

    # ------------------------------------------------------------------
    # Detection
    # ------------------------------------------------------------------

    def detect_proximity(
        self, message: Message, reference_time: Optional[datetime] = None
    ) -> CalendarProximityResult:
        """
        Score a message against upcoming events.

        Args:
            message: Message to relate to the calendar
            reference_time: "Now" (default: current UTC time)

        Returns:
            CalendarProximityResult with best score, relevant events and reasons
        """
        now = ensure_utc(reference_time) if reference_time else utc_now()
        opts = self.options

        events = self.events_in_window(now)

        message_keywords = extract_keywords(message.analysis_text)
        sender = normalize_email(message.sender.email)

        relevant: List[RelevantEvent] = []
        reasons: List[ProximityReason] = []
        best_score = 0.0

        for event in events:
            event_score = 0.0
            event_reasons: List[ProximityReason] = []
            attendee_overlap: List[str] = []
            is_organizer = False

            hours_to_event = hours_between(now, event.start_time)
            band = time_proximity_score(hours_to_event)
            if band > 0:
                weight = opts.time_proximity_weight * band
                event_score += weight
                event_reasons.append(
                    ProximityReason(
                        type="time_proximity",
                        description=f'Event "{event.title}" in {round(hours_to_event)} hours',
                        weight=weight,
                        event_id=event.id,
                    )
                )

            event_keywords = extract_keywords(event.analysis_text)
            if message_keywords and event_keywords:
                similarity = keyword_similarity(message_keywords, event_keywords)
            else:
                similarity = 0.0

            if similarity >= opts.content_similarity_threshold and similarity > 0:
                weight = opts.content_match_weight * similarity
                event_score += weight
                event_reasons.append(
                    ProximityReason(
                        type="content_match",
                        description=f"Content similarity: {round(similarity * 100)}%",
                        weight=weight,
                        event_id=event.id,
                    )
                )

            attendees = {normalize_email(a.email) for a in event.attendees}
            if sender in attendees:
                attendee_overlap.append(message.sender.email)
                event_score += opts.attendee_overlap_weight
                event_reasons.append(
                    ProximityReason(
                        type="attendee_overlap",
                        description=f'Sender is attendee of "{event.title}"',
                        weight=opts.attendee_overlap_weight,
                        event_id=event.id,
                    )
                )

            if sender == normalize_email(event.organizer.email):
                is_organizer = True
                event_score += opts.organizer_match_weight
                event_reasons.append(
                    ProximityReason(
                        type="organizer_match",
                        description=f'Sender is organizer of "{event.title}"',
                        weight=opts.organizer_match_weight,
                        event_id=event.id,
                    )
                )

            if event_score <= 0:
                continue

            capped = min(event_score, 1.0)
            relevant.append(
                RelevantEvent(
                    event=event,
                    proximity_score=capped,
                    time_to_event_hours=round(hours_to_event, 1),
                    content_similarity=round(similarity, 2),
                    attendee_overlap=attendee_overlap,
                    is_organizer_match=is_organizer,
                )
            )
            reasons.extend(event_reasons)
            best_score = max(best_score, capped)

        relevant.sort(key=lambda r: r.proximity_score, reverse=True)

        result = CalendarProximityResult(
            has_proximity=best_score >= PROXIMITY_SCORE_THRESHOLD,
            score=best_score,
            relevant_events=relevant,
            reasons=reasons,
        )

        self.logger.debug(
            "calendar_proximity_detected",
            message_id=message.id,
            events_in_window=len(events),
            relevant_events=len(relevant),
            score=best_score,
        )

        return result

    def detect_proximity_batch(
        self, messages: List[Message], reference_time: Optional[datetime] = None
    ) -> Dict[str, CalendarProximityResult]:
        """Batch detection; keyed by message ID."""
        return {m.id: self.detect_proximity(m, reference_time) for m in messages}

    def get_options(self) -> Dict[str, object]:
        """Options as a JSON-serializable dict."""
        return asdict(self.options)

    def update_options(self, **changes) -> None:
        """Replace selected options."""
        self.options = replace(self.options, **changes)
        warn_out_of_range("calendar_proximity", self.options.weights())
