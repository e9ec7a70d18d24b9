"""
Red-flag schemas.

Defines Pydantic models for:
- Keyword patterns and matches
- Per-detector results (keyword, VIP, thread velocity, calendar proximity)
- Composite red-flag score with signal breakdown

Every detector result is a plain value object; the scorer reads them and never
mutates them.
"""

import re
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..models.message import CalendarEvent
from ..models.registry import Contact, VipEntry


# ============================================================================
# ENUMS
# ============================================================================

class PatternType(str, Enum):
    """How a pattern is matched against text."""
    KEYWORD = "keyword"
    REGEX = "regex"


class PatternSeverity(str, Enum):
    """Severity of an individual pattern (informational, does not enter the score)."""
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class RedFlagCategory(str, Enum):
    """Pattern category."""
    URGENCY = "urgency"
    INCIDENT = "incident"
    DEADLINE = "deadline"
    ESCALATION = "escalation"
    VIP = "vip"
    OUTAGE = "outage"
    EMERGENCY = "emergency"


class ContextField(str, Enum):
    """Message field a pattern is tested against."""
    SUBJECT = "subject"
    BODY = "body"
    SNIPPET = "snippet"
    SENDER = "sender"


class SignalKind(str, Enum):
    """The four independent signals, in scoring order."""
    KEYWORD = "keyword"
    VIP = "vip"
    VELOCITY = "velocity"
    CALENDAR = "calendar"


class Severity(str, Enum):
    """Composite red-flag severity (ordinal)."""
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# ============================================================================
# KEYWORD MATCHING
# ============================================================================

class KeywordPattern(BaseModel):
    """
    A weighted keyword or regex pattern.

    Regex patterns are compiled once at construction; an invalid expression
    raises ``ValueError``.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable pattern ID")
    pattern: str = Field(..., description="Keyword text or regular expression")
    type: PatternType = Field(PatternType.KEYWORD, description="keyword | regex")
    weight: float = Field(..., description="Static weight, nominally in [0, 1]")
    context_fields: List[ContextField] = Field(
        default_factory=lambda: [ContextField.SUBJECT, ContextField.BODY],
        min_length=1,
        description="Fields this pattern is tested against",
    )
    severity: PatternSeverity = Field(PatternSeverity.MEDIUM, description="Pattern severity")
    category: RedFlagCategory = Field(RedFlagCategory.URGENCY, description="Pattern category")
    description: str = Field("", description="Human-readable description")
    case_sensitive: bool = Field(False, description="Match case-sensitively")

    @model_validator(mode="after")
    def validate_regex(self) -> "KeywordPattern":
        """Reject regex patterns that do not compile."""
        if self.type == PatternType.REGEX:
            try:
                re.compile(self.pattern)
            except re.error as e:
                raise ValueError(f"Invalid regex for pattern {self.id!r}: {e}") from e
        return self

    @property
    def compiled(self) -> "re.Pattern[str]":
        """Compiled regex (re caches compilation, so this is cheap)."""
        flags = 0 if self.case_sensitive else re.IGNORECASE
        return re.compile(self.pattern, flags)


class PatternMatch(BaseModel):
    """A single pattern hit in one field."""
    pattern: KeywordPattern
    field: ContextField
    matched_text: str
    position: Optional[int] = None
    fuzzy: bool = False


class KeywordMatchResult(BaseModel):
    """Result of matching a message against the pattern set."""
    matches: List[PatternMatch] = Field(default_factory=list)
    total_matches: int = 0
    has_matches: bool = False
    aggregate_weight: float = Field(
        0.0, description="Sum of unique matched pattern weights, capped at 1.0"
    )

    @property
    def score(self) -> float:
        return min(self.aggregate_weight, 1.0)


# ============================================================================
# VIP DETECTION
# ============================================================================

class VipReason(BaseModel):
    """Why a sender scored as important."""
    type: str = Field(
        ...,
        description="explicit_vip | high_interaction | medium_interaction | recent_interaction | job_title",
    )
    description: str
    weight: float


class VipDetectionResult(BaseModel):
    """Result of VIP detection for one sender."""
    is_vip: bool = False
    score: float = 0.0
    reasons: List[VipReason] = Field(default_factory=list)
    vip_entry: Optional[VipEntry] = None
    contact: Optional[Contact] = None


# ============================================================================
# THREAD VELOCITY
# ============================================================================

class VelocityReason(BaseModel):
    """Why a thread scored as fast-moving."""
    type: str = Field(
        ...,
        description="high_velocity | medium_velocity | rapid_back_and_forth | escalation_language",
    )
    description: str
    weight: float


class ThreadVelocityResult(BaseModel):
    """Result of thread velocity analysis."""
    is_high_velocity: bool = False
    score: float = 0.0
    reply_frequency: float = Field(0.0, description="Messages per hour over the thread timespan")
    avg_time_between_replies: float = Field(0.0, description="Minutes, rounded to 1 decimal")
    has_escalation_language: bool = False
    escalation_phrases: List[str] = Field(default_factory=list)
    reasons: List[VelocityReason] = Field(default_factory=list)
    message_count: int = 0
    thread_timespan_hours: float = Field(0.0, description="Hours, rounded to 1 decimal")


# ============================================================================
# CALENDAR PROXIMITY
# ============================================================================

class ProximityReason(BaseModel):
    """Why a message relates to an upcoming event."""
    type: str = Field(
        ..., description="time_proximity | content_match | attendee_overlap | organizer_match"
    )
    description: str
    weight: float
    event_id: str


class RelevantEvent(BaseModel):
    """An upcoming event related to the message."""
    event: CalendarEvent
    proximity_score: float
    time_to_event_hours: float
    content_similarity: float
    attendee_overlap: List[str] = Field(default_factory=list)
    is_organizer_match: bool = False


class CalendarProximityResult(BaseModel):
    """Result of calendar proximity detection."""
    has_proximity: bool = False
    score: float = 0.0
    relevant_events: List[RelevantEvent] = Field(default_factory=list)
    reasons: List[ProximityReason] = Field(default_factory=list)


SignalResult = Union[
    KeywordMatchResult, VipDetectionResult, ThreadVelocityResult, CalendarProximityResult
]


# ============================================================================
# COMPOSITE SCORE
# ============================================================================

class RedFlagSignals(BaseModel):
    """
    Detector outputs for one message.

    Any signal may be absent; absent signals do not dilute the composite score.
    """
    keyword_match: Optional[KeywordMatchResult] = None
    vip_detection: Optional[VipDetectionResult] = None
    thread_velocity: Optional[ThreadVelocityResult] = None
    calendar_proximity: Optional[CalendarProximityResult] = None

    def get(self, kind: SignalKind) -> Optional[SignalResult]:
        """Detector result for a signal kind."""
        if kind == SignalKind.KEYWORD:
            return self.keyword_match
        if kind == SignalKind.VIP:
            return self.vip_detection
        if kind == SignalKind.VELOCITY:
            return self.thread_velocity
        return self.calendar_proximity

    def slots(self) -> Tuple[Tuple[SignalKind, Optional[SignalResult]], ...]:
        """All four (kind, result) slots in scoring order."""
        return tuple((kind, self.get(kind)) for kind in SignalKind)


class SignalContribution(BaseModel):
    """Contribution of one signal to the composite score."""
    signal: SignalKind
    raw_score: float
    weight: float
    contribution: float
    is_present: bool


class ScoringReason(BaseModel):
    """Audit trail entry explaining part of a score."""
    signal: SignalKind
    type: str
    description: str
    weight: float


class RedFlagScore(BaseModel):
    """
    Composite red-flag result.

    ``signal_breakdown`` always holds exactly four entries, one per SignalKind.
    """
    is_flagged: bool = False
    score: float = Field(0.0, ge=0.0, le=1.0, description="Composite score rounded to 2 decimals")
    severity: Severity = Severity.NONE
    signal_breakdown: List[SignalContribution] = Field(default_factory=list)
    reasons: List[ScoringReason] = Field(default_factory=list)
