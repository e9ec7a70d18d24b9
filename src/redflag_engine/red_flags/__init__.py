"""
Red-flag detection package.

Four independent detectors feed one composite scorer:
- keyword_matcher: weighted keyword / regex patterns (with fuzzy matching)
- vip_detector: VIP registry and contact heuristics
- thread_velocity: reply cadence and escalation language
- calendar_proximity: relation to upcoming calendar events
- scorer: weighted average over present signals, severity banding
"""

from redflag_engine.red_flags.schemas import (
    # Enums
    PatternType,
    PatternSeverity,
    RedFlagCategory,
    ContextField,
    SignalKind,
    Severity,

    # Models
    KeywordPattern,
    PatternMatch,
    KeywordMatchResult,
    VipReason,
    VipDetectionResult,
    VelocityReason,
    ThreadVelocityResult,
    ProximityReason,
    RelevantEvent,
    CalendarProximityResult,
    RedFlagSignals,
    SignalContribution,
    ScoringReason,
    RedFlagScore,
)
from redflag_engine.red_flags.default_patterns import DEFAULT_RED_FLAG_PATTERNS
from redflag_engine.red_flags.keyword_matcher import KeywordMatcher, KeywordMatcherOptions
from redflag_engine.red_flags.vip_detector import VipDetector, VipDetectorOptions, VipRegistry
from redflag_engine.red_flags.thread_velocity import ThreadVelocityDetector, ThreadVelocityOptions
from redflag_engine.red_flags.calendar_proximity import (
    CalendarProximityDetector,
    CalendarProximityOptions,
)
from redflag_engine.red_flags.scorer import RedFlagScorer, RedFlagScorerOptions

__all__ = [
    # Enums
    "PatternType",
    "PatternSeverity",
    "RedFlagCategory",
    "ContextField",
    "SignalKind",
    "Severity",

    # Models
    "KeywordPattern",
    "PatternMatch",
    "KeywordMatchResult",
    "VipReason",
    "VipDetectionResult",
    "VelocityReason",
    "ThreadVelocityResult",
    "ProximityReason",
    "RelevantEvent",
    "CalendarProximityResult",
    "RedFlagSignals",
    "SignalContribution",
    "ScoringReason",
    "RedFlagScore",

    # Detectors
    "DEFAULT_RED_FLAG_PATTERNS",
    "KeywordMatcher",
    "KeywordMatcherOptions",
    "VipDetector",
    "VipDetectorOptions",
    "VipRegistry",
    "ThreadVelocityDetector",
    "ThreadVelocityOptions",
    "CalendarProximityDetector",
    "CalendarProximityOptions",
    "RedFlagScorer",
    "RedFlagScorerOptions",
]
