"""
Default red-flag patterns shipped with the engine.

Used by KeywordMatcher when no pattern set is configured. Weight ranges:
- HIGH severity: 0.8-1.0
- MEDIUM severity: 0.5-0.7
- LOW severity: 0.2-0.4
"""

from typing import List, Optional

from .schemas import (
    ContextField,
    KeywordPattern,
    PatternSeverity,
    PatternType,
    RedFlagCategory,
)

_SUBJECT_BODY = [ContextField.SUBJECT, ContextField.BODY]
_SENDER_BODY = [ContextField.SENDER, ContextField.BODY]
_BODY = [ContextField.BODY]


def _keyword(id, pattern, weight, category, description, severity=PatternSeverity.HIGH, fields=None):
    return KeywordPattern(
        id=id,
        pattern=pattern,
        type=PatternType.KEYWORD,
        weight=weight,
        category=category,
        severity=severity,
        description=description,
        context_fields=fields or _SUBJECT_BODY,
    )


def _regex(id, pattern, weight, category, description, severity=PatternSeverity.HIGH, fields=None):
    return KeywordPattern(
        id=id,
        pattern=pattern,
        type=PatternType.REGEX,
        weight=weight,
        category=category,
        severity=severity,
        description=description,
        context_fields=fields or _SUBJECT_BODY,
    )


DEFAULT_RED_FLAG_PATTERNS: List[KeywordPattern] = [
    # ========================================================================
    # URGENCY - time-sensitive keywords
    # ========================================================================
    _keyword("urgency-urgent-keyword", "urgent", 0.9, RedFlagCategory.URGENCY,
             'Detects "urgent" keyword indicating time-sensitive matter'),
    _keyword("urgency-asap-keyword", "asap", 0.85, RedFlagCategory.URGENCY,
             'Detects "ASAP" abbreviation for urgent requests'),
    _keyword("urgency-immediate-keyword", "immediate", 0.9, RedFlagCategory.URGENCY,
             'Detects "immediate" indicating need for instant action'),
    _regex("urgency-priority-high-regex", r"\b(high|top|critical)\s+priority\b", 0.85,
           RedFlagCategory.URGENCY, "Detects high/top/critical priority mentions"),
    _regex("urgency-time-sensitive-regex", r"\btime[- ]sensitive\b", 0.8,
           RedFlagCategory.URGENCY, 'Detects "time-sensitive" or "time sensitive" phrases'),

    # ========================================================================
    # DEADLINE - time-bound requests
    # ========================================================================
    _keyword("deadline-keyword", "deadline", 0.85, RedFlagCategory.DEADLINE,
             'Detects "deadline" keyword for time-bound tasks'),
    _regex("deadline-due-today-regex", r"\bdue\s+(today|now|immediately|eod|end of (day|week))\b", 0.95,
           RedFlagCategory.DEADLINE, "Detects immediate due dates (today, now, EOD)"),
    _regex("deadline-overdue-regex", r"\b(overdue|past\s+due|late|missed\s+deadline)\b", 1.0,
           RedFlagCategory.DEADLINE, "Detects overdue or missed deadline language"),
    _regex("deadline-response-needed-regex",
           r"\b(need|require|must have)\s+(your\s+)?(response|reply|answer|feedback)\s+(by|before|asap)\b", 0.7,
           RedFlagCategory.DEADLINE, "Detects requests for timely response", PatternSeverity.MEDIUM),

    # ========================================================================
    # INCIDENT - system issues and outages
    # ========================================================================
    _keyword("incident-keyword", "incident", 0.9, RedFlagCategory.INCIDENT,
             'Detects "incident" keyword for system issues'),
    _keyword("incident-outage-keyword", "outage", 0.95, RedFlagCategory.OUTAGE,
             'Detects "outage" keyword for service disruptions'),
    _regex("incident-down-regex",
           r"\b(system|service|server|website|application|app|site)\s+(is\s+)?(down|offline|unavailable|not\s+working)\b",
           0.95, RedFlagCategory.INCIDENT, "Detects system/service down notifications"),
    _regex("incident-production-issue-regex", r"\b(production|prod|live)\s+(issue|problem|bug|error|failure)\b", 0.9,
           RedFlagCategory.INCIDENT, "Detects production environment issues"),
    _regex("incident-critical-bug-regex", r"\bcritical\s+(bug|issue|error|defect)\b", 0.9,
           RedFlagCategory.INCIDENT, "Detects critical bug reports"),

    # ========================================================================
    # EMERGENCY - critical situations
    # ========================================================================
    _keyword("emergency-keyword", "emergency", 1.0, RedFlagCategory.EMERGENCY,
             'Detects "emergency" keyword for critical situations'),
    _keyword("emergency-critical-keyword", "critical", 0.9, RedFlagCategory.EMERGENCY,
             'Detects "critical" keyword for severe issues'),
    _regex("emergency-alert-regex", r"\b(red\s+alert|code\s+red|sev[- ]?1|severity\s+1|p0|priority\s+0)\b", 1.0,
           RedFlagCategory.EMERGENCY, "Detects highest severity alerts (Sev1, P0, Code Red)"),
    _regex("emergency-security-breach-regex",
           r"\b(security\s+)?(breach|hack|compromise|attack|vulnerability|exploit)\b", 1.0,
           RedFlagCategory.EMERGENCY, "Detects security incidents and breaches"),

    # ========================================================================
    # ESCALATION - management involvement
    # ========================================================================
    _keyword("escalation-keyword", "escalation", 0.7, RedFlagCategory.ESCALATION,
             'Detects "escalation" keyword indicating management involvement', PatternSeverity.MEDIUM),
    _regex("escalation-escalate-regex", r"\b(escalate|escalating|escalated)\s+(to|this|the\s+issue)\b", 0.7,
           RedFlagCategory.ESCALATION, "Detects escalation action verbs", PatternSeverity.MEDIUM),
    _regex("escalation-management-attention-regex",
           r"\b(ceo|cto|cfo|vp|director|executive|management|leadership)\s+(needs|requires|wants|attention)\b", 0.85,
           RedFlagCategory.ESCALATION, "Detects executive/management attention requirements"),

    # ========================================================================
    # VIP - important sender indicators
    # ========================================================================
    _regex("vip-exec-titles-regex", r"\b(ceo|cto|cfo|coo|president|vice\s+president|vp|director|head\s+of)\b", 0.6,
           RedFlagCategory.VIP, "Detects executive titles in sender or signature",
           PatternSeverity.MEDIUM, _SENDER_BODY),
    _regex("vip-board-member-regex", r"\b(board\s+member|board\s+of\s+directors|founder|co-founder)\b", 0.8,
           RedFlagCategory.VIP, "Detects board members and founders", PatternSeverity.HIGH, _SENDER_BODY),

    # ========================================================================
    # Additional context patterns
    # ========================================================================
    _regex("urgency-action-required-regex", r"\b(action|attention)\s+(required|needed|requested)\b", 0.65,
           RedFlagCategory.URGENCY, "Detects action/attention required phrases", PatternSeverity.MEDIUM),
    _regex("urgency-please-respond-regex", r"\bplease\s+(respond|reply|get back)\s+(asap|immediately|urgently|soon)\b",
           0.6, RedFlagCategory.URGENCY, "Detects urgent response requests", PatternSeverity.MEDIUM, _BODY),
    _regex("incident-customer-impact-regex", r"\b(customer|client|user)s?\s+(affected|impacted|complaining|reporting)\b",
           0.85, RedFlagCategory.INCIDENT, "Detects customer impact notifications", PatternSeverity.HIGH, _BODY),
    _regex("deadline-final-reminder-regex", r"\b(final|last|urgent)\s+(reminder|notice|warning)\b", 0.8,
           RedFlagCategory.DEADLINE, "Detects final reminder/warning messages"),
]


def get_patterns_by_category(category: RedFlagCategory) -> List[KeywordPattern]:
    """Default patterns in a category."""
    return [p for p in DEFAULT_RED_FLAG_PATTERNS if p.category == category]


def get_patterns_by_severity(severity: PatternSeverity) -> List[KeywordPattern]:
    """Default patterns with a given severity."""
    return [p for p in DEFAULT_RED_FLAG_PATTERNS if p.severity == severity]


def get_patterns_for_field(field: ContextField) -> List[KeywordPattern]:
    """Default patterns tested against a field."""
    return [p for p in DEFAULT_RED_FLAG_PATTERNS if field in p.context_fields]


def get_pattern_by_id(pattern_id: str) -> Optional[KeywordPattern]:
    """Default pattern with the given ID, if any."""
    return next((p for p in DEFAULT_RED_FLAG_PATTERNS if p.id == pattern_id), None)
