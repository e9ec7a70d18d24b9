"""
Subject line normalization.

Strips reply/forward markers and bracketed list tags so that
"RE: Fwd: [team] Q4 budget" and "Q4 budget" land in the same group.
"""

import re

# Applied repeatedly until none of them changes the subject
SUBJECT_PREFIX_PATTERNS = [
    re.compile(r"^re:\s*", re.IGNORECASE),
    re.compile(r"^fwd?:\s*", re.IGNORECASE),
    re.compile(r"^fw:\s*", re.IGNORECASE),
    re.compile(r"^\[.*?\]\s*"),
]

_WHITESPACE = re.compile(r"\s+")


def normalize_subject(subject: str) -> str:
    """
    Normalize a subject line for grouping.

    Args:
        subject: Raw subject

    Returns:
        Subject without leading reply/forward/tag prefixes and with collapsed whitespace

    Examples:
        >>> normalize_subject("RE: Fwd:  [ops]  Outage   report")
        'Outage report'
    """
    normalized = subject
    changed = True
    while changed:
        changed = False
        for pattern in SUBJECT_PREFIX_PATTERNS:
            stripped = pattern.sub("", normalized, count=1)
            if stripped != normalized:
                normalized = stripped
                changed = True

    return _WHITESPACE.sub(" ", normalized.strip())
