"""
Keyword and regex pattern matching for red-flag detection.

Each configured pattern is tested against its context fields (subject, body,
snippet, sender). Keyword patterns use substring search with optional
Levenshtein fuzzy matching; regex patterns use ``re.search``.

The aggregate weight is the sum of the weights of the distinct patterns that
matched, capped at 1.0 so keyword stuffing cannot dominate the composite score.
"""

from dataclasses import asdict, dataclass, replace
from typing import Dict, Iterable, List, Optional

import structlog

from ..config import settings, warn_out_of_range
from ..models.message import Message
from ..text.fuzzy import fuzzy_find
from .default_patterns import DEFAULT_RED_FLAG_PATTERNS
from .schemas import (
    ContextField,
    KeywordMatchResult,
    KeywordPattern,
    PatternMatch,
    PatternType,
)


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class KeywordMatcherOptions:
    """Fuzzy matching configuration."""
    enable_fuzzy_matching: bool = True
    fuzzy_match_threshold: float = 0.8
    max_fuzzy_distance: int = 2

    @classmethod
    def from_config(cls) -> "KeywordMatcherOptions":
        """Load options from settings."""
        return cls(
            enable_fuzzy_matching=settings.keyword_enable_fuzzy_matching,
            fuzzy_match_threshold=settings.keyword_fuzzy_match_threshold,
            max_fuzzy_distance=settings.keyword_max_fuzzy_distance,
        )


def extract_field_value(message: Message, field: ContextField) -> str:
    """
    Text of a message field.

    ``body`` falls back to the snippet when the body is missing; ``sender`` is
    the display name followed by the address.
    """
    if field == ContextField.SUBJECT:
        return message.subject or ""
    if field == ContextField.BODY:
        return message.body_or_snippet or ""
    if field == ContextField.SNIPPET:
        return message.snippet or ""
    if field == ContextField.SENDER:
        return message.sender.display
    return ""


def match_pattern(
    pattern: KeywordPattern,
    message: Message,
    options: KeywordMatcherOptions,
) -> List[PatternMatch]:
    """
    Test one pattern against each of its context fields.

    Args:
        pattern: Pattern to test
        message: Message to scan
        options: Fuzzy matching options

    Returns:
        One PatternMatch per field that matched
    """
    matches = []

    for field in pattern.context_fields:
        value = extract_field_value(message, field)
        if not value:
            continue

        if pattern.type == PatternType.REGEX:
            found = pattern.compiled.search(value)
            if found:
                matches.append(
                    PatternMatch(
                        pattern=pattern,
                        field=field,
                        matched_text=found.group(0),
                        position=found.start(),
                    )
                )
            continue

        haystack = value if pattern.case_sensitive else value.lower()
        needle = pattern.pattern if pattern.case_sensitive else pattern.pattern.lower()
        index = haystack.find(needle)
        if index != -1:
            matches.append(
                PatternMatch(
                    pattern=pattern,
                    field=field,
                    matched_text=value[index:index + len(pattern.pattern)],
                    position=index,
                )
            )
            continue

        if options.enable_fuzzy_matching:
            fuzzy = fuzzy_find(
                value,
                pattern.pattern,
                threshold=options.fuzzy_match_threshold,
                max_distance=options.max_fuzzy_distance,
                case_sensitive=pattern.case_sensitive,
            )
            if fuzzy is not None:
                matched_text, position = fuzzy
                matches.append(
                    PatternMatch(
                        pattern=pattern,
                        field=field,
                        matched_text=matched_text,
                        position=position,
                        fuzzy=True,
                    )
                )

    return matches


def aggregate_weight(matches: Iterable[PatternMatch]) -> float:
    """Sum of distinct matched pattern weights, capped at 1.0."""
    weights: Dict[str, float] = {}
    for match in matches:
        weights.setdefault(match.pattern.id, match.pattern.weight)
    return min(sum(weights.values()), 1.0)


class KeywordMatcher:
    """
    Matches messages against weighted red-flag patterns.

    Patterns are evaluated in declaration order; the result preserves that order.
    """

    def __init__(
        self,
        patterns: Optional[List[KeywordPattern]] = None,
        options: Optional[KeywordMatcherOptions] = None,
    ):
        self.options = options or KeywordMatcherOptions.from_config()
        self._patterns: List[KeywordPattern] = list(
            DEFAULT_RED_FLAG_PATTERNS if patterns is None else patterns
        )

        self.logger = logger.bind(component="keyword_matcher")
        self._check_weights(self._patterns)

    def match_email(self, message: Message) -> KeywordMatchResult:
        """
        Match a message against all configured patterns.

        Args:
            message: Message to scan

        Returns:
            KeywordMatchResult with matches and capped aggregate weight
        """
        return self.match_email_with_patterns(message, self._patterns)

    def match_email_with_patterns(
        self, message: Message, patterns: List[KeywordPattern]
    ) -> KeywordMatchResult:
        """
        Match a message against an explicit pattern list.

        Args:
            message: Message to scan
            patterns: Patterns to use instead of the configured set

        Returns:
            KeywordMatchResult
        """
        matches: List[PatternMatch] = []
        for pattern in patterns:
            matches.extend(match_pattern(pattern, message, self.options))

        result = KeywordMatchResult(
            matches=matches,
            total_matches=len(matches),
            has_matches=bool(matches),
            aggregate_weight=aggregate_weight(matches),
        )

        self.logger.debug(
            "keywords_matched",
            message_id=message.id,
            total_matches=result.total_matches,
            aggregate_weight=result.aggregate_weight,
        )

        return result

    def match_emails(self, messages: List[Message]) -> Dict[str, KeywordMatchResult]:
        """Batch match; keyed by message ID."""
        return {message.id: self.match_email(message) for message in messages}

    def get_patterns(self) -> List[KeywordPattern]:
        """Copy of the configured patterns."""
        return list(self._patterns)

    def set_patterns(self, patterns: List[KeywordPattern]) -> None:
        """Replace the configured patterns."""
        self._check_weights(patterns)
        self._patterns = list(patterns)

    def add_patterns(self, patterns: List[KeywordPattern]) -> None:
        """Append patterns to the configured set."""
        self._check_weights(patterns)
        self._patterns = self._patterns + list(patterns)

    def get_options(self) -> Dict[str, object]:
        """Options as a JSON-serializable dict."""
        return asdict(self.options)

    def update_options(self, **changes) -> None:
        """Replace selected options."""
        self.options = replace(self.options, **changes)

    def _check_weights(self, patterns: List[KeywordPattern]) -> None:
        warn_out_of_range("keyword_matcher", {p.id: p.weight for p in patterns})
