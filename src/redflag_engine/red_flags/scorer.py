"""
Composite red-flag scoring.

Combines the four independent signals (keyword, VIP, thread velocity,
calendar proximity) into one score:

    score = sum(raw_i * weight_i) / sum(weight_i)    over PRESENT signals only

An absent signal never dilutes the score. With no signal present the score is 0
and the message is not flagged. The score is clipped to [0, 1] and rounded half
up to 2 decimals; severity and the flag decision are derived from the rounded
score so they always agree with the reported value.
"""

from dataclasses import asdict, dataclass, replace
from typing import Dict, List, Optional, Tuple

import numpy as np
import structlog

from ..config import settings, warn_out_of_range
from .schemas import (
    CalendarProximityResult,
    KeywordMatchResult,
    RedFlagScore,
    RedFlagSignals,
    ScoringReason,
    Severity,
    SignalContribution,
    SignalKind,
    SignalResult,
    ThreadVelocityResult,
    VipDetectionResult,
)


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class RedFlagScorerOptions:
    """
    Signal weights and thresholds for composite scoring.

    Values are not range-checked; out-of-range values only produce a warning.
    """
    keyword_weight: float = 0.8
    vip_weight: float = 0.7
    velocity_weight: float = 0.9
    calendar_weight: float = 0.6
    flag_threshold: float = 0.3
    critical_threshold: float = 0.9
    high_threshold: float = 0.7
    medium_threshold: float = 0.5
    low_threshold: float = 0.3

    @classmethod
    def from_config(cls) -> "RedFlagScorerOptions":
        """Load options from settings."""
        return cls(
            keyword_weight=settings.scorer_keyword_weight,
            vip_weight=settings.scorer_vip_weight,
            velocity_weight=settings.scorer_velocity_weight,
            calendar_weight=settings.scorer_calendar_weight,
            flag_threshold=settings.scorer_flag_threshold,
            critical_threshold=settings.scorer_critical_threshold,
            high_threshold=settings.scorer_high_threshold,
            medium_threshold=settings.scorer_medium_threshold,
            low_threshold=settings.scorer_low_threshold,
        )

    def weight_for(self, kind: SignalKind) -> float:
        """Configured weight of a signal kind."""
        return {
            SignalKind.KEYWORD: self.keyword_weight,
            SignalKind.VIP: self.vip_weight,
            SignalKind.VELOCITY: self.velocity_weight,
            SignalKind.CALENDAR: self.calendar_weight,
        }[kind]


def round_half_up(value: float, decimals: int = 2) -> float:
    """Round to ``decimals`` places with halves going up (0.125 -> 0.13)."""
    factor = 10 ** decimals
    return float(np.floor(value * factor + 0.5) / factor)


def calculate_severity(score: float, options: RedFlagScorerOptions) -> Severity:
    """
    Bucket a composite score into a severity level.

    Args:
        score: Composite score
        options: Thresholds

    Returns:
        Severity (NONE below the low threshold)
    """
    if score < options.low_threshold:
        return Severity.NONE
    if score >= options.critical_threshold:
        return Severity.CRITICAL
    if score >= options.high_threshold:
        return Severity.HIGH
    if score >= options.medium_threshold:
        return Severity.MEDIUM
    return Severity.LOW


def signal_raw_score(result: SignalResult) -> float:
    """Raw [0, 1] score reported by a detector result."""
    if isinstance(result, KeywordMatchResult):
        return min(result.aggregate_weight, 1.0)
    return result.score


def signal_reasons(kind: SignalKind, result: SignalResult) -> List[ScoringReason]:
    """Detector reasons converted to scoring reasons, in detector order."""
    if isinstance(result, KeywordMatchResult):
        return [
            ScoringReason(
                signal=kind,
                type="keyword_match",
                description=f'Matched pattern: "{match.pattern.id}" in {match.field.value}',
                weight=match.pattern.weight,
            )
            for match in result.matches
        ]

    if isinstance(
        result, (VipDetectionResult, ThreadVelocityResult, CalendarProximityResult)
    ):
        return [
            ScoringReason(
                signal=kind,
                type=reason.type,
                description=reason.description,
                weight=reason.weight,
            )
            for reason in result.reasons
        ]

    return []


class RedFlagScorer:
    """
    Combines detector outputs into a composite red-flag score.

    Stateless apart from its options; safe to share across threads.
    """

    def __init__(self, options: Optional[RedFlagScorerOptions] = None):
        self.options = options or RedFlagScorerOptions.from_config()

        self.logger = logger.bind(component="red_flag_scorer")
        warn_out_of_range("red_flag_scorer", asdict(self.options))

    def score_email(self, signals: RedFlagSignals) -> RedFlagScore:
        """
        Score a message from its detector outputs.

        Args:
            signals: Detector results; any may be None

        Returns:
            RedFlagScore with exactly four signal contributions
        """
        breakdown: List[SignalContribution] = []
        reasons: List[ScoringReason] = []

        slots: List[Tuple[SignalKind, Optional[SignalResult]]] = list(signals.slots())
        raw = np.zeros(len(slots))
        weights = np.zeros(len(slots))
        present = np.zeros(len(slots), dtype=bool)

        for i, (kind, result) in enumerate(slots):
            weight = self.options.weight_for(kind)
            weights[i] = weight

            if result is None:
                breakdown.append(
                    SignalContribution(
                        signal=kind, raw_score=0.0, weight=weight, contribution=0.0, is_present=False
                    )
                )
                continue

            raw[i] = signal_raw_score(result)
            present[i] = True
            breakdown.append(
                SignalContribution(
                    signal=kind,
                    raw_score=float(raw[i]),
                    weight=weight,
                    contribution=float(raw[i] * weight),
                    is_present=True,
                )
            )
            reasons.extend(signal_reasons(kind, result))

        total_weight = float(weights[present].sum())
        if total_weight > 0:
            composite = float((raw[present] * weights[present]).sum()) / total_weight
        else:
            composite = 0.0

        score = round_half_up(float(np.clip(composite, 0.0, 1.0)))
        severity = calculate_severity(score, self.options)

        result = RedFlagScore(
            is_flagged=bool(present.any()) and score >= self.options.flag_threshold,
            score=score,
            severity=severity,
            signal_breakdown=breakdown,
            reasons=reasons,
        )

        self.logger.debug(
            "red_flag_scored",
            score=score,
            severity=severity.value,
            is_flagged=result.is_flagged,
            present_signals=[kind.value for (kind, r) in slots if r is not None],
        )

        return result

    def score_emails(self, signals_by_id: Dict[str, RedFlagSignals]) -> Dict[str, RedFlagScore]:
        """
        Score many messages independently.

        Args:
            signals_by_id: Message ID → signals

        Returns:
            Message ID → RedFlagScore (same keys, same order)
        """
        scores = {message_id: self.score_email(signals) for message_id, signals in signals_by_id.items()}

        self.logger.info(
            "red_flags_batch_scored",
            total=len(scores),
            flagged=sum(1 for s in scores.values() if s.is_flagged),
        )

        return scores

    def get_severity(self, score: float) -> Severity:
        """Severity for an arbitrary score under the current thresholds."""
        return calculate_severity(score, self.options)

    def should_flag(self, score: float) -> bool:
        """Whether a score meets the flag threshold."""
        return score >= self.options.flag_threshold

    def get_options(self) -> Dict[str, float]:
        """Options as a JSON-serializable dict."""
        return asdict(self.options)

    def update_options(self, **changes) -> None:
        """Replace selected options."""
        self.options = replace(self.options, **changes)
        warn_out_of_range("red_flag_scorer", asdict(self.options))
