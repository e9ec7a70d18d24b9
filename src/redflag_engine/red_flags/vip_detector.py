"""
VIP sender detection.

Scores how important a sender is from:
- Explicit VIP registry membership
- Contact interaction frequency (high / medium bands, mutually exclusive)
- Recency of the last interaction
- Executive job titles

Contributions are additive and the total is capped at 1.0. A sender is a VIP
when the score reaches 0.5.
"""

import math
import threading
from dataclasses import asdict, dataclass, replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

import structlog

from ..config import settings, warn_out_of_range
from ..datetime_utils import ensure_utc, utc_now
from ..models.message import Message
from ..models.registry import Contact, VipEntry, normalize_email
from .schemas import VipDetectionResult, VipReason


logger = structlog.get_logger(__name__)


VIP_SCORE_THRESHOLD = 0.5
JOB_TITLE_WEIGHT = 0.3

# Substring match against the lowercased job title
VIP_JOB_TITLES = [
    "ceo",
    "cto",
    "cfo",
    "coo",
    "president",
    "vice president",
    "vp",
    "director",
    "head of",
    "chief",
    "founder",
    "co-founder",
    "partner",
    "principal",
]


def has_vip_job_title(job_title: Optional[str]) -> bool:
    """True when the job title contains an executive keyword."""
    if not job_title:
        return False
    normalized = job_title.lower()
    return any(title in normalized for title in VIP_JOB_TITLES)


def days_since(moment: Optional[datetime], now: datetime) -> float:
    """Whole days elapsed since ``moment`` (floored); infinite when unknown."""
    if moment is None:
        return math.inf
    elapsed = ensure_utc(now) - ensure_utc(moment)
    return math.floor(elapsed.total_seconds() / 86400)


# ============================================================================
# REGISTRY
# ============================================================================

class VipRegistry:
    """
    In-memory VIP and contact registry.

    All mutations go through explicit methods and are serialized by a lock.
    Readers get immutable snapshots, so detection never observes a
    half-applied update.
    """

    def __init__(
        self,
        vips: Optional[Iterable[VipEntry]] = None,
        contacts: Optional[Iterable[Contact]] = None,
    ):
        self._lock = threading.RLock()
        self._vips: Dict[str, VipEntry] = {}
        self._contacts: Dict[str, Contact] = {}
        self.set_vips(vips or [])
        self.set_contacts(contacts or [])

    # VIPs

    def get_vips(self) -> List[VipEntry]:
        with self._lock:
            return list(self._vips.values())

    def set_vips(self, vips: Iterable[VipEntry]) -> None:
        """Replace the VIP list; the first entry wins for duplicate addresses."""
        entries: Dict[str, VipEntry] = {}
        for vip in vips:
            entries.setdefault(normalize_email(vip.email), vip)
        with self._lock:
            self._vips = entries

    def add_vip(self, vip: VipEntry) -> bool:
        """
        Register a VIP.

        Returns:
            False if the address was already registered (registry unchanged)
        """
        key = normalize_email(vip.email)
        with self._lock:
            if key in self._vips:
                return False
            self._vips = {**self._vips, key: vip}
            return True

    def remove_vip(self, email: str) -> bool:
        """Remove a VIP by address; True if one was removed."""
        key = normalize_email(email)
        with self._lock:
            if key not in self._vips:
                return False
            self._vips = {k: v for k, v in self._vips.items() if k != key}
            return True

    def find_vip(self, email: str) -> Optional[VipEntry]:
        with self._lock:
            return self._vips.get(normalize_email(email))

    # Contacts

    def get_contacts(self) -> List[Contact]:
        with self._lock:
            return list(self._contacts.values())

    def set_contacts(self, contacts: Iterable[Contact]) -> None:
        """Replace all contacts; later entries win for duplicate addresses."""
        entries: Dict[str, Contact] = {}
        for contact in contacts:
            entries[normalize_email(contact.email)] = contact
        with self._lock:
            self._contacts = entries

    def add_or_update_contact(self, contact: Contact) -> Contact:
        """
        Insert a contact, or merge it into the existing one.

        Only fields explicitly set on ``contact`` overwrite the stored values.

        Returns:
            The stored contact after the merge
        """
        key = normalize_email(contact.email)
        with self._lock:
            existing = self._contacts.get(key)
            if existing is None:
                merged = contact
            else:
                merged = existing.model_copy(update=contact.model_dump(exclude_unset=True))
            self._contacts = {**self._contacts, key: merged}
            return merged

    def find_contact(self, email: str) -> Optional[Contact]:
        with self._lock:
            return self._contacts.get(normalize_email(email))


# ============================================================================
# DETECTOR
# ============================================================================

@dataclass(frozen=True)
class VipDetectorOptions:
    """Weights and thresholds for VIP detection."""
    vip_match_weight: float = 0.8
    high_interaction_threshold: int = 50
    medium_interaction_threshold: int = 20
    high_interaction_weight: float = 0.6
    medium_interaction_weight: float = 0.4
    recency_boost_days: int = 7
    recency_boost_multiplier: float = 0.2

    @classmethod
    def from_config(cls) -> "VipDetectorOptions":
        """Load options from settings."""
        return cls(
            vip_match_weight=settings.vip_match_weight,
            high_interaction_threshold=settings.vip_high_interaction_threshold,
            medium_interaction_threshold=settings.vip_medium_interaction_threshold,
            high_interaction_weight=settings.vip_high_interaction_weight,
            medium_interaction_weight=settings.vip_medium_interaction_weight,
            recency_boost_days=settings.vip_recency_boost_days,
            recency_boost_multiplier=settings.vip_recency_boost_multiplier,
        )

    def weights(self) -> Dict[str, float]:
        return {
            "vip_match_weight": self.vip_match_weight,
            "high_interaction_weight": self.high_interaction_weight,
            "medium_interaction_weight": self.medium_interaction_weight,
            "recency_boost_multiplier": self.recency_boost_multiplier,
        }


class VipDetector:
    """
    Detects VIP senders from the registry and contact heuristics.

    The detector reads from a VipRegistry; pass a shared registry to let
    another owner keep it up to date.
    """

    def __init__(
        self,
        registry: Optional[VipRegistry] = None,
        options: Optional[VipDetectorOptions] = None,
    ):
        self.registry = registry or VipRegistry()
        self.options = options or VipDetectorOptions.from_config()

        self.logger = logger.bind(component="vip_detector")
        warn_out_of_range("vip_detector", self.options.weights())

    def detect_vip(
        self, message: Message, reference_time: Optional[datetime] = None
    ) -> VipDetectionResult:
        """
        Score the importance of a message's sender.

        Args:
            message: Message whose sender is evaluated
            reference_time: "Now" for the recency check (default: current UTC time)

        Returns:
            VipDetectionResult with score, reasons, and matched registry records
        """
        now = ensure_utc(reference_time) if reference_time else utc_now()
        sender = message.sender.email
        opts = self.options
        reasons: List[VipReason] = []
        score = 0.0

        vip_entry = self.registry.find_vip(sender)
        if vip_entry is not None:
            score += opts.vip_match_weight
            reasons.append(
                VipReason(
                    type="explicit_vip",
                    description=f"Sender is in VIP list: {vip_entry.name or vip_entry.email}",
                    weight=opts.vip_match_weight,
                )
            )

        contact = self.registry.find_contact(sender)
        if contact is not None:
            count = contact.interaction_count

            if count >= opts.high_interaction_threshold:
                score += opts.high_interaction_weight
                reasons.append(
                    VipReason(
                        type="high_interaction",
                        description=f"High interaction frequency: {count} interactions",
                        weight=opts.high_interaction_weight,
                    )
                )
            elif count >= opts.medium_interaction_threshold:
                score += opts.medium_interaction_weight
                reasons.append(
                    VipReason(
                        type="medium_interaction",
                        description=f"Medium interaction frequency: {count} interactions",
                        weight=opts.medium_interaction_weight,
                    )
                )

            elapsed_days = days_since(contact.last_interaction_at, now)
            if elapsed_days <= opts.recency_boost_days:
                score += opts.recency_boost_multiplier
                reasons.append(
                    VipReason(
                        type="recent_interaction",
                        description=f"Recent interaction ({int(elapsed_days)} days ago)",
                        weight=opts.recency_boost_multiplier,
                    )
                )

            if has_vip_job_title(contact.job_title):
                score += JOB_TITLE_WEIGHT
                reasons.append(
                    VipReason(
                        type="job_title",
                        description=f"VIP job title: {contact.job_title}",
                        weight=JOB_TITLE_WEIGHT,
                    )
                )

        score = min(score, 1.0)

        result = VipDetectionResult(
            is_vip=score >= VIP_SCORE_THRESHOLD,
            score=score,
            reasons=reasons,
            vip_entry=vip_entry,
            contact=contact,
        )

        self.logger.debug(
            "vip_detected",
            message_id=message.id,
            score=score,
            is_vip=result.is_vip,
            reasons_count=len(reasons),
        )

        return result

    def detect_vips(
        self, messages: List[Message], reference_time: Optional[datetime] = None
    ) -> Dict[str, VipDetectionResult]:
        """Batch detection; keyed by message ID."""
        return {m.id: self.detect_vip(m, reference_time) for m in messages}

    def get_options(self) -> Dict[str, object]:
        """Options as a JSON-serializable dict."""
        return asdict(self.options)

    def update_options(self, **changes) -> None:
        """Replace selected options."""
        self.options = replace(self.options, **changes)
        warn_out_of_range("vip_detector", self.options.weights())
