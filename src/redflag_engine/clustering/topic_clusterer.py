"""
Topic clustering for message batches.

Groups messages in three steps:
1. Thread grouping: messages sharing a thread ID form a cluster when the group
   reaches ``min_cluster_size``.
2. Subject grouping for the rest: normalized subjects are grouped, then groups
   are merged greedily (first group absorbs every later group whose subject
   keywords reach ``similarity_threshold`` Jaccard similarity).
3. Assembly: topic, top keywords, coherence and thread IDs per cluster.

The greedy merge follows first-seen order of the input. With
``stable_ordering`` messages are first sorted by (received_at, id), which makes
the result independent of input order.
"""

from collections import Counter
from dataclasses import asdict, dataclass, replace
from typing import Dict, List, Optional, Set

import numpy as np
import structlog

from ..config import settings, warn_out_of_range
from ..models.message import Message, MessageThread
from ..text.keywords import extract_keywords, keyword_similarity
from ..text.subjects import normalize_subject
from .schemas import TopicCluster, TopicClusteringResult


logger = structlog.get_logger(__name__)


MAX_CLUSTER_KEYWORDS = 5


@dataclass(frozen=True)
class TopicClustererOptions:
    """Clustering configuration."""
    similarity_threshold: float = 0.5
    use_thread_ids: bool = True
    normalize_subjects: bool = True
    min_cluster_size: int = 2
    stable_ordering: bool = False

    @classmethod
    def from_config(cls) -> "TopicClustererOptions":
        """Load options from settings."""
        return cls(
            similarity_threshold=settings.cluster_similarity_threshold,
            use_thread_ids=settings.cluster_use_thread_ids,
            normalize_subjects=settings.cluster_normalize_subjects,
            min_cluster_size=settings.cluster_min_cluster_size,
            stable_ordering=settings.cluster_stable_ordering,
        )


def cluster_coherence(keyword_sets: List[Set[str]]) -> float:
    """
    Average pairwise Jaccard similarity of member keyword sets.

    Returns 1.0 when there are no pairs.
    """
    similarities = [
        keyword_similarity(keyword_sets[i], keyword_sets[j])
        for i in range(len(keyword_sets))
        for j in range(i + 1, len(keyword_sets))
    ]
    if not similarities:
        return 1.0
    return float(np.mean(similarities))


def top_keywords(keyword_sets: List[Set[str]], limit: int = MAX_CLUSTER_KEYWORDS) -> List[str]:
    """
    Most frequent keywords across members.

    Ties keep first-seen member order, alphabetical within a member.
    """
    counts: Counter = Counter()
    for keywords in keyword_sets:
        counts.update(sorted(keywords))
    return [keyword for keyword, _ in counts.most_common(limit)]


class TopicClusterer:
    """
    Clusters messages by thread identity and subject similarity.

    Pure apart from its options; calls with identical input and options
    always produce identical clusters.
    """

    def __init__(self, options: Optional[TopicClustererOptions] = None):
        self.options = options or TopicClustererOptions.from_config()

        self.logger = logger.bind(component="topic_clusterer")
        warn_out_of_range("topic_clusterer", {"similarity_threshold": self.options.similarity_threshold})

    def cluster_emails(self, messages: List[Message]) -> TopicClusteringResult:
        """
        Cluster a batch of messages.

        Args:
            messages: Message corpus (any order)

        Returns:
            TopicClusteringResult with clusters sorted by size (largest first)
        """
        if not messages:
            return TopicClusteringResult()

        opts = self.options
        ordered = self._ordered(messages)

        by_id: Dict[str, Message] = {}
        for message in ordered:
            by_id.setdefault(message.id, message)

        groups: List[List[str]] = []
        processed: Set[str] = set()

        # Step 1: thread grouping
        if opts.use_thread_ids:
            thread_groups: Dict[str, List[str]] = {}
            for message_id, message in by_id.items():
                if message.thread_id:
                    thread_groups.setdefault(message.thread_id, []).append(message_id)

            for member_ids in thread_groups.values():
                if len(member_ids) >= opts.min_cluster_size:
                    groups.append(member_ids)
                    processed.update(member_ids)

        # Step 2: subject grouping with greedy merge
        remaining = [message_id for message_id in by_id if message_id not in processed]
        if remaining:
            subject_groups: Dict[str, List[str]] = {}
            for message_id in remaining:
                subject_groups.setdefault(self._subject_key(by_id[message_id]), []).append(message_id)

            subjects = list(subject_groups)
            subject_keywords = [extract_keywords(subject) for subject in subjects]
            merged: Set[int] = set()

            for i, subject in enumerate(subjects):
                if i in merged:
                    continue

                group = list(subject_groups[subject])
                for j in range(i + 1, len(subjects)):
                    if j in merged:
                        continue
                    similarity = keyword_similarity(subject_keywords[i], subject_keywords[j])
                    if similarity >= opts.similarity_threshold:
                        group.extend(subject_groups[subjects[j]])
                        merged.add(j)

                if len(group) >= opts.min_cluster_size:
                    groups.append(group)
                    processed.update(group)

        # Step 3: assembly
        clusters = [
            self._build_cluster(index, [by_id[message_id] for message_id in member_ids])
            for index, member_ids in enumerate(groups)
        ]
        clusters.sort(key=lambda c: c.size, reverse=True)

        unclustered = [message_id for message_id in by_id if message_id not in processed]

        result = TopicClusteringResult(
            clusters=clusters,
            total_emails=len(messages),
            cluster_count=len(clusters),
            unclustered_email_ids=unclustered,
        )

        self.logger.info(
            "topics_clustered",
            total_emails=result.total_emails,
            cluster_count=result.cluster_count,
            unclustered=len(unclustered),
        )

        return result

    def cluster_threads(self, threads: List[MessageThread]) -> TopicClusteringResult:
        """Cluster the messages of several threads."""
        return self.cluster_emails([message for thread in threads for message in thread.messages])

    def get_cluster_for_message(
        self, message_id: str, result: TopicClusteringResult
    ) -> Optional[TopicCluster]:
        """Cluster containing a message, or None."""
        for cluster in result.clusters:
            if message_id in cluster.email_ids:
                return cluster
        return None

    def get_options(self) -> Dict[str, object]:
        """Options as a JSON-serializable dict."""
        return asdict(self.options)

    def update_options(self, **changes) -> None:
        """Replace selected options."""
        self.options = replace(self.options, **changes)
        warn_out_of_range("topic_clusterer", {"similarity_threshold": self.options.similarity_threshold})

    def _ordered(self, messages: List[Message]) -> List[Message]:
        if self.options.stable_ordering:
            return sorted(messages, key=lambda m: (m.received_at, m.id))
        return list(messages)

    def _subject_key(self, message: Message) -> str:
        if self.options.normalize_subjects:
            return normalize_subject(message.subject)
        return message.subject

    def _build_cluster(self, index: int, members: List[Message]) -> TopicCluster:
        keyword_sets = [extract_keywords(m.analysis_text) for m in members]
        thread_ids = list(dict.fromkeys(m.thread_id for m in members if m.thread_id))

        return TopicCluster(
            id=f"cluster-{index + 1}",
            topic=self._subject_key(members[0]),
            email_ids=[m.id for m in members],
            thread_ids=thread_ids,
            size=len(members),
            keywords=top_keywords(keyword_sets),
            coherence=round(cluster_coherence(keyword_sets), 2),
        )
