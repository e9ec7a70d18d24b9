"""
Unit tests for briefing assembly.
"""

import pytest

from redflag_engine.briefing import (
    UNCLUSTERED_TOPIC_ID,
    UNCLUSTERED_TOPIC_LABEL,
    BriefingData,
    build_briefing,
)
from redflag_engine.clustering.topic_clusterer import TopicClusterer, TopicClustererOptions
from redflag_engine.pipeline import RedFlagPipeline

from tests.fixtures.messages import NOW, make_message, make_vip

pytestmark = pytest.mark.unit


@pytest.fixture
def messages(urgent_vip_thread):
    return urgent_vip_thread + [
        make_message(id="off-1", subject="Offsite agenda", minutes_ago=30),
        make_message(id="off-2", subject="Re: Offsite agenda", minutes_ago=20),
        make_message(id="lone", subject="Lunch on Friday", minutes_ago=15),
    ]


def brief(messages, **kwargs):
    return build_briefing(
        messages,
        pipeline=RedFlagPipeline.from_registries(vips=[make_vip()]),
        clusterer=TopicClusterer(TopicClustererOptions()),
        reference_time=NOW,
        **kwargs,
    )


class TestBuildBriefing:
    """Test scoring, clustering and ranking of topics."""

    def test_empty_input(self):
        briefing = build_briefing([], reference_time=NOW)

        assert isinstance(briefing, BriefingData)
        assert briefing.topics == []
        assert briefing.total_messages == 0
        assert briefing.total_flagged == 0
        assert briefing.scores == {}

    def test_topics_ranked_by_flagged_count(self, messages, urgent_vip_thread):
        briefing = brief(messages)

        assert [t.id for t in briefing.topics] == ["cluster-1", "cluster-2", UNCLUSTERED_TOPIC_ID]
        urgent = briefing.topics[0]
        assert urgent.flagged_count == 3
        assert urgent.size == 3
        assert urgent.max_score >= 0.7
        assert urgent.items[0].message_id == urgent_vip_thread[-1].id

    def test_items_sorted_by_score(self, messages):
        briefing = brief(messages)

        for topic in briefing.topics:
            scores = [item.score for item in topic.items]
            assert scores == sorted(scores, reverse=True)

    def test_catch_all_topic(self, messages):
        catch_all = brief(messages).topics[-1]

        assert catch_all.id == UNCLUSTERED_TOPIC_ID
        assert catch_all.label == UNCLUSTERED_TOPIC_LABEL
        assert [item.message_id for item in catch_all.items] == ["lone"]
        assert catch_all.keywords == []

    def test_no_catch_all_when_everything_clusters(self, urgent_vip_thread):
        briefing = brief(urgent_vip_thread)

        assert [t.id for t in briefing.topics] == ["cluster-1"]

    def test_max_topics(self, messages):
        briefing = brief(messages, max_topics=1)

        assert len(briefing.topics) == 1
        assert briefing.topics[0].flagged_count == 3
        assert len(briefing.scores) == len(messages)

    def test_totals_and_items(self, messages):
        briefing = brief(messages)

        assert briefing.total_messages == 6
        assert briefing.total_flagged == 3
        item = briefing.topics[0].items[0]
        assert item.sender == "boss@acme.com"
        assert item.subject == "Urgent: contract renewal"
        assert item.is_flagged is True

    def test_deterministic(self, messages):
        first = brief(messages)
        second = brief(messages)

        assert first.model_dump(exclude={"duration_ms"}) == second.model_dump(exclude={"duration_ms"})
