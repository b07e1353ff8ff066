"""
Topic Join Tests
Cross-brand competitor comparison for a customer.
"""
import pytest

from answer_metrics.models import TopicJoinOptions
from answer_metrics.services import TopicJoinAssembler
from tests.fakes import FakeStore, competitor, competitor_sentiment, make_event


@pytest.fixture
def topic_store(shape):
    events = [
        make_event(
            1, brand_id="B1", topic="pricing", processed_at="2025-01-05T00:00:00",
            competitors=[
                competitor("c-acme", "Acme", share_of_answers=20.0),
                competitor("c-self", "MyBrand", share_of_answers=50.0),
                competitor("c-ghost", None, share_of_answers=5.0),
            ],
        ),
        make_event(
            2, brand_id="B2", topic="pricing", processed_at="2025-01-03T00:00:00",
            competitors=[
                competitor("c-globex", "Globex", visibility_index=0.2),
                competitor("c-quiet", "Initech"),
            ],
            competitor_sentiments=[competitor_sentiment("c-globex", 0.3)],
        ),
        make_event(
            3, brand_id="B2", topic="support", processed_at="2025-01-04T00:00:00",
            competitors=[competitor("c-acme", "Acme", share_of_answers=10.0)],
        ),
        make_event(4, brand_id="B3", topic="pricing", competitors=[competitor("c-acme", "Acme", share_of_answers=1.0)]),
    ]
    return FakeStore(events, shape=shape, brands_by_customer={"C1": ["B1", "B2"], "C2": ["B3"]})


class TestTopicJoin:

    async def test_rows_across_customer_brands(self, topic_store):
        options = TopicJoinOptions(customer_id="C1", brand_name="mybrand", topics=["pricing"])
        result = await TopicJoinAssembler(topic_store).fetch(options)

        assert result.success is True
        assert [(row.brand_id, row.competitor_name) for row in result.data] == [
            ("B2", "Globex"),
            ("B1", "Acme"),
        ]
        assert result.data[0].sentiment_score == 0.3
        assert topic_store.facts.calls[0]["brand_ids"] == ["B1", "B2"]

    async def test_self_unnamed_and_signal_free_rows_dropped(self, topic_store):
        options = TopicJoinOptions(customer_id="C1", brand_name="MyBrand", topics=["pricing", "support"])
        result = await TopicJoinAssembler(topic_store).fetch(options)

        names = {row.competitor_name for row in result.data}
        assert names == {"Acme", "Globex"}

    async def test_allow_list_is_case_insensitive(self, topic_store):
        options = TopicJoinOptions(customer_id="C1", topics=["pricing", "support"], competitor_names=[" ACME"])
        result = await TopicJoinAssembler(topic_store).fetch(options)

        assert [(row.topic, row.share_of_answers) for row in result.data] == [
            ("support", 10.0),
            ("pricing", 20.0),
        ]

    async def test_no_topics_is_empty_without_reads(self, topic_store):
        result = await TopicJoinAssembler(topic_store).fetch(TopicJoinOptions(customer_id="C1", topics=[]))

        assert result.success is True
        assert result.data == []
        assert topic_store.brands.calls == []

    async def test_customer_without_brands_is_empty_success(self, topic_store):
        result = await TopicJoinAssembler(topic_store).fetch(
            TopicJoinOptions(customer_id="C-unknown", topics=["pricing"])
        )

        assert result.success is True
        assert result.data == []
        assert topic_store.facts.calls == []

    async def test_failure_is_reported(self, topic_store):
        topic_store.brands.fail_with = RuntimeError("brands unavailable")
        result = await TopicJoinAssembler(topic_store).fetch(TopicJoinOptions(customer_id="C1", topics=["pricing"]))

        assert result.success is False
        assert "brands unavailable" in result.error
