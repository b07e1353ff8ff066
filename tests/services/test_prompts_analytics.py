"""
Prompts Analytics Tests
Competitor rollups and name-keyed lookup maps per event.
"""
from answer_metrics.models import MetricsQueryOptions
from answer_metrics.services import PromptsAnalyticsAssembler
from tests.fakes import FakeStore, brand_metric, competitor, make_event


class TestPromptsAnalytics:

    async def test_rollups_per_event(self, store):
        result = await PromptsAnalyticsAssembler(store).fetch(MetricsQueryOptions(event_ids=[101, 102, 103]))

        assert result.success is True
        scored, unscored, zero = result.data

        assert scored.total_brand_mentions == 5
        assert scored.competitor_names == ["Acme"]
        assert scored.competitor_count == 2
        assert scored.competitor_product_count == 0
        assert scored.competitor_positions == [2]

        assert unscored.collector_result_id == 102
        assert unscored.total_brand_mentions is None
        assert unscored.competitor_count is None
        assert unscored.competitor_names == []

        assert zero.total_brand_mentions == 0
        assert zero.competitor_count == 0
        assert zero.competitor_visibility_map == {}

    async def test_name_keyed_maps(self, store):
        result = await PromptsAnalyticsAssembler(store).fetch(MetricsQueryOptions(event_ids=[101]))

        row = result.data[0]
        assert row.competitor_visibility_map == {"acme": 30.0}
        assert row.competitor_share_map == {"acme": 20.0}
        assert row.competitor_sentiment_map == {"acme": 0.1}
        assert row.competitor_mentions_map == {"acme": 2}
        assert row.competitor_positions_map == {"acme": [2]}

    async def test_visibility_falls_back_to_share(self, shape):
        event = make_event(
            1,
            brand=brand_metric(),
            competitors=[
                competitor("c1", "Acme", share_of_answers=15.0),
                competitor("c2", "Globex"),
            ],
        )
        store = FakeStore([event], shape=shape)

        result = await PromptsAnalyticsAssembler(store).fetch(MetricsQueryOptions(event_ids=[1]))

        row = result.data[0]
        assert row.competitor_visibility_map == {"acme": 15.0, "globex": None}
        assert row.competitor_mentions_map == {"acme": 0, "globex": 0}

    async def test_totals_include_unnamed_competitors(self, shape):
        event = make_event(
            1,
            competitors=[
                competitor("c1", "Acme", competitor_mentions=1, total_competitor_product_mentions=2),
                competitor("c2", None, competitor_mentions=3, total_competitor_product_mentions=None),
            ],
        )
        store = FakeStore([event], shape=shape)

        result = await PromptsAnalyticsAssembler(store).fetch(MetricsQueryOptions(event_ids=[1]))

        row = result.data[0]
        assert row.competitor_count == 4
        assert row.competitor_product_count == 2
        assert row.competitor_names == ["Acme"]
        assert list(row.competitor_mentions_map) == ["acme"]

    async def test_names_differing_in_case_share_one_entry(self, shape):
        event = make_event(
            1,
            competitors=[
                competitor("c1", "Acme", competitor_mentions=1),
                competitor("c2", " ACME ", competitor_mentions=2),
            ],
        )
        store = FakeStore([event], shape=shape)

        result = await PromptsAnalyticsAssembler(store).fetch(MetricsQueryOptions(event_ids=[1]))

        row = result.data[0]
        assert row.competitor_names == ["Acme"]
        assert list(row.competitor_mentions_map) == ["acme"]
        assert len(row.competitor_names) == len(row.competitor_mentions_map)

    async def test_tracked_brand_excluded(self, store):
        options = MetricsQueryOptions(event_ids=[101], brand_name="acme")
        result = await PromptsAnalyticsAssembler(store).fetch(options)

        row = result.data[0]
        assert row.competitor_names == []
        assert row.competitor_count == 0

    async def test_date_range_mode(self, store):
        options = MetricsQueryOptions(brand_id="B1", start_date="2025-01-01", end_date="2025-02-01")
        result = await PromptsAnalyticsAssembler(store).fetch(options)

        assert [row.collector_result_id for row in result.data] == [101, 103]
