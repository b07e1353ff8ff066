"""
Source Attribution Tests
"""
import pytest

from answer_metrics.services import SourceAttributionAssembler
from answer_metrics.services.source_attribution import classify_source, resolve_domain
from tests.fakes import FakeStore


class TestDomainHelpers:

    def test_domain_from_column(self):
        assert resolve_domain({"domain": " g2.com "}) == "g2.com"

    def test_domain_from_url_without_www(self):
        assert resolve_domain({"domain": None, "url": "https://www.g2.com/reviews"}) == "g2.com"

    @pytest.mark.parametrize("citation", [{"domain": "unknown"}, {"domain": ""}, {}])
    def test_unresolvable_domain(self, citation):
        assert resolve_domain(citation) is None

    @pytest.mark.parametrize("category, domain, expected", [
        ("User-Generated", "example.com", "ugc"),
        ("other", "example.com", "editorial"),
        ("corporate", "example.com", "corporate"),
        (None, "en.wikipedia.org", "reference"),
        (None, "mit.edu", "institutional"),
        (None, "reddit.com", "ugc"),
        (None, "techcrunch.com", "editorial"),
    ])
    def test_classify_source(self, category, domain, expected):
        assert classify_source(category, domain) == expected

    def test_brand_domain_wins(self):
        assert classify_source("editorial", "blog.mycrm.com", brand_domain="mycrm.com") == "brand"


class TestFetchMetrics:

    async def test_brand_and_competitor_rows(self, store):
        result = await SourceAttributionAssembler(store).fetch_metrics([101, 102, 103], "B1")

        assert result.success is True
        rows = [(row.collector_result_id, row.competitor_name) for row in result.data]
        assert rows == [(101, None), (101, "Acme"), (103, None)]

        brand_101, acme, brand_103 = result.data
        assert brand_101.average_position == 2.5
        assert brand_101.total_brand_mentions == 5
        assert acme.total_brand_mentions is None
        assert acme.sentiment_score == 0.1
        assert brand_103.average_position is None
        assert brand_103.total_brand_mentions == 0

    async def test_digit_string_ids_keep_request_order(self, store):
        result = await SourceAttributionAssembler(store).fetch_metrics(["103", 101], "B1")

        assert result.success is True
        assert [row.collector_result_id for row in result.data] == [103, 101, 101]

    async def test_provider_filter(self, store):
        result = await SourceAttributionAssembler(store).fetch_metrics([101, 103], "B1", provider_keys=["chatgpt"])
        assert {row.collector_result_id for row in result.data} == {101}


class TestAggregateSources:

    @pytest.fixture
    def citation_store(self, scenario_events, shape):
        citations = [
            {"domain": None, "url": "https://www.g2.com/crm", "category": None, "usage_count": 3,
             "collector_result_id": 101, "page_name": "CRM reviews", "created_at": "2025-01-10T00:00:00"},
            {"domain": "G2.com", "url": "https://g2.com/other", "category": None, "usage_count": None,
             "collector_result_id": 103, "page_name": None, "created_at": "2025-01-11T00:00:00"},
            {"domain": "en.wikipedia.org", "url": "https://en.wikipedia.org/wiki/CRM", "category": None,
             "usage_count": 1, "collector_result_id": 102, "created_at": "2025-01-12T00:00:00"},
            {"domain": "mycrm.com", "url": "https://mycrm.com", "category": "editorial", "usage_count": 1,
             "collector_result_id": 101, "created_at": "2025-01-10T00:00:00"},
            {"domain": "unknown", "url": None, "category": None, "usage_count": 9,
             "collector_result_id": 101, "created_at": "2025-01-10T00:00:00"},
        ]
        return FakeStore(scenario_events, shape=shape, citations=citations)

    async def test_report(self, citation_store):
        result = await SourceAttributionAssembler(citation_store).aggregate_sources(
            "B1", customer_id="C1", brand_domain="mycrm.com"
        )

        assert result.success is True
        report = result.data
        assert [source.domain for source in report.sources] == ["g2.com", "en.wikipedia.org", "mycrm.com"]
        assert report.total_sources == 3
        assert report.total_citations == 6
        assert report.average_sentiment == 0.6

        g2, wiki, own = report.sources
        assert g2.citations == 4
        assert g2.event_count == 2
        assert g2.scored_event_count == 2
        assert g2.mention_rate == 50.0
        assert g2.share_of_answers == 17.5
        assert g2.visibility_index == 0.21
        assert g2.topics == ["pricing", "support"]
        assert g2.prompts == ["Best CRM for small teams?"]
        assert g2.pages == ["CRM reviews"]
        assert g2.source_type == "editorial"

        assert wiki.source_type == "reference"
        assert wiki.scored_event_count == 0
        assert wiki.mention_rate is None
        assert wiki.prompts == ["Cheapest CRM?"]

        assert own.source_type == "brand"

    async def test_no_citations(self, store):
        result = await SourceAttributionAssembler(store).aggregate_sources("B1")

        assert result.success is True
        assert result.data.sources == []
        assert result.data.total_citations == 0
        assert store.events.calls == []

    async def test_failure_returns_empty_report(self, citation_store):
        citation_store.citations.fail_with = RuntimeError("citations down")

        result = await SourceAttributionAssembler(citation_store).aggregate_sources(
            "B1", start_date="2025-01-01", end_date="2025-01-31"
        )

        assert result.success is False
        assert result.data.sources == []
        assert result.data.start_date == "2025-01-01"
