"""
Metrics Engine
Single entry point over every projection, sharing one fetcher and normalizer.
"""
import asyncio
from typing import List, Optional, Sequence

from answer_metrics.core.batching import BatchedFetcher
from answer_metrics.core.collector_types import CollectorTypeResolver
from answer_metrics.core.shape import ShapeNormalizer
from answer_metrics.models.options import MetricsQueryOptions, TopicJoinOptions
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import (
    BrandMetricsRow,
    CombinedMetrics,
    CompetitorMetricsRow,
    KeywordAnalyticsItem,
    PromptsAnalyticsRow,
    SourceAttributionReport,
    SourceAttributionRow,
    TopicCompetitorRow,
    TopicPositionRow,
)
from answer_metrics.repositories.connection import MetricsStore
from answer_metrics.services.base import BaseAssembler
from answer_metrics.services.brand_view import BrandViewAssembler
from answer_metrics.services.competitor_view import CompetitorViewAssembler
from answer_metrics.services.keywords import KeywordAnalyticsAssembler
from answer_metrics.services.prompts_analytics import PromptsAnalyticsAssembler
from answer_metrics.services.source_attribution import SourceAttributionAssembler
from answer_metrics.services.topic_join import TopicJoinAssembler
from answer_metrics.utils.metrics import MetricsRegistry
from answer_metrics.utils.observability import logger


class MetricsEngine(BaseAssembler):
    """
    Facade used by callers that need more than one view.

    Every method returns a `QueryResult` envelope except
    `has_metrics_for_brand`, which answers False on any failure.

    Usage:
        store = await connect_store()
        engine = MetricsEngine(store)
        result = await engine.fetch_brand_metrics(MetricsQueryOptions(event_ids=[1, 2]))
    """

    def __init__(
        self,
        store: MetricsStore,
        fetcher: Optional[BatchedFetcher] = None,
        normalizer: Optional[ShapeNormalizer] = None,
        resolver: Optional[CollectorTypeResolver] = None,
        registry: Optional[MetricsRegistry] = None,
    ):
        super().__init__(store, fetcher, normalizer, resolver, registry)
        shared = dict(
            fetcher=self.fetcher,
            normalizer=self.normalizer,
            resolver=self.resolver,
            registry=self.registry,
        )
        self.brand = BrandViewAssembler(store, **shared)
        self.competitors = CompetitorViewAssembler(store, **shared)
        self.topic_join = TopicJoinAssembler(store, **shared)
        self.source_attribution = SourceAttributionAssembler(store, **shared)
        self.prompts = PromptsAnalyticsAssembler(store, **shared)
        self.keywords = KeywordAnalyticsAssembler(store, **shared)

    async def fetch_brand_metrics(self, options: MetricsQueryOptions) -> QueryResult[List[BrandMetricsRow]]:
        return await self.brand.fetch(options)

    async def fetch_competitor_metrics(
        self, options: MetricsQueryOptions
    ) -> QueryResult[List[CompetitorMetricsRow]]:
        return await self.competitors.fetch(options)

    async def fetch_topic_positions(self, options: MetricsQueryOptions) -> QueryResult[List[TopicPositionRow]]:
        return await self.brand.fetch_topic_positions(options)

    async def fetch_combined_metrics(self, options: MetricsQueryOptions) -> QueryResult[CombinedMetrics]:
        """
        Brand and competitor views for the same addressing, read concurrently.
        A failure of either side fails the whole call and names the side.
        """
        async def build() -> CombinedMetrics:
            brand, competitors = await asyncio.gather(
                self.brand.fetch(options),
                self.competitors.fetch(options),
            )
            if not brand.success:
                raise RuntimeError(f"Brand metrics error: {brand.error}")
            if not competitors.success:
                raise RuntimeError(f"Competitor metrics error: {competitors.error}")
            return CombinedMetrics(brand=brand.data, competitors=competitors.data)

        return await self._run(
            "combined_metrics",
            build,
            empty=CombinedMetrics(),
            count=lambda combined: len(combined.brand) + len(combined.competitors),
        )

    async def fetch_topic_competitors(self, options: TopicJoinOptions) -> QueryResult[List[TopicCompetitorRow]]:
        return await self.topic_join.fetch(options)

    async def fetch_source_attribution_metrics(
        self,
        event_ids: Sequence,
        brand_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        provider_keys: Optional[Sequence[str]] = None,
    ) -> QueryResult[List[SourceAttributionRow]]:
        return await self.source_attribution.fetch_metrics(
            event_ids, brand_id, start_date=start_date, end_date=end_date, provider_keys=provider_keys
        )

    async def aggregate_sources(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        brand_domain: Optional[str] = None,
    ) -> QueryResult[SourceAttributionReport]:
        return await self.source_attribution.aggregate_sources(
            brand_id,
            customer_id=customer_id,
            start_date=start_date,
            end_date=end_date,
            brand_domain=brand_domain,
        )

    async def fetch_prompts_analytics(
        self, options: MetricsQueryOptions
    ) -> QueryResult[List[PromptsAnalyticsRow]]:
        return await self.prompts.fetch(options)

    async def fetch_keyword_analytics(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> QueryResult[List[KeywordAnalyticsItem]]:
        return await self.keywords.fetch(
            brand_id, customer_id=customer_id, start_date=start_date, end_date=end_date
        )

    async def has_metrics_for_brand(self, brand_id: str) -> bool:
        """Whether any fact has been recorded for the brand (False if the store errors)."""
        try:
            return await self.store.facts.count_for_brand(brand_id) > 0
        except Exception as e:
            logger.error(f"Error checking metrics for brand {brand_id}: {e}")
            return False

    async def fetch_distinct_collector_types(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> QueryResult[List[str]]:
        """Sorted distinct provider labels seen in the brand's facts."""
        async def build() -> List[str]:
            labels = await self.store.facts.fetch_collector_types(
                brand_id, customer_id=customer_id, start_date=start_date, end_date=end_date
            )
            return sorted(set(labels))

        return await self._run("distinct_collector_types", build, empty=[], brand_id=brand_id)
