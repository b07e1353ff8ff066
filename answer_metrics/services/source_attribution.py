"""
Source Attribution
Citation/domain analytics built on the brand and competitor views.
"""
from dataclasses import dataclass, field
from statistics import mean
from typing import Any, Dict, List, Optional, Sequence, Set
from urllib.parse import urlparse

from answer_metrics.models.base import coerce_event_id
from answer_metrics.models.records import CaptureEventRecord
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import (
    BrandMetricsRow,
    SourceAggregate,
    SourceAttributionReport,
    SourceAttributionRow,
)
from answer_metrics.repositories.events import event_select
from answer_metrics.repositories.facts import fact_select
from answer_metrics.services.base import BaseAssembler
from answer_metrics.services.brand_view import BrandViewAssembler
from answer_metrics.services.competitor_view import CompetitorViewAssembler

SOURCE_TYPES = {
    "brand": "brand",
    "corporate": "corporate",
    "editorial": "editorial",
    "reference": "reference",
    "ugc": "ugc",
    "user-generated": "ugc",
    "institutional": "institutional",
    "other": "editorial",
}


def resolve_domain(citation: Dict[str, Any]) -> Optional[str]:
    """Citation domain from its column, else the URL host without `www.`."""
    domain = (citation.get("domain") or "").strip()
    if not domain and citation.get("url"):
        url = citation["url"].strip()
        host = urlparse(url if "://" in url else f"https://{url}").hostname or ""
        domain = host[4:] if host.startswith("www.") else host
    if not domain or domain.lower() == "unknown":
        return None
    return domain


def classify_source(category: Optional[str], domain: str, brand_domain: Optional[str] = None) -> str:
    """
    Source type from the citation category, falling back to domain heuristics.
    The brand's own domain always classifies as "brand".
    """
    lowered = domain.lower()
    if brand_domain:
        own = brand_domain.lower()
        if lowered == own or own in lowered or lowered in own:
            return "brand"

    if category:
        return SOURCE_TYPES.get(category.strip().lower(), "editorial")

    if any(token in lowered for token in ("wikipedia", "britannica", "dictionary")):
        return "reference"
    if any(token in lowered for token in ("edu", "gov")):
        return "institutional"
    if any(token in lowered for token in ("reddit", "twitter", "medium", "github")):
        return "ugc"
    return "editorial"


def _average(values: Sequence[Optional[float]], digits: int = 2) -> Optional[float]:
    present = [v for v in values if v is not None]
    return round(mean(present), digits) if present else None


@dataclass
class _DomainAccumulator:
    domain: str
    url: str
    category: Optional[str]
    citations: int = 0
    event_ids: List[Any] = field(default_factory=list)
    topics: Set[str] = field(default_factory=set)
    prompts: Set[str] = field(default_factory=set)
    pages: Set[str] = field(default_factory=set)

    def add_event(self, event_id: Any) -> None:
        if event_id not in self.event_ids:
            self.event_ids.append(event_id)


class SourceAttributionAssembler(BaseAssembler):
    """
    Two projections for the citation surface:

    - `fetch_metrics`: per event, one brand row plus one row per named
      competitor, in the legacy attribution row shape.
    - `aggregate_sources`: citations grouped by domain with the brand
      metrics of the cited events folded in.
    """

    async def fetch_metrics(
        self,
        event_ids: Sequence[Any],
        brand_id: str,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        provider_keys: Optional[Sequence[str]] = None,
    ) -> QueryResult[List[SourceAttributionRow]]:
        """
        Attribution rows for cited events of one brand.

        Events without a brand metric row contribute no brand row;
        competitor rows need a resolved display name.
        """
        requested = [coerce_event_id(event_id) for event_id in event_ids]

        async def build() -> List[SourceAttributionRow]:
            columns = fact_select(brand=True, competitors=True, sentiment=True)
            collector_types = self.resolver.resolve_many(provider_keys)
            raw = await self.fetcher.fetch(
                requested,
                lambda chunk: self.store.facts.fetch_by_event_ids(
                    columns,
                    chunk,
                    brand_id=brand_id,
                    collector_types=collector_types,
                    start_date=start_date,
                    end_date=end_date,
                ),
                chunk_size=self.settings.source_attribution_batch_size,
            )
            events = self.in_request_order(
                [self.normalizer.event_from_fact(row) for row in raw], requested
            )

            rows: List[SourceAttributionRow] = []
            for event in events:
                rows.extend(self.flatten(event))
            return rows

        return await self._run("source_attribution_metrics", build, empty=[], brand_id=brand_id)

    @staticmethod
    def flatten(event: CaptureEventRecord) -> List[SourceAttributionRow]:
        """Brand row (if scored with brand metrics) followed by named competitor rows."""
        rows = []
        brand = BrandViewAssembler.flatten(event)
        if brand.total_brand_mentions is not None:
            positions = brand.brand_positions or []
            rows.append(SourceAttributionRow(
                collector_result_id=event.id,
                share_of_answers=brand.share_of_answers,
                total_brand_mentions=brand.total_brand_mentions,
                sentiment_score=brand.sentiment_score,
                visibility_index=brand.visibility_index,
                average_position=round(mean(positions), 2) if positions else None,
                brand_positions=brand.brand_positions,
                topic=brand.topic,
                processed_at=brand.processed_at,
            ))

        for competitor in CompetitorViewAssembler.flatten(event):
            if competitor.competitor_name is None:
                continue
            rows.append(SourceAttributionRow(
                collector_result_id=event.id,
                competitor_name=competitor.competitor_name,
                share_of_answers=competitor.share_of_answers,
                sentiment_score=competitor.sentiment_score,
                visibility_index=competitor.visibility_index,
                topic=competitor.topic,
                processed_at=competitor.processed_at,
            ))
        return rows

    async def aggregate_sources(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        brand_domain: Optional[str] = None,
    ) -> QueryResult[SourceAttributionReport]:
        """
        Per-domain citation report for a brand and window.

        Args:
            brand_id: Tracked brand
            customer_id: Owning customer (optional filter)
            start_date / end_date: Citation `created_at` window
            brand_domain: The brand's own domain, classified as "brand"
        """
        async def build() -> SourceAttributionReport:
            citations = await self.store.citations.fetch_for_brand(
                brand_id, customer_id=customer_id, start_date=start_date, end_date=end_date
            )

            accumulators: Dict[str, _DomainAccumulator] = {}
            for citation in citations:
                domain = resolve_domain(citation)
                if domain is None:
                    continue
                key = domain.lower()
                acc = accumulators.get(key)
                if acc is None:
                    acc = accumulators[key] = _DomainAccumulator(
                        domain=domain,
                        url=citation.get("url") or f"https://{domain}",
                        category=citation.get("category"),
                    )
                acc.citations += citation.get("usage_count") or 1
                if citation.get("page_name"):
                    acc.pages.add(citation["page_name"])
                if citation.get("collector_result_id") is not None:
                    acc.add_event(coerce_event_id(citation["collector_result_id"]))

            cited_ids = [event_id for acc in accumulators.values() for event_id in acc.event_ids]
            columns = event_select(fact_select(brand=True, sentiment=True))
            raw = await self.fetcher.fetch(
                cited_ids,
                lambda chunk: self.store.events.fetch_with_facts(columns, chunk, brand_id=brand_id),
                chunk_size=self.settings.source_attribution_batch_size,
            )
            events = {}
            for row in raw:
                event = self.normalizer.normalize_event(row)
                events[event.id] = event

            sources = [
                self._fold(acc, events, brand_domain)
                for acc in accumulators.values()
            ]
            sources.sort(key=lambda s: (-s.citations, s.domain.lower()))

            return SourceAttributionReport(
                sources=sources,
                total_sources=len(sources),
                total_citations=sum(s.citations for s in sources),
                average_sentiment=_average([s.sentiment_score for s in sources]),
                start_date=start_date,
                end_date=end_date,
            )

        return await self._run(
            "source_attribution",
            build,
            empty=SourceAttributionReport(start_date=start_date, end_date=end_date),
            count=lambda report: report.total_sources,
            brand_id=brand_id,
        )

    @staticmethod
    def _fold(
        acc: _DomainAccumulator,
        events: Dict[Any, CaptureEventRecord],
        brand_domain: Optional[str],
    ) -> SourceAggregate:
        brand_rows: List[BrandMetricsRow] = []
        for event_id in acc.event_ids:
            event = events.get(event_id)
            if event is None:
                continue
            if event.question:
                acc.prompts.add(event.question)
            row = BrandViewAssembler.flatten(event)
            if row.topic:
                acc.topics.add(row.topic)
            brand_rows.append(row)

        scored = [row for row in brand_rows if row.total_brand_mentions is not None]
        mention_rate = (
            round(100 * sum(1 for row in scored if row.total_brand_mentions > 0) / len(scored), 1)
            if scored else None
        )

        return SourceAggregate(
            domain=acc.domain,
            url=acc.url,
            source_type=classify_source(acc.category, acc.domain, brand_domain),
            citations=acc.citations,
            event_count=len(acc.event_ids),
            scored_event_count=len(scored),
            mention_rate=mention_rate,
            share_of_answers=_average([row.share_of_answers for row in scored]),
            sentiment_score=_average([row.sentiment_score for row in brand_rows]),
            visibility_index=_average([row.visibility_index for row in scored]),
            topics=sorted(acc.topics),
            prompts=sorted(acc.prompts),
            pages=sorted(acc.pages),
        )
