"""
Assembler Base
Shared loading pipeline and the result-envelope boundary for all projections.
"""
from typing import Any, Awaitable, Callable, List, Optional, Sequence, TypeVar

from answer_metrics.config import get_settings
from answer_metrics.core.batching import BatchedFetcher
from answer_metrics.core.collector_types import CollectorTypeResolver
from answer_metrics.core.shape import ShapeNormalizer
from answer_metrics.models.base import coerce_event_id
from answer_metrics.models.options import MetricsQueryOptions
from answer_metrics.models.records import CaptureEventRecord
from answer_metrics.models.result import QueryResult
from answer_metrics.repositories.connection import MetricsStore
from answer_metrics.repositories.events import event_select
from answer_metrics.utils.metrics import MetricsRegistry, Timer, metrics as default_metrics
from answer_metrics.utils.observability import log_query_performance

T = TypeVar("T")


def normalize_name(name: Optional[str]) -> Optional[str]:
    """Case- and whitespace-insensitive key for display names."""
    if name is None:
        return None
    key = name.strip().lower()
    return key or None


def _id_sort_key(event_id: Any) -> tuple:
    # Numeric IDs before opaque ones, each in natural order
    if isinstance(event_id, int):
        return (0, event_id, "")
    return (1, 0, str(event_id))


class BaseAssembler:
    """
    Base class for every projection.

    Collaborators are injected; defaults are built from settings. All
    public calls go through `_run`, which measures wall time, records
    metrics and turns any failure into `QueryResult(success=False)`.
    """

    def __init__(
        self,
        store: MetricsStore,
        fetcher: Optional[BatchedFetcher] = None,
        normalizer: Optional[ShapeNormalizer] = None,
        resolver: Optional[CollectorTypeResolver] = None,
        registry: Optional[MetricsRegistry] = None,
    ):
        self.store = store
        self.settings = get_settings()
        self.registry = registry or default_metrics
        self.fetcher = fetcher or BatchedFetcher(registry=self.registry)
        self.normalizer = normalizer or ShapeNormalizer(registry=self.registry)
        self.resolver = resolver or CollectorTypeResolver()

    async def _run(
        self,
        query_type: str,
        build: Callable[[], Awaitable[T]],
        empty: T,
        count: Callable[[T], int] = len,
        **context: Any,
    ) -> QueryResult[T]:
        """
        Execute `build` inside the envelope boundary.

        Args:
            query_type: Projection name for logs and metrics
            build: Coroutine factory producing the data
            empty: Data returned on failure
            count: Row count of a successful result (for observability)
            **context: Extra structured log fields
        """
        with Timer(self.registry.query_duration, query_type=query_type) as timer:
            try:
                data = await build()
                error = None
            except Exception as e:
                data, error = empty, str(e) or type(e).__name__

        success = error is None
        rows = count(data) if success else 0
        self.registry.track_query(query_type, success, rows)
        log_query_performance(query_type, timer.elapsed_ms, rows, success=success, error=error, **context)

        return QueryResult(success=success, data=data, error=error, duration_ms=round(timer.elapsed_ms, 3))

    async def load_events(
        self,
        options: MetricsQueryOptions,
        fact_columns: str,
        event_rooted: bool = False,
    ) -> List[CaptureEventRecord]:
        """
        Fetch and normalize the events addressed by `options`.

        Event-ID mode reads in bounded chunks. With `event_rooted`, the
        capture-event table is the root and unscored events are kept with
        `fact=None`; otherwise only events with a fact are returned.
        Date-range mode reads facts by `processed_at`.

        Returns:
            Events in request order (event-ID mode) or by processing time
        """
        collector_types = self.resolver.resolve_many(options.provider_keys)

        if not options.uses_event_ids:
            raw = await self.store.facts.fetch_by_date_range(
                fact_columns,
                [options.brand_id],
                start_date=options.start_date,
                end_date=options.end_date,
                customer_id=options.customer_id,
                collector_types=collector_types,
                topics=options.topics,
                page_size=self.settings.date_range_page_size,
            )
            return self.events_from_facts(raw)

        if event_rooted:
            raw = await self.fetcher.fetch(
                options.event_ids,
                lambda chunk: self.store.events.fetch_with_facts(
                    event_select(fact_columns),
                    chunk,
                    brand_id=options.brand_id,
                    customer_id=options.customer_id,
                    collector_types=collector_types,
                ),
            )
            events = [self.normalizer.normalize_event(row) for row in raw]
            if options.topics:
                wanted = set(options.topics)
                events = [e for e in events if e.fact is not None and e.fact.topic in wanted]
        else:
            raw = await self.fetcher.fetch(
                options.event_ids,
                lambda chunk: self.store.facts.fetch_by_event_ids(
                    fact_columns,
                    chunk,
                    brand_id=options.brand_id,
                    customer_id=options.customer_id,
                    collector_types=collector_types,
                    topics=options.topics,
                ),
            )
            events = [self.normalizer.event_from_fact(row) for row in raw]

        return self.in_request_order(events, options.event_ids)

    def events_from_facts(self, raw: Sequence[dict]) -> List[CaptureEventRecord]:
        """Normalize fact-rooted rows, ordered by processing time then event ID."""
        events = [self.normalizer.event_from_fact(row) for row in raw]
        return sorted(
            events,
            key=lambda e: ((e.fact.processed_at if e.fact else None) or "", _id_sort_key(e.id)),
        )

    @staticmethod
    def in_request_order(events: List[CaptureEventRecord], requested: Sequence[Any]) -> List[CaptureEventRecord]:
        """Order events by the position of their ID in the request."""
        position = {}
        for index, event_id in enumerate(requested):
            position.setdefault(coerce_event_id(event_id), index)
        return sorted(events, key=lambda e: (position.get(e.id, len(position)), _id_sort_key(e.id)))
