"""
Competitor View
Fan-out projection: one row per (capture event, competitor) pair.
"""
from typing import List, Optional, Sequence

from answer_metrics.models.options import MetricsQueryOptions
from answer_metrics.models.records import CaptureEventRecord
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import CompetitorMetricsRow
from answer_metrics.repositories.facts import fact_select
from answer_metrics.services.base import BaseAssembler, normalize_name


class CompetitorViewAssembler(BaseAssembler):
    """
    Competitor-level projection.

    Each row carries the competitor's display name from the competitor
    dimension (None when unresolved, never the internal ID) and the
    sentiment row of the same fact with the same competitor identity.
    """

    async def fetch(self, options: MetricsQueryOptions) -> QueryResult[List[CompetitorMetricsRow]]:
        """
        Flattened competitor rows for the addressed events.

        `options.brand_name` drops rows naming the tracked brand itself;
        `options.competitor_ids` keeps only those competitors.
        """
        async def build() -> List[CompetitorMetricsRow]:
            options.require_addressing()
            columns = fact_select(
                brand=False,
                competitors=True,
                sentiment=options.include_sentiment,
                require_competitors=True,
            )
            events = await self.load_events(options, columns)
            rows: List[CompetitorMetricsRow] = []
            for event in events:
                rows.extend(self.flatten(
                    event,
                    include_sentiment=options.include_sentiment,
                    brand_name=options.brand_name,
                    competitor_ids=options.competitor_ids,
                ))
            return rows

        return await self._run(
            "competitor_metrics",
            build,
            empty=[],
            mode="event_ids" if options.uses_event_ids else "date_range",
        )

    @staticmethod
    def flatten(
        event: CaptureEventRecord,
        include_sentiment: bool = True,
        brand_name: Optional[str] = None,
        competitor_ids: Optional[Sequence[str]] = None,
    ) -> List[CompetitorMetricsRow]:
        """Fan one normalized event out into its competitor rows."""
        fact = event.fact
        if fact is None:
            return []

        self_key = normalize_name(brand_name)
        allowed = set(competitor_ids) if competitor_ids else None

        rows = []
        for cm in fact.competitor_metrics:
            name = cm.display_name
            if self_key is not None and normalize_name(name) == self_key:
                continue
            if allowed is not None and cm.competitor_id not in allowed:
                continue

            row = CompetitorMetricsRow(
                collector_result_id=event.id,
                brand_id=event.brand_id,
                customer_id=event.customer_id,
                query_id=fact.query_id or event.query_id,
                collector_type=fact.collector_type or event.collector_type,
                topic=fact.topic,
                processed_at=fact.processed_at,
                created_at=event.created_at,
                competitor_id=cm.competitor_id,
                competitor_name=name,
                visibility_index=cm.visibility_index,
                share_of_answers=cm.share_of_answers,
                competitor_mentions=cm.competitor_mentions,
                total_competitor_product_mentions=cm.total_competitor_product_mentions,
                competitor_positions=list(cm.competitor_positions),
            )

            sentiment = fact.sentiment_for(cm.competitor_id) if include_sentiment else None
            if sentiment is not None:
                row.sentiment_score = sentiment.sentiment_score
                row.sentiment_label = sentiment.sentiment_label
                row.positive_sentences = list(sentiment.positive_sentences)
                row.negative_sentences = list(sentiment.negative_sentences)

            rows.append(row)
        return rows
