"""
Brand View
One flattened row per capture event with its brand metrics and sentiment.
"""
from typing import List

from answer_metrics.models.options import MetricsQueryOptions
from answer_metrics.models.records import CaptureEventRecord
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import BrandMetricsRow, TopicPositionRow
from answer_metrics.repositories.facts import fact_select
from answer_metrics.services.base import BaseAssembler


class BrandViewAssembler(BaseAssembler):
    """
    Brand-level projection.

    In event-ID mode every requested event that exists is returned, scored
    or not; an unscored event carries `has_metrics=False` and None metrics.
    A scored event whose brand metric row is missing also carries None
    metrics, while a present row always yields numbers (0 included).
    """

    async def fetch(self, options: MetricsQueryOptions) -> QueryResult[List[BrandMetricsRow]]:
        """
        Flattened brand rows for the addressed events.

        Args:
            options: Event IDs or brand + date range, plus filters

        Returns:
            Envelope with one row per event, in request order for event-ID mode
        """
        async def build() -> List[BrandMetricsRow]:
            options.require_addressing()
            columns = fact_select(brand=True, sentiment=options.include_sentiment)
            events = await self.load_events(options, columns, event_rooted=True)
            return [self.flatten(event, options.include_sentiment) for event in events]

        return await self._run(
            "brand_metrics",
            build,
            empty=[],
            mode="event_ids" if options.uses_event_ids else "date_range",
        )

    async def fetch_topic_positions(self, options: MetricsQueryOptions) -> QueryResult[List[TopicPositionRow]]:
        """
        Brand metrics of scored events grouped by topic downstream.
        Facts without a topic are skipped.
        """
        async def build() -> List[TopicPositionRow]:
            options.require_addressing()
            columns = fact_select(brand=True, sentiment=True)
            events = await self.load_events(options, columns)
            rows = []
            for event in events:
                if event.fact is None or not event.fact.topic:
                    continue
                flat = self.flatten(event)
                rows.append(TopicPositionRow(
                    collector_result_id=flat.collector_result_id,
                    collector_type=flat.collector_type,
                    topic=event.fact.topic,
                    processed_at=flat.processed_at,
                    share_of_answers=flat.share_of_answers,
                    visibility_index=flat.visibility_index,
                    has_brand_presence=flat.has_brand_presence,
                    sentiment_score=flat.sentiment_score,
                ))
            return rows

        return await self._run("topic_positions", build, empty=[])

    @staticmethod
    def flatten(event: CaptureEventRecord, include_sentiment: bool = True) -> BrandMetricsRow:
        """Flatten one normalized event into a brand row."""
        fact = event.fact
        bm = fact.brand_metric if fact else None
        bs = fact.brand_sentiment if fact and include_sentiment else None

        row = BrandMetricsRow(
            collector_result_id=event.id,
            brand_id=event.brand_id,
            customer_id=event.customer_id,
            query_id=(fact.query_id if fact else None) or event.query_id,
            collector_type=(fact.collector_type if fact else None) or event.collector_type,
            topic=fact.topic if fact else None,
            processed_at=fact.processed_at if fact else None,
            created_at=event.created_at,
            has_metrics=fact is not None,
        )

        if bm is not None:
            row.visibility_index = bm.visibility_index
            row.share_of_answers = bm.share_of_answers
            row.total_brand_mentions = bm.total_brand_mentions
            row.total_brand_product_mentions = bm.total_brand_product_mentions
            row.has_brand_presence = bm.has_brand_presence
            row.brand_positions = list(bm.brand_positions)
            row.brand_first_position = bm.brand_first_position
            row.total_word_count = bm.total_word_count

        if bs is not None:
            row.sentiment_score = bs.sentiment_score
            row.sentiment_label = bs.sentiment_label
            row.positive_sentences = list(bs.positive_sentences)
            row.negative_sentences = list(bs.negative_sentences)

        return row
