"""
Prompts Analytics
Per-event brand metrics with competitor rollups for the prompts comparison table.
"""
from typing import List, Optional

from answer_metrics.models.options import MetricsQueryOptions
from answer_metrics.models.records import CaptureEventRecord
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import PromptsAnalyticsRow
from answer_metrics.repositories.facts import fact_select
from answer_metrics.services.base import BaseAssembler, normalize_name
from answer_metrics.services.brand_view import BrandViewAssembler
from answer_metrics.services.competitor_view import CompetitorViewAssembler


def _visibility_percent(visibility: Optional[float], share: Optional[float]) -> Optional[float]:
    # Visibility is stored as a 0-1 index; share is already a percentage
    if visibility is not None:
        return round(visibility * 100, 2)
    return share


class PromptsAnalyticsAssembler(BaseAssembler):
    """
    One row per capture event.

    Competitor totals sum every competitor row of the event with missing
    counts read as 0, and are None only for unscored events. The
    name-keyed maps keep each competitor's own values untouched.
    """

    async def fetch(self, options: MetricsQueryOptions) -> QueryResult[List[PromptsAnalyticsRow]]:
        async def build() -> List[PromptsAnalyticsRow]:
            options.require_addressing()
            columns = fact_select(brand=True, competitors=True, sentiment=options.include_sentiment)
            events = await self.load_events(options, columns, event_rooted=True)
            return [
                self.flatten(event, options.include_sentiment, options.brand_name)
                for event in events
            ]

        return await self._run(
            "prompts_analytics",
            build,
            empty=[],
            mode="event_ids" if options.uses_event_ids else "date_range",
        )

    @staticmethod
    def flatten(
        event: CaptureEventRecord,
        include_sentiment: bool = True,
        brand_name: Optional[str] = None,
    ) -> PromptsAnalyticsRow:
        """Compose the brand row and competitor rows of one event."""
        brand = BrandViewAssembler.flatten(event, include_sentiment)
        competitors = CompetitorViewAssembler.flatten(
            event, include_sentiment=include_sentiment, brand_name=brand_name
        )

        row = PromptsAnalyticsRow(
            query_id=brand.query_id,
            collector_result_id=event.id,
            collector_type=brand.collector_type,
            processed_at=brand.processed_at,
            visibility_index=brand.visibility_index,
            share_of_answers=brand.share_of_answers,
            sentiment_score=brand.sentiment_score,
            total_brand_mentions=brand.total_brand_mentions,
            total_brand_product_mentions=brand.total_brand_product_mentions,
            brand_positions=brand.brand_positions or [],
        )

        if not event.is_scored:
            return row

        row.competitor_count = sum(c.competitor_mentions or 0 for c in competitors)
        row.competitor_product_count = sum(c.total_competitor_product_mentions or 0 for c in competitors)

        for competitor in competitors:
            row.competitor_positions.extend(competitor.competitor_positions)

            key = normalize_name(competitor.competitor_name)
            if key is None:
                continue
            # One display name per map key; the first spelling seen is kept
            if key not in row.competitor_mentions_map:
                row.competitor_names.append(competitor.competitor_name)

            row.competitor_visibility_map[key] = _visibility_percent(
                competitor.visibility_index, competitor.share_of_answers
            )
            row.competitor_share_map[key] = competitor.share_of_answers
            row.competitor_sentiment_map[key] = competitor.sentiment_score
            row.competitor_mentions_map[key] = competitor.competitor_mentions
            row.competitor_positions_map[key] = list(competitor.competitor_positions)

        return row
