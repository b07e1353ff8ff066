"""
Topic Join
Cross-brand competitor comparison for a customer's topics.
"""
from typing import List

from answer_metrics.models.options import TopicJoinOptions
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import TopicCompetitorRow
from answer_metrics.repositories.facts import fact_select
from answer_metrics.services.base import BaseAssembler, normalize_name
from answer_metrics.utils.observability import logger


class TopicJoinAssembler(BaseAssembler):
    """
    Competitor rows across every brand the customer owns.

    Rows are dropped when the competitor is unnamed, names the tracked
    brand itself, falls outside the allow-list, or carries no signal at
    all (share, visibility and sentiment all None).
    """

    async def fetch(self, options: TopicJoinOptions) -> QueryResult[List[TopicCompetitorRow]]:
        """
        Args:
            options: Customer, tracked brand name, topics, window and filters

        Returns:
            Envelope with comparison rows ordered by processing time
        """
        async def build() -> List[TopicCompetitorRow]:
            if not options.topics:
                return []

            brand_ids = await self.store.brands.list_ids_for_customer(options.customer_id)
            if not brand_ids:
                logger.info(f"No brands found for customer {options.customer_id}")
                return []

            raw = await self.store.facts.fetch_by_date_range(
                fact_select(brand=False, competitors=True, sentiment=True, require_competitors=True),
                brand_ids,
                start_date=options.start_date,
                end_date=options.end_date,
                customer_id=options.customer_id,
                collector_types=self.resolver.resolve_many(options.provider_keys),
                topics=options.topics,
                require_topic=True,
                page_size=self.settings.date_range_page_size,
            )

            self_key = normalize_name(options.brand_name)
            allowed = (
                {normalize_name(name) for name in options.competitor_names}
                if options.competitor_names else None
            )

            rows = []
            for event in self.events_from_facts(raw):
                fact = event.fact
                if fact is None or not fact.topic:
                    continue
                for cm in fact.competitor_metrics:
                    name = cm.display_name
                    key = normalize_name(name)
                    if key is None or key == self_key:
                        continue
                    if allowed is not None and key not in allowed:
                        continue

                    sentiment = fact.sentiment_for(cm.competitor_id)
                    sentiment_score = sentiment.sentiment_score if sentiment else None
                    if cm.share_of_answers is None and cm.visibility_index is None and sentiment_score is None:
                        continue

                    rows.append(TopicCompetitorRow(
                        topic=fact.topic,
                        brand_id=fact.brand_id,
                        collector_type=fact.collector_type,
                        competitor_id=cm.competitor_id,
                        competitor_name=name,
                        share_of_answers=cm.share_of_answers,
                        visibility_index=cm.visibility_index,
                        sentiment_score=sentiment_score,
                        processed_at=fact.processed_at,
                    ))
            return rows

        return await self._run(
            "topic_competitors",
            build,
            empty=[],
            customer_id=options.customer_id,
            topics=len(options.topics),
        )
