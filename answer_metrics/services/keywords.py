"""
Keyword Analytics
Extracted keywords with the brand presence of the answers they came from.
"""
from typing import Any, Dict, List, Optional

from answer_metrics.models.base import coerce_event_id
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import KeywordAnalyticsItem
from answer_metrics.repositories.events import event_select
from answer_metrics.repositories.facts import fact_select
from answer_metrics.services.base import BaseAssembler
from answer_metrics.services.brand_view import BrandViewAssembler


class KeywordAnalyticsAssembler(BaseAssembler):
    """Groups keyword extractions by keyword and folds in the brand view of each event."""

    async def fetch(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> QueryResult[List[KeywordAnalyticsItem]]:
        """
        Args:
            brand_id: Tracked brand
            customer_id: Owning customer (optional filter)
            start_date / end_date: Extraction `created_at` window

        Returns:
            Envelope with one item per keyword, most mentioned first
        """
        async def build() -> List[KeywordAnalyticsItem]:
            extractions = await self.store.keywords.fetch_for_brand(
                brand_id, customer_id=customer_id, start_date=start_date, end_date=end_date
            )

            grouped: Dict[str, List[Any]] = {}
            for extraction in extractions:
                keyword = (extraction.get("keyword") or "").strip()
                event_id = coerce_event_id(extraction.get("collector_result_id"))
                if not keyword or event_id is None:
                    continue
                event_ids = grouped.setdefault(keyword, [])
                if event_id not in event_ids:
                    event_ids.append(event_id)

            all_ids = [event_id for event_ids in grouped.values() for event_id in event_ids]
            columns = event_select(fact_select(brand=True, sentiment=False))
            raw = await self.fetcher.fetch(
                all_ids,
                lambda chunk: self.store.events.fetch_with_facts(columns, chunk, brand_id=brand_id),
            )
            rows = {}
            for item in raw:
                event = self.normalizer.normalize_event(item)
                rows[event.id] = BrandViewAssembler.flatten(event, include_sentiment=False)

            items = []
            for keyword, event_ids in grouped.items():
                brand_rows = [rows[event_id] for event_id in event_ids if event_id in rows]
                items.append(KeywordAnalyticsItem(
                    keyword=keyword,
                    mentions=len(event_ids),
                    scored_count=sum(1 for row in brand_rows if row.has_metrics),
                    brand_presence_count=sum(1 for row in brand_rows if row.has_brand_presence),
                    sources=sorted({row.collector_type for row in brand_rows if row.collector_type}),
                ))

            items.sort(key=lambda item: (-item.mentions, item.keyword.lower()))
            return items

        return await self._run("keyword_analytics", build, empty=[], brand_id=brand_id)
