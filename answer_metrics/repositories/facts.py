"""
Metric Fact Repository
Reads the fact table with its embedded metric and sentiment dependents.
"""
from typing import Any, Dict, List, Optional, Sequence
from supabase import AsyncClient

from .base import BaseRepository

FACT_COLUMNS = (
    "id, collector_result_id, brand_id, customer_id, query_id, "
    "collector_type, topic, processed_at, created_at"
)
BRAND_METRIC_COLUMNS = (
    "visibility_index, share_of_answers, total_brand_mentions, "
    "total_brand_product_mentions, has_brand_presence, brand_positions, "
    "brand_first_position, total_word_count"
)
BRAND_SENTIMENT_COLUMNS = "sentiment_score, sentiment_label, positive_sentences, negative_sentences"
COMPETITOR_METRIC_COLUMNS = (
    "competitor_id, visibility_index, share_of_answers, competitor_mentions, "
    "total_competitor_product_mentions, competitor_positions, "
    "brand_competitors(competitor_name)"
)
COMPETITOR_SENTIMENT_COLUMNS = (
    "competitor_id, sentiment_score, sentiment_label, positive_sentences, negative_sentences"
)


def fact_select(
    *,
    brand: bool = True,
    competitors: bool = False,
    sentiment: bool = True,
    require_competitors: bool = False,
) -> str:
    """
    Build the select string for a fact-rooted read.

    Args:
        brand: Embed brand_metrics (and brand_sentiment)
        competitors: Embed competitor_metrics (and competitor_sentiment)
        sentiment: Embed the sentiment tables of the selected sides
        require_competitors: Inner-join competitor_metrics (facts without competitors are skipped)
    """
    parts = [FACT_COLUMNS]
    if brand:
        parts.append(f"brand_metrics({BRAND_METRIC_COLUMNS})")
        if sentiment:
            parts.append(f"brand_sentiment({BRAND_SENTIMENT_COLUMNS})")
    if competitors:
        relation = "competitor_metrics!inner" if require_competitors else "competitor_metrics"
        parts.append(f"{relation}({COMPETITOR_METRIC_COLUMNS})")
        if sentiment:
            parts.append(f"competitor_sentiment({COMPETITOR_SENTIMENT_COLUMNS})")
    return ", ".join(parts)


class MetricFactRepository(BaseRepository):
    """
    Repository for fact-rooted reads.
    Every method returns raw PostgREST rows; shape handling is the caller's.
    """

    def __init__(self, client: AsyncClient):
        """Initialize fact repository with a store client."""
        super().__init__(client, "metric_facts")

    async def fetch_by_event_ids(
        self,
        columns: str,
        event_ids: Sequence[Any],
        brand_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        collector_types: Optional[Sequence[str]] = None,
        topics: Optional[Sequence[str]] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Facts for one chunk of capture event IDs.

        Args:
            columns: Select string (see `fact_select`)
            event_ids: Capture event IDs (one bounded chunk)
            brand_id / customer_id: Optional equality filters
            collector_types: Stored provider labels (empty/None = all)
            topics: Topic names (empty/None = all)
            start_date / end_date: Optional `processed_at` window
        """
        return await self.select(
            columns,
            operation="fetch_by_event_ids",
            in_={
                "collector_result_id": event_ids,
                "collector_type": collector_types or None,
                "topic": topics or None,
            },
            eq={"brand_id": brand_id, "customer_id": customer_id},
            gte={"processed_at": start_date},
            lte={"processed_at": end_date},
        )

    async def fetch_by_date_range(
        self,
        columns: str,
        brand_ids: Sequence[str],
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        customer_id: Optional[str] = None,
        collector_types: Optional[Sequence[str]] = None,
        topics: Optional[Sequence[str]] = None,
        require_topic: bool = False,
        page_size: int = 1000,
    ) -> List[Dict[str, Any]]:
        """
        Every fact processed within [start_date, end_date] for one or more brands.

        Scoring runs after capture, so the window applies to `processed_at`.
        Rows are read in `(processed_at, id)` order, `page_size` at a time.
        """
        if len(brand_ids) == 1:
            eq = {"brand_id": brand_ids[0], "customer_id": customer_id}
            in_ = {}
        else:
            eq = {"customer_id": customer_id}
            in_ = {"brand_id": brand_ids}

        in_.update({
            "collector_type": collector_types or None,
            "topic": topics or None,
        })

        return await self.select_all(
            columns,
            operation="fetch_by_date_range",
            order=("processed_at", "id"),
            page_size=page_size,
            eq=eq,
            in_=in_,
            gte={"processed_at": start_date},
            lte={"processed_at": end_date},
            not_null=["topic"] if require_topic else None,
        )

    async def count_for_brand(self, brand_id: str) -> int:
        """Number of facts recorded for a brand."""
        return await self.count(operation="count_for_brand", eq={"brand_id": brand_id})

    async def fetch_collector_types(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[str]:
        """Raw `collector_type` values (with repeats) for a brand's facts in a window."""
        rows = await self.select(
            "collector_type",
            operation="fetch_collector_types",
            eq={"brand_id": brand_id, "customer_id": customer_id},
            gte={"processed_at": start_date},
            lte={"processed_at": end_date},
            not_null=["collector_type"],
        )
        return [row["collector_type"] for row in rows if row.get("collector_type")]
