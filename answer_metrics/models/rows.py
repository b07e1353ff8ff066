"""
Flattened view rows.

One explicit row type per consumer contract. A metric field is None only
when the fact (or its dependent row) does not exist; a present row yields
concrete numbers, 0 included.
"""
from typing import Any, Dict, List, Optional
from pydantic import Field

from answer_metrics.models.base import ViewRow, EventId


class BrandMetricsRow(ViewRow):
    collector_result_id: EventId
    brand_id: Optional[str] = None
    customer_id: Optional[str] = None
    query_id: Optional[str] = None
    collector_type: Optional[str] = None
    topic: Optional[str] = None
    processed_at: Optional[str] = None
    created_at: Optional[str] = None
    has_metrics: bool = False

    visibility_index: Optional[float] = None
    share_of_answers: Optional[float] = None
    total_brand_mentions: Optional[int] = None
    total_brand_product_mentions: Optional[int] = None
    has_brand_presence: Optional[bool] = None
    brand_positions: Optional[List[int]] = None
    brand_first_position: Optional[int] = None
    total_word_count: Optional[int] = None

    sentiment_score: Optional[float] = None
    sentiment_label: Optional[str] = None
    positive_sentences: Optional[List[Any]] = None
    negative_sentences: Optional[List[Any]] = None


class CompetitorMetricsRow(ViewRow):
    collector_result_id: EventId
    brand_id: Optional[str] = None
    customer_id: Optional[str] = None
    query_id: Optional[str] = None
    collector_type: Optional[str] = None
    topic: Optional[str] = None
    processed_at: Optional[str] = None
    created_at: Optional[str] = None

    competitor_id: Optional[str] = None
    competitor_name: Optional[str] = None  # None when the dimension row is unresolved

    visibility_index: Optional[float] = None
    share_of_answers: Optional[float] = None
    competitor_mentions: int = 0
    total_competitor_product_mentions: Optional[int] = None
    competitor_positions: List[int] = Field(default_factory=list)

    sentiment_score: Optional[float] = None
    sentiment_label: Optional[str] = None
    positive_sentences: Optional[List[Any]] = None
    negative_sentences: Optional[List[Any]] = None


class CombinedMetrics(ViewRow):
    brand: List[BrandMetricsRow] = Field(default_factory=list)
    competitors: List[CompetitorMetricsRow] = Field(default_factory=list)


class TopicPositionRow(ViewRow):
    """Brand-level metrics of one scored fact, keyed by its topic."""
    collector_result_id: EventId
    collector_type: Optional[str] = None
    topic: str
    processed_at: Optional[str] = None
    share_of_answers: Optional[float] = None
    visibility_index: Optional[float] = None
    has_brand_presence: Optional[bool] = None
    sentiment_score: Optional[float] = None


class TopicCompetitorRow(ViewRow):
    """Competitor metrics for cross-brand topic comparison charts."""
    topic: str
    brand_id: Optional[str] = None
    collector_type: Optional[str] = None
    competitor_id: Optional[str] = None
    competitor_name: str
    share_of_answers: Optional[float] = None
    visibility_index: Optional[float] = None
    sentiment_score: Optional[float] = None
    processed_at: Optional[str] = None


class SourceAttributionRow(ViewRow):
    """
    Brand row (competitor_name is None) or competitor row of one event,
    in the shape the citation attribution surface consumes.
    """
    collector_result_id: EventId
    competitor_name: Optional[str] = None
    share_of_answers: Optional[float] = None
    total_brand_mentions: Optional[int] = None
    sentiment_score: Optional[float] = None
    visibility_index: Optional[float] = None
    average_position: Optional[float] = None
    brand_positions: Optional[List[int]] = None
    topic: Optional[str] = None
    processed_at: Optional[str] = None


class SourceAggregate(ViewRow):
    """All citations of one domain, folded with the metrics of the cited events."""
    domain: str
    url: str
    source_type: str
    citations: int = 0
    event_count: int = 0
    scored_event_count: int = 0
    mention_rate: Optional[float] = None
    share_of_answers: Optional[float] = None
    sentiment_score: Optional[float] = None
    visibility_index: Optional[float] = None
    topics: List[str] = Field(default_factory=list)
    prompts: List[str] = Field(default_factory=list)
    pages: List[str] = Field(default_factory=list)


class SourceAttributionReport(ViewRow):
    sources: List[SourceAggregate] = Field(default_factory=list)
    total_sources: int = 0
    total_citations: int = 0
    average_sentiment: Optional[float] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None


class PromptsAnalyticsRow(ViewRow):
    """
    Per-event brand metrics plus competitor rollups.

    `competitor_*` totals sum across competitor rows with missing counts
    read as 0; the name-keyed maps keep each competitor's own None/0.
    """
    query_id: Optional[str] = None
    collector_result_id: EventId
    collector_type: Optional[str] = None
    processed_at: Optional[str] = None

    visibility_index: Optional[float] = None
    share_of_answers: Optional[float] = None
    sentiment_score: Optional[float] = None
    total_brand_mentions: Optional[int] = None
    total_brand_product_mentions: Optional[int] = None
    brand_positions: List[int] = Field(default_factory=list)

    competitor_names: List[str] = Field(default_factory=list)
    competitor_count: Optional[int] = None
    competitor_product_count: Optional[int] = None
    competitor_positions: List[int] = Field(default_factory=list)

    competitor_visibility_map: Dict[str, Optional[float]] = Field(default_factory=dict)
    competitor_share_map: Dict[str, Optional[float]] = Field(default_factory=dict)
    competitor_sentiment_map: Dict[str, Optional[float]] = Field(default_factory=dict)
    competitor_mentions_map: Dict[str, Optional[int]] = Field(default_factory=dict)
    competitor_positions_map: Dict[str, List[int]] = Field(default_factory=dict)


class KeywordAnalyticsItem(ViewRow):
    keyword: str
    mentions: int = 0
    scored_count: int = 0
    brand_presence_count: int = 0
    sources: List[str] = Field(default_factory=list)
