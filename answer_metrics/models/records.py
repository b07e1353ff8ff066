"""
Normalized star-schema records.

Every relation has exactly one in-memory shape here: to-one relations are
`Optional[...]`, to-many relations are lists. Raw responses reach these
models only through `ShapeNormalizer`.
"""
from typing import List, Optional
from pydantic import Field

from answer_metrics.models.base import (
    StoreRecord,
    EventId,
    Count,
    Flag,
    Positions,
    Sentences,
)


class CompetitorDimension(StoreRecord):
    """Identity/display record of a tracked competitor (`brand_competitors`)."""
    competitor_name: Optional[str] = None


class BrandMetricRecord(StoreRecord):
    visibility_index: Optional[float] = None
    share_of_answers: Optional[float] = None
    total_brand_mentions: Count = 0
    total_brand_product_mentions: Optional[int] = None
    has_brand_presence: Flag = False
    brand_positions: Positions = Field(default_factory=list)
    brand_first_position: Optional[int] = None
    total_word_count: Optional[int] = None


class BrandSentimentRecord(StoreRecord):
    sentiment_score: Optional[float] = None
    sentiment_label: Optional[str] = None
    positive_sentences: Sentences = Field(default_factory=list)
    negative_sentences: Sentences = Field(default_factory=list)


class CompetitorMetricRecord(StoreRecord):
    competitor_id: Optional[str] = None
    visibility_index: Optional[float] = None
    share_of_answers: Optional[float] = None
    competitor_mentions: Count = 0
    total_competitor_product_mentions: Optional[int] = None
    competitor_positions: Positions = Field(default_factory=list)
    competitor: Optional[CompetitorDimension] = None

    @property
    def display_name(self) -> Optional[str]:
        """Resolved display name, or None when the dimension row is missing or blank."""
        if self.competitor is None or not self.competitor.competitor_name:
            return None
        name = self.competitor.competitor_name.strip()
        return name or None


class CompetitorSentimentRecord(StoreRecord):
    competitor_id: Optional[str] = None
    sentiment_score: Optional[float] = None
    sentiment_label: Optional[str] = None
    positive_sentences: Sentences = Field(default_factory=list)
    negative_sentences: Sentences = Field(default_factory=list)


class MetricFactRecord(StoreRecord):
    """Central fact row with its dependent metric and sentiment rows."""
    id: Optional[int] = None
    collector_result_id: Optional[EventId] = None
    brand_id: Optional[str] = None
    customer_id: Optional[str] = None
    query_id: Optional[str] = None
    collector_type: Optional[str] = None
    topic: Optional[str] = None
    processed_at: Optional[str] = None
    created_at: Optional[str] = None

    brand_metric: Optional[BrandMetricRecord] = None
    brand_sentiment: Optional[BrandSentimentRecord] = None
    competitor_metrics: List[CompetitorMetricRecord] = Field(default_factory=list)
    competitor_sentiments: List[CompetitorSentimentRecord] = Field(default_factory=list)

    def sentiment_for(self, competitor_id: Optional[str]) -> Optional[CompetitorSentimentRecord]:
        """Competitor sentiment row of the same fact matched by competitor identity."""
        if competitor_id is None:
            return None
        for sentiment in self.competitor_sentiments:
            if sentiment.competitor_id == competitor_id:
                return sentiment
        return None


class CaptureEventRecord(StoreRecord):
    """One captured provider answer and its (possibly missing) metric fact."""
    id: EventId
    brand_id: Optional[str] = None
    customer_id: Optional[str] = None
    query_id: Optional[str] = None
    collector_type: Optional[str] = None
    question: Optional[str] = None
    created_at: Optional[str] = None
    fact: Optional[MetricFactRecord] = None

    @property
    def is_scored(self) -> bool:
        return self.fact is not None
