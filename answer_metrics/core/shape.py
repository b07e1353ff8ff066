"""
Relation Shape Normalization

PostgREST embeds a declared to-one relation either as a bare object or as
a one-element array depending on how the foreign key was detected, and a
to-many relation as an array, a bare object or null. Every raw row passes
through `ShapeNormalizer` before any field access so the assemblers only
ever see `Optional[record]` for to-one and `list[record]` for to-many.
"""
from typing import Any, Dict, List, Optional

from answer_metrics.models.records import (
    BrandMetricRecord,
    BrandSentimentRecord,
    CaptureEventRecord,
    CompetitorDimension,
    CompetitorMetricRecord,
    CompetitorSentimentRecord,
    MetricFactRecord,
)
from answer_metrics.utils.metrics import MetricsRegistry, metrics as default_metrics
from answer_metrics.utils.observability import logger

# Embedded relation names as they appear in select strings
FACTS = "metric_facts"
BRAND_METRICS = "brand_metrics"
BRAND_SENTIMENT = "brand_sentiment"
COMPETITOR_METRICS = "competitor_metrics"
COMPETITOR_SENTIMENT = "competitor_sentiment"
COMPETITOR_DIMENSION = "brand_competitors"

FACT_COLUMNS = (
    "id",
    "collector_result_id",
    "brand_id",
    "customer_id",
    "query_id",
    "collector_type",
    "topic",
    "processed_at",
    "created_at",
)


def _by_competitor_id(record: Any):
    # Embed order is unspecified; rows without an ID sort last in store order
    return (record.competitor_id is None, str(record.competitor_id or ""))


class ShapeNormalizer:
    """
    Resolves relation-shape ambiguity and decodes raw rows into records.

    A to-one relation carrying more than one element is a data-quality
    anomaly: it is logged and counted, and the first element (store order)
    is used so the row is never dropped.
    """

    def __init__(self, registry: Optional[MetricsRegistry] = None):
        self.registry = registry or default_metrics

    def one(self, value: Any, relation: str, owner: Any = None) -> Optional[Dict[str, Any]]:
        """
        Collapse a declared to-one relation to a single object or None.

        Args:
            value: None, a bare object, or a collection
            relation: Relation name (for logging)
            owner: Identifier of the parent row (for logging)
        """
        if value is None:
            return None
        if isinstance(value, dict):
            return value
        items = [item for item in value if item is not None]
        if not items:
            return None
        if len(items) > 1:
            self.registry.shape_anomalies.inc(relation=relation)
            logger.warning(
                f"To-one relation '{relation}' returned {len(items)} elements; using the first",
                extra={"relation": relation, "count": len(items), "owner": owner},
            )
        return items[0]

    def many(self, value: Any) -> List[Dict[str, Any]]:
        """Coerce a declared to-many relation to a list (None -> [], object -> [object])."""
        if value is None:
            return []
        if isinstance(value, dict):
            return [value]
        return [item for item in value if item is not None]

    def normalize_fact(self, raw: Dict[str, Any]) -> MetricFactRecord:
        """Decode one `metric_facts` row with its embedded dependents."""
        owner = raw.get("collector_result_id", raw.get("id"))

        brand_metric = self.one(raw.get(BRAND_METRICS), BRAND_METRICS, owner)
        brand_sentiment = self.one(raw.get(BRAND_SENTIMENT), BRAND_SENTIMENT, owner)

        competitor_metrics = []
        for cm in self.many(raw.get(COMPETITOR_METRICS)):
            dimension = self.one(cm.get(COMPETITOR_DIMENSION), COMPETITOR_DIMENSION, owner)
            fields = {k: v for k, v in cm.items() if k != COMPETITOR_DIMENSION}
            competitor_metrics.append(CompetitorMetricRecord(
                **fields,
                competitor=CompetitorDimension.model_validate(dimension) if dimension else None,
            ))

        return MetricFactRecord(
            **{column: raw.get(column) for column in FACT_COLUMNS},
            brand_metric=BrandMetricRecord.model_validate(brand_metric) if brand_metric else None,
            brand_sentiment=BrandSentimentRecord.model_validate(brand_sentiment) if brand_sentiment else None,
            competitor_metrics=sorted(competitor_metrics, key=_by_competitor_id),
            competitor_sentiments=sorted(
                (
                    CompetitorSentimentRecord.model_validate(cs)
                    for cs in self.many(raw.get(COMPETITOR_SENTIMENT))
                ),
                key=_by_competitor_id,
            ),
        )

    def normalize_event(self, raw: Dict[str, Any]) -> CaptureEventRecord:
        """Decode one `collector_results` row with its left-joined fact."""
        fact = self.one(raw.get(FACTS), FACTS, raw.get("id"))
        return CaptureEventRecord(
            id=raw["id"],
            brand_id=raw.get("brand_id"),
            customer_id=raw.get("customer_id"),
            query_id=raw.get("query_id"),
            collector_type=raw.get("collector_type"),
            question=raw.get("question"),
            created_at=raw.get("created_at"),
            fact=self.normalize_fact({**fact, "collector_result_id": raw["id"]}) if fact else None,
        )

    def event_from_fact(self, raw: Dict[str, Any]) -> CaptureEventRecord:
        """
        Decode a fact-rooted row (date-range reads) into the event shape.
        The fact carries the event's identity columns.
        """
        fact = self.normalize_fact(raw)
        return CaptureEventRecord(
            id=raw["collector_result_id"],
            brand_id=fact.brand_id,
            customer_id=fact.customer_id,
            query_id=fact.query_id,
            collector_type=fact.collector_type,
            created_at=fact.created_at,
            fact=fact,
        )
