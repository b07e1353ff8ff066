"""
Domain models: normalized store records, option records, view rows and the result envelope.
"""
from answer_metrics.models.records import (
    CaptureEventRecord,
    MetricFactRecord,
    BrandMetricRecord,
    BrandSentimentRecord,
    CompetitorMetricRecord,
    CompetitorSentimentRecord,
    CompetitorDimension,
)
from answer_metrics.models.options import MetricsQueryOptions, TopicJoinOptions
from answer_metrics.models.result import QueryResult
from answer_metrics.models.rows import (
    BrandMetricsRow,
    CompetitorMetricsRow,
    CombinedMetrics,
    TopicPositionRow,
    TopicCompetitorRow,
    SourceAttributionRow,
    SourceAggregate,
    SourceAttributionReport,
    PromptsAnalyticsRow,
    KeywordAnalyticsItem,
)

__all__ = [
    "CaptureEventRecord",
    "MetricFactRecord",
    "BrandMetricRecord",
    "BrandSentimentRecord",
    "CompetitorMetricRecord",
    "CompetitorSentimentRecord",
    "CompetitorDimension",
    "MetricsQueryOptions",
    "TopicJoinOptions",
    "QueryResult",
    "BrandMetricsRow",
    "CompetitorMetricsRow",
    "CombinedMetrics",
    "TopicPositionRow",
    "TopicCompetitorRow",
    "SourceAttributionRow",
    "SourceAggregate",
    "SourceAttributionReport",
    "PromptsAnalyticsRow",
    "KeywordAnalyticsItem",
]
