"""Projection services."""
from answer_metrics.services.base import BaseAssembler, normalize_name
from answer_metrics.services.brand_view import BrandViewAssembler
from answer_metrics.services.competitor_view import CompetitorViewAssembler
from answer_metrics.services.topic_join import TopicJoinAssembler
from answer_metrics.services.source_attribution import SourceAttributionAssembler
from answer_metrics.services.prompts_analytics import PromptsAnalyticsAssembler
from answer_metrics.services.keywords import KeywordAnalyticsAssembler
from answer_metrics.services.metrics_engine import MetricsEngine

__all__ = [
    "BaseAssembler",
    "normalize_name",
    "BrandViewAssembler",
    "CompetitorViewAssembler",
    "TopicJoinAssembler",
    "SourceAttributionAssembler",
    "PromptsAnalyticsAssembler",
    "KeywordAnalyticsAssembler",
    "MetricsEngine",
]
