"""
Repositories Layer
Read-only access to the metrics star schema.
"""
from .base import BaseRepository, StoreQueryError
from .facts import MetricFactRepository, fact_select
from .events import CaptureEventRepository, event_select
from .catalog import BrandRepository, CitationRepository, KeywordRepository
from .connection import MetricsStore, create_store_client, connect_store

__all__ = [
    "BaseRepository",
    "StoreQueryError",
    "MetricFactRepository",
    "fact_select",
    "CaptureEventRepository",
    "event_select",
    "BrandRepository",
    "CitationRepository",
    "KeywordRepository",
    "MetricsStore",
    "create_store_client",
    "connect_store",
]
