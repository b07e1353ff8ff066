"""
Store Connection
Explicit construction of the Supabase client and the repository bundle.
"""
from dataclasses import dataclass
from typing import Optional
from supabase import AsyncClient, acreate_client

from ..config import Settings, get_settings
from ..utils.observability import logger
from .catalog import BrandRepository, CitationRepository, KeywordRepository
from .events import CaptureEventRepository
from .facts import MetricFactRepository


@dataclass
class MetricsStore:
    """
    All repositories the assemblers read from.

    Built once by the caller and passed in; tests substitute fakes with the
    same method signatures.
    """
    events: CaptureEventRepository
    facts: MetricFactRepository
    brands: BrandRepository
    citations: CitationRepository
    keywords: KeywordRepository

    @classmethod
    def from_client(cls, client: AsyncClient) -> "MetricsStore":
        """Bundle repositories over one shared client."""
        return cls(
            events=CaptureEventRepository(client),
            facts=MetricFactRepository(client),
            brands=BrandRepository(client),
            citations=CitationRepository(client),
            keywords=KeywordRepository(client),
        )


async def create_store_client(settings: Optional[Settings] = None) -> AsyncClient:
    """
    Create a Supabase async client from settings.

    Raises:
        RuntimeError: If the store URL or credential is not configured
    """
    settings = settings or get_settings()

    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise RuntimeError(
            "Supabase not configured. Set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY."
        )

    logger.info(
        f"Connecting to Supabase at {settings.supabase_url}",
        extra={"environment": settings.environment},
    )
    return await acreate_client(settings.supabase_url, settings.supabase_service_role_key)


async def connect_store(settings: Optional[Settings] = None) -> MetricsStore:
    """Create a client and wrap it in a `MetricsStore`."""
    client = await create_store_client(settings)
    return MetricsStore.from_client(client)
