"""
Catalog Repositories
Brand roster, citation and keyword-extraction reads.
"""
from typing import Any, Dict, List, Optional
from supabase import AsyncClient

from .base import BaseRepository

CITATION_COLUMNS = "domain, page_name, url, category, usage_count, collector_result_id, query_id, created_at"
KEYWORD_COLUMNS = "keyword, query_id, collector_result_id, created_at"


class BrandRepository(BaseRepository):
    """Repository for the `brands` roster."""

    def __init__(self, client: AsyncClient):
        super().__init__(client, "brands")

    async def list_ids_for_customer(self, customer_id: str) -> List[str]:
        """IDs of every brand owned by a customer, in store order."""
        rows = await self.select("id", operation="list_ids_for_customer", eq={"customer_id": customer_id})
        return [row["id"] for row in rows if row.get("id")]


class CitationRepository(BaseRepository):
    """Repository for source citations captured with each answer."""

    def __init__(self, client: AsyncClient):
        super().__init__(client, "citations")

    async def fetch_for_brand(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Citations recorded for a brand within [start_date, end_date] (by `created_at`)."""
        return await self.select(
            CITATION_COLUMNS,
            operation="fetch_for_brand",
            eq={"brand_id": brand_id, "customer_id": customer_id},
            gte={"created_at": start_date},
            lte={"created_at": end_date},
        )


class KeywordRepository(BaseRepository):
    """Repository for keywords extracted from captured answers."""

    def __init__(self, client: AsyncClient):
        super().__init__(client, "generated_keywords")

    async def fetch_for_brand(
        self,
        brand_id: str,
        customer_id: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Keyword rows for a brand within [start_date, end_date] (by `created_at`)."""
        return await self.select(
            KEYWORD_COLUMNS,
            operation="fetch_for_brand",
            eq={"brand_id": brand_id, "customer_id": customer_id},
            gte={"created_at": start_date},
            lte={"created_at": end_date},
        )
