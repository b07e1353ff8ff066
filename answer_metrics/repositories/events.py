"""
Capture Event Repository
Reads captured provider answers with their left-joined metric fact.
"""
from typing import Any, Dict, List, Optional, Sequence
from supabase import AsyncClient

from .base import BaseRepository

EVENT_COLUMNS = "id, brand_id, customer_id, query_id, collector_type, question, created_at"


def event_select(fact_columns: str) -> str:
    """Select string for an event-rooted read embedding `metric_facts(<fact_columns>)`."""
    return f"{EVENT_COLUMNS}, metric_facts({fact_columns})"


class CaptureEventRepository(BaseRepository):
    """
    Repository for `collector_results`.
    Event-rooted reads keep events that have not been scored yet.
    """

    def __init__(self, client: AsyncClient):
        """Initialize capture event repository with a store client."""
        super().__init__(client, "collector_results")

    async def fetch_with_facts(
        self,
        columns: str,
        event_ids: Sequence[Any],
        brand_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        collector_types: Optional[Sequence[str]] = None,
    ) -> List[Dict[str, Any]]:
        """
        Events for one chunk of IDs, each with `metric_facts` embedded (possibly empty).

        Args:
            columns: Select string (see `event_select`)
            event_ids: Capture event IDs (one bounded chunk)
            brand_id / customer_id: Optional equality filters
            collector_types: Stored provider labels (empty/None = all)
        """
        return await self.select(
            columns,
            operation="fetch_with_facts",
            in_={"id": event_ids, "collector_type": collector_types or None},
            eq={"brand_id": brand_id, "customer_id": customer_id},
        )
