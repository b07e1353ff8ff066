"""
Caller-supplied option records for the assemblers.
"""
import datetime as dt
from typing import Annotated, List, Optional, Union
from pydantic import BaseModel, BeforeValidator, ConfigDict

from answer_metrics.models.base import EventId


def _iso(value: Union[str, dt.date, dt.datetime, None]) -> Optional[str]:
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    return value


IsoDate = Annotated[Optional[str], BeforeValidator(_iso)]


class MetricsQueryOptions(BaseModel):
    """
    Addressing plus filters shared by the brand/competitor/prompts views.

    Either `event_ids` (event-ID mode) or `brand_id` with `start_date` and
    `end_date` (date-range mode). `event_ids=[]` is a valid, empty request.
    """
    model_config = ConfigDict(extra="forbid")

    event_ids: Optional[List[EventId]] = None
    brand_id: Optional[str] = None
    customer_id: Optional[str] = None
    start_date: IsoDate = None
    end_date: IsoDate = None

    provider_keys: Optional[List[str]] = None
    topics: Optional[List[str]] = None
    include_sentiment: bool = True

    # Competitor views only
    brand_name: Optional[str] = None
    competitor_ids: Optional[List[str]] = None

    @property
    def uses_event_ids(self) -> bool:
        return self.event_ids is not None

    def require_addressing(self) -> None:
        """
        Raises:
            ValueError: If neither addressing mode is fully specified
        """
        if self.uses_event_ids:
            return
        missing = [
            name for name in ("brand_id", "start_date", "end_date")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                "Provide event_ids, or brand_id with start_date and end_date "
                f"(missing: {', '.join(missing)})"
            )


class TopicJoinOptions(BaseModel):
    """Cross-brand competitor comparison for a set of topics."""
    model_config = ConfigDict(extra="forbid")

    customer_id: str
    brand_name: Optional[str] = None
    topics: List[str]
    start_date: IsoDate = None
    end_date: IsoDate = None
    provider_keys: Optional[List[str]] = None
    competitor_names: Optional[List[str]] = None
