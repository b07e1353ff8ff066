from typing import Annotated, Any, List, Optional, Union
from pydantic import BaseModel, ConfigDict, BeforeValidator


def coerce_event_id(value: Any) -> Any:
    """Digit strings (query strings, CLI args) become the BIGINT the store returns."""
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


# Capture events are keyed by BIGINT in the store; opaque string IDs also pass through
EventId = Annotated[Union[int, str], BeforeValidator(coerce_event_id)]

# NOT NULL DEFAULT 0 columns: a present row always yields a number
Count = Annotated[int, BeforeValidator(lambda v: 0 if v is None else v)]
Flag = Annotated[bool, BeforeValidator(lambda v: False if v is None else v)]
Positions = Annotated[List[int], BeforeValidator(lambda v: [] if v is None else v)]
Sentences = Annotated[List[Any], BeforeValidator(lambda v: [] if v is None else v)]


class StoreRecord(BaseModel):
    """Read-only record decoded from a PostgREST response."""
    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class ViewRow(BaseModel):
    """Flattened output row; every optional field is explicit."""
    model_config = ConfigDict(extra="forbid")
