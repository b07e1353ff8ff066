from typing import Generic, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")


class QueryResult(BaseModel, Generic[T]):
    """
    Uniform envelope returned by every assembler call.

    `success=False` means the query did not complete; it never means "no data".
    """
    success: bool
    data: T
    error: Optional[str] = None
    duration_ms: float
