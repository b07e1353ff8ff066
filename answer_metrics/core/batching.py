"""
Batched Fetcher

Splits large identifier lists into bounded `in (...)` reads so no single
request exceeds the store's URL/row limits, runs the chunks with a fixed
parallelism cap and merges the results in chunk order.
"""
import asyncio
from typing import Awaitable, Callable, Hashable, List, Optional, Sequence, TypeVar

from answer_metrics.config import get_settings
from answer_metrics.utils.metrics import MetricsRegistry, metrics as default_metrics
from answer_metrics.utils.observability import logger

K = TypeVar("K", bound=Hashable)
R = TypeVar("R")


class ChunkFetchError(Exception):
    """Raised when one chunk read fails; the whole batched read fails with it."""

    def __init__(self, chunk_index: int, chunk_count: int, cause: BaseException):
        self.chunk_index = chunk_index
        self.chunk_count = chunk_count
        self.cause = cause
        super().__init__(f"Chunk {chunk_index + 1}/{chunk_count} failed: {cause}")


def chunked(items: Sequence[K], size: int) -> List[List[K]]:
    """
    Partition into contiguous chunks preserving input order.

    Raises:
        ValueError: If size is not positive
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    return [list(items[i:i + size]) for i in range(0, len(items), size)]


class BatchedFetcher:
    """
    Bounded-parallelism chunk reader.

    Guarantees:
    - Input IDs are de-duplicated (first occurrence wins) before chunking,
      so every ID is requested exactly once.
    - Output is the concatenation of chunk results in chunk order,
      independent of network completion order.
    - Any chunk failure cancels the in-flight chunks and raises
      `ChunkFetchError` naming the failed chunk. Nothing is retried.

    Usage:
        fetcher = BatchedFetcher(chunk_size=200, max_concurrency=4)
        rows = await fetcher.fetch(event_ids, lambda chunk: repo.fetch(chunk))
    """

    def __init__(
        self,
        chunk_size: Optional[int] = None,
        max_concurrency: Optional[int] = None,
        registry: Optional[MetricsRegistry] = None,
    ):
        settings = get_settings()
        self.chunk_size = settings.metrics_batch_size if chunk_size is None else chunk_size
        self.max_concurrency = settings.metrics_max_concurrency if max_concurrency is None else max_concurrency
        self.registry = registry or default_metrics

        if self.chunk_size < 1 or self.max_concurrency < 1:
            raise ValueError("chunk_size and max_concurrency must be positive")

    async def fetch(
        self,
        ids: Sequence[K],
        query: Callable[[List[K]], Awaitable[Optional[List[R]]]],
        chunk_size: Optional[int] = None,
    ) -> List[R]:
        """
        Run `query` once per chunk and merge the results.

        Args:
            ids: Identifiers to read
            query: Async read for one chunk of identifiers
            chunk_size: Override of the configured chunk size

        Returns:
            Merged rows; IDs without matching rows are simply absent

        Raises:
            ChunkFetchError: If any chunk read fails
        """
        unique_ids = list(dict.fromkeys(ids))
        if not unique_ids:
            return []

        chunks = chunked(unique_ids, self.chunk_size if chunk_size is None else chunk_size)
        semaphore = asyncio.Semaphore(self.max_concurrency)

        logger.debug(
            f"Fetching {len(unique_ids)} IDs in {len(chunks)} chunks "
            f"(max_concurrency={self.max_concurrency})"
        )

        async def run_chunk(index: int, chunk: List[K]) -> List[R]:
            async with semaphore:
                try:
                    rows = await query(chunk)
                except Exception as e:
                    self.registry.chunk_failures.inc()
                    logger.error(f"Chunk {index + 1}/{len(chunks)} failed: {e}")
                    raise ChunkFetchError(index, len(chunks), e) from e
            self.registry.chunks_fetched.inc()
            return list(rows or [])

        tasks = [asyncio.create_task(run_chunk(i, chunk)) for i, chunk in enumerate(chunks)]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            # Abandon the remaining reads, then let them settle before re-raising
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        merged: List[R] = []
        for rows in results:
            merged.extend(rows)
        return merged
