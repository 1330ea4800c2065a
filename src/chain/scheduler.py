"""Split a block range into chunks and fetch each chunk concurrently."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, NamedTuple, Protocol

from src.chain.errors import MissingBlockError
from src.helpers.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from src.chain.models import BlockHeader


logger = get_logger(__name__)


class Chunk(NamedTuple):
    """Half-open block number range [lo, hi)."""

    lo: int
    hi: int

    @property
    def size(self) -> int:
        return self.hi - self.lo

    def block_numbers(self) -> range:
        return range(self.lo, self.hi)


class HeaderSource(Protocol):
    """Anything that can resolve one block number to a header."""

    async def fetch(self, block_number: int) -> BlockHeader: ...


def chunks(start: int, end: int, size: int) -> Iterator[Chunk]:
    """Partition [start, end) into consecutive chunks of at most `size` blocks.

    Example:
        >>> list(chunks(100, 105, 2))
        [Chunk(lo=100, hi=102), Chunk(lo=102, hi=104), Chunk(lo=104, hi=105)]

    Raises:
        ValueError: If size < 1 or start > end
    """
    if size < 1:
        msg = f"Chunk size must be positive, got {size}"
        raise ValueError(msg)
    if start > end:
        msg = f"start ({start}) must not be greater than end ({end})"
        raise ValueError(msg)
    return _iter_chunks(start, end, size)


def _iter_chunks(start: int, end: int, size: int) -> Iterator[Chunk]:
    for lo in range(start, end, size):
        yield Chunk(lo, min(lo + size, end))


async def fetch_chunk(source: HeaderSource, chunk: Chunk) -> list[BlockHeader]:
    """Fetch every header of one chunk concurrently, in block number order.

    The first failing fetch cancels the rest of the chunk and is re-raised
    as-is.

    Raises:
        MissingBlockError: If any block of the chunk could not be resolved
    """
    try:
        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(source.fetch(number))
                for number in chunk.block_numbers()
            ]
    except ExceptionGroup as eg:
        raise eg.exceptions[0] from None

    by_number = {task.result().number: task.result() for task in tasks}
    ordered = []
    for number in chunk.block_numbers():
        header = by_number.get(number)
        if header is None:
            raise MissingBlockError(number)
        ordered.append(header)
    return ordered


async def fetch_header_range(
    source: HeaderSource,
    start: int,
    end: int,
    chunk_size: int,
    *,
    on_chunk: Callable[[int], None] | None = None,
) -> list[BlockHeader]:
    """Fetch headers [start, end) chunk by chunk.

    Chunks are drained strictly one after another, so at most `chunk_size`
    requests are in flight. Any failure aborts the whole range.

    Args:
        source: Header source, usually a HeaderFetcher
        start: First block number (inclusive)
        end: Last block number (exclusive)
        chunk_size: Maximum number of concurrent fetches
        on_chunk: Called with the chunk length after each chunk completes

    Returns:
        Headers in ascending block number order
    """
    headers: list[BlockHeader] = []
    for chunk in chunks(start, end, chunk_size):
        logger.debug("Fetching blocks %d-%d", chunk.lo, chunk.hi - 1)
        headers.extend(await fetch_chunk(source, chunk))
        if on_chunk is not None:
            on_chunk(chunk.size)

    logger.info("Fetched %d headers [%d, %d)", len(headers), start, end)
    return headers


__all__ = [
    "Chunk",
    "HeaderSource",
    "chunks",
    "fetch_chunk",
    "fetch_header_range",
]
