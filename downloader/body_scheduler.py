"""Windowed concurrent download of the full-size body chunks."""

import asyncio
from typing import Callable, Dict, List, Optional

from common.constants import MAX_CHUNK_SIZE, MAX_CONCURRENT_CONN
from common.exceptions import ChunkSizingError, FileWriteError
from common.logging_config import get_logger
from common.types import ChunkState

logger = get_logger(__name__)


class ChunkWindow:
    """
    Per-index state table for one body download.

    Indices are promoted PENDING -> IN_FLIGHT in ascending order. Every index
    below flush_frontier is FLUSHED.
    """

    def __init__(self, chunk_count: int):
        self.chunk_count = chunk_count
        self.states: List[ChunkState] = [ChunkState.PENDING] * chunk_count
        self.flush_frontier = 0
        self.in_flight = 0
        self._next_pending = 0
        self._payloads: Dict[int, bytes] = {}

    def has_pending(self) -> bool:
        return self._next_pending < self.chunk_count

    def is_complete(self) -> bool:
        return self.flush_frontier == self.chunk_count

    def start_next(self) -> int:
        """Promote the lowest pending index to IN_FLIGHT and return it."""
        index = self._next_pending
        if self.states[index] is not ChunkState.PENDING:
            raise RuntimeError(f"Chunk state error: index {index} is {self.states[index].value}")
        self.states[index] = ChunkState.IN_FLIGHT
        self._next_pending += 1
        self.in_flight += 1
        return index

    def mark_fetched(self, index: int, data: bytes) -> None:
        if self.states[index] is not ChunkState.IN_FLIGHT:
            raise RuntimeError(f"Chunk state error: index {index} is {self.states[index].value}")
        self.states[index] = ChunkState.FETCHED
        self._payloads[index] = data
        self.in_flight -= 1

    def peek_flushable(self) -> Optional[bytes]:
        """Return the payload at the flush frontier if it has been fetched."""
        if self.is_complete() or self.states[self.flush_frontier] is not ChunkState.FETCHED:
            return None
        return self._payloads[self.flush_frontier]

    def mark_flushed(self) -> None:
        index = self.flush_frontier
        self.states[index] = ChunkState.FLUSHED
        del self._payloads[index]
        self.flush_frontier += 1


class BodyScheduler:
    """
    Fetches body chunks concurrently and writes them in ascending order.

    At most max_concurrent fetches run at once. The scheduler wakes up when any
    single fetch finishes, so one slow chunk does not stall the others, but a
    chunk is only written once every chunk before it has been written.
    """

    def __init__(
        self,
        fetcher,
        max_concurrent: int = MAX_CONCURRENT_CONN,
        max_chunk_size: int = MAX_CHUNK_SIZE,
    ):
        """
        Args:
            fetcher: RetryingFetcher (anything with async fetch_with_retry(offset))
            max_concurrent: Size of the concurrency window
            max_chunk_size: Size of every body chunk
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.fetcher = fetcher
        self.max_concurrent = max_concurrent
        self.max_chunk_size = max_chunk_size

    async def download_body(
        self,
        start_offset: int,
        body_size: int,
        sink,
        progress: Optional[Callable[[int], None]] = None,
    ) -> None:
        """
        Download body_size bytes of full-size chunks into sink.

        Args:
            start_offset: End-anchored address of the first (lowest) body chunk
            body_size: Total body bytes, a multiple of max_chunk_size
            sink: Binary writable object; receives chunks in ascending order
            progress: Optional callback with the cumulative body bytes written

        Raises:
            ChunkSizingError: body_size is not a whole number of chunks
            ChunkFetchError: A chunk failed after all retries
            FileWriteError: The sink rejected a write
        """
        if body_size % self.max_chunk_size != 0:
            raise ChunkSizingError(
                f"Body of {body_size} bytes is not a multiple of {self.max_chunk_size}"
            )

        chunk_count = body_size // self.max_chunk_size
        if chunk_count == 0:
            return

        logger.info(f"Downloading {chunk_count} body chunk(s) with up to {self.max_concurrent} connections")

        window = ChunkWindow(chunk_count)
        tasks: Dict[asyncio.Task, int] = {}
        written = 0

        try:
            while not window.is_complete():
                while window.has_pending() and len(tasks) < self.max_concurrent:
                    index = window.start_next()
                    offset = start_offset + index * self.max_chunk_size
                    task = asyncio.create_task(self.fetcher.fetch_with_retry(offset))
                    tasks[task] = index

                if not tasks:
                    raise RuntimeError(
                        f"Scheduler stalled at index {window.flush_frontier} with nothing in flight"
                    )

                done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    index = tasks.pop(task)
                    window.mark_fetched(index, task.result())

                written += self._flush(window, sink, written, progress)
        finally:
            await self._cancel_outstanding(tasks)

    def _flush(self, window: ChunkWindow, sink, written: int, progress) -> int:
        flushed = 0
        data = window.peek_flushable()
        while data is not None:
            try:
                sink.write(data)
            except OSError as e:
                raise FileWriteError(str(e)) from e
            flushed += len(data)
            logger.debug(f"Wrote chunk {window.flush_frontier} ({len(data)} bytes)")
            window.mark_flushed()
            if progress is not None:
                progress(written + flushed)
            data = window.peek_flushable()
        return flushed

    @staticmethod
    async def _cancel_outstanding(tasks: Dict[asyncio.Task, int]) -> None:
        if not tasks:
            return
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
