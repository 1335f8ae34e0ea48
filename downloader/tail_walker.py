"""Backward discovery of the chunks at the end of a blob."""

from common.constants import MAX_CHUNK_SIZE
from common.exceptions import ChunkSizingError
from common.logging_config import get_logger
from common.types import BlobMetadata, TailResult

logger = get_logger(__name__)


class TailWalker:
    """
    Walks backward from a blob's end offset until the chunk boundaries of
    the remaining bytes are known.

    Chunks are addressed by their last byte, so a chunk's start is only
    known once its length has been seen. The walk is therefore sequential.
    """

    def __init__(self, fetcher, max_chunk_size: int = MAX_CHUNK_SIZE):
        """
        Args:
            fetcher: RetryingFetcher (anything with async fetch_with_retry(offset))
            max_chunk_size: Size of a full chunk
        """
        self.fetcher = fetcher
        self.max_chunk_size = max_chunk_size

    def _is_done(self, chunk_len: int, total: int, size: int) -> bool:
        if chunk_len < self.max_chunk_size:
            return True
        if total >= size:
            return True
        # what is left can only be full chunks, so the body can take over
        return (size - total) % self.max_chunk_size == 0

    async def walk_tail(self, metadata: BlobMetadata) -> TailResult:
        """
        Fetch tail chunks starting at metadata.end_offset.

        Stops on a chunk shorter than max_chunk_size, once the declared size is
        reached, or once the remaining bytes are an exact number of full chunks.

        Args:
            metadata: Blob location

        Returns:
            TailResult with chunks in descending offset order

        Raises:
            ChunkSizingError: The gateway returned more bytes than the blob holds
            ChunkFetchError: A chunk could not be fetched
        """
        chunks = []
        total = 0
        offset = metadata.end_offset

        while True:
            chunk = await self.fetcher.fetch_with_retry(offset)
            chunks.append(chunk)
            total += len(chunk)
            logger.debug(f"Tail chunk at offset {offset}: {len(chunk)} bytes (total {total}/{metadata.size})")

            if total > metadata.size:
                raise ChunkSizingError(
                    f"Tail chunks add up to {total} bytes but the blob is {metadata.size} bytes"
                )
            if self._is_done(len(chunk), total, metadata.size):
                break
            offset -= len(chunk)

        return TailResult(chunks=tuple(chunks), total_bytes=total)
