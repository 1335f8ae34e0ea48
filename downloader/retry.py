"""Fixed-delay retry around ChunkClient."""

import asyncio

from common.constants import RETRY_COUNT, RETRY_DELAY_SECONDS
from common.exceptions import ChunkFetchError
from common.logging_config import get_logger

logger = get_logger(__name__)


class RetryingFetcher:
    """
    Retries chunk fetches a fixed number of times with a fixed delay.

    Every ChunkFetchError is retried the same way: no backoff growth, no
    jitter, no distinction between failure kinds.
    """

    def __init__(
        self,
        client,
        retry_count: int = RETRY_COUNT,
        retry_delay: float = RETRY_DELAY_SECONDS,
    ):
        """
        Initialize retrying fetcher.

        Args:
            client: Object with an async fetch(offset) -> bytes (usually ChunkClient)
            retry_count: Total attempts per chunk, at least 1
            retry_delay: Seconds to wait between attempts
        """
        if retry_count < 1:
            raise ValueError("retry_count must be at least 1")
        self.client = client
        self.retry_count = retry_count
        self.retry_delay = retry_delay

    async def fetch_with_retry(self, offset: int) -> bytes:
        """
        Fetch a chunk, retrying on failure.

        Args:
            offset: Weave offset of the chunk's last byte

        Returns:
            Chunk bytes

        Raises:
            ChunkFetchError: The last failure once all attempts are used
        """
        for attempt in range(1, self.retry_count + 1):
            try:
                return await self.client.fetch(offset)
            except ChunkFetchError as e:
                if attempt >= self.retry_count:
                    logger.error(
                        f"Giving up on chunk at offset {offset} after {attempt} attempt(s): {e!r}"
                    )
                    raise
                logger.warning(
                    f"Failed to download chunk at offset {offset} on attempt #{attempt}. "
                    f"Waiting {self.retry_delay} seconds before retrying. Reason: {e!r}"
                )
                await asyncio.sleep(self.retry_delay)
