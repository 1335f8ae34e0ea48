"""Orchestrates the tail walk, the body download and the final tail write."""

import sys
from pathlib import Path
from typing import Callable, Optional, Union

from common.constants import MAX_CHUNK_SIZE, MAX_CONCURRENT_CONN
from common.exceptions import (
    ChunkSizingError,
    FileWriteError,
    SizeIsZeroError,
    SizeTooBigError,
)
from common.logging_config import get_logger
from common.types import BlobMetadata
from downloader.body_scheduler import BodyScheduler
from downloader.tail_walker import TailWalker

logger = get_logger(__name__)


def validate_metadata(metadata: BlobMetadata) -> None:
    """
    Reject blobs that cannot be downloaded before any request is made.

    Raises:
        SizeIsZeroError: Empty blob
        SizeTooBigError: Blob larger than the platform can address
    """
    if metadata.size == 0:
        raise SizeIsZeroError("Transaction has no data")
    if metadata.size > sys.maxsize:
        raise SizeTooBigError(f"Transaction size {metadata.size} exceeds {sys.maxsize}")


class Assembler:
    """
    Downloads a complete blob into a sink.

    The tail is discovered first because chunks are end-anchored, then the
    body is fetched concurrently, then the tail is appended in file order.

    Usage:
        async with create_session(base_url) as session:
            fetcher = RetryingFetcher(ChunkClient(session))
            assembler = Assembler(fetcher)
            await assembler.download(metadata, Path("blob.bin"))
    """

    def __init__(
        self,
        fetcher,
        max_concurrent: int = MAX_CONCURRENT_CONN,
        max_chunk_size: int = MAX_CHUNK_SIZE,
    ):
        """
        Args:
            fetcher: RetryingFetcher shared by the tail walk and the body download
            max_concurrent: Body concurrency window
            max_chunk_size: Size of a full chunk
        """
        self.max_chunk_size = max_chunk_size
        self.tail_walker = TailWalker(fetcher, max_chunk_size=max_chunk_size)
        self.body_scheduler = BodyScheduler(
            fetcher,
            max_concurrent=max_concurrent,
            max_chunk_size=max_chunk_size,
        )

    async def assemble(
        self,
        metadata: BlobMetadata,
        sink,
        progress: Optional[Callable[[int], None]] = None,
    ) -> int:
        """
        Write the whole blob to sink in ascending byte order.

        Args:
            metadata: Blob location
            sink: Binary writable object
            progress: Optional callback with the cumulative bytes written

        Returns:
            Number of bytes written

        Raises:
            SizeIsZeroError, SizeTooBigError: Metadata rejected
            ChunkSizingError: Chunk boundaries disagree with the declared size
            ChunkFetchError: A chunk failed after all retries
            FileWriteError: The sink rejected a write
        """
        validate_metadata(metadata)

        tail = await self.tail_walker.walk_tail(metadata)
        new_offset = metadata.end_offset - tail.total_bytes
        new_size = metadata.size - tail.total_bytes
        if new_size % self.max_chunk_size != 0:
            raise ChunkSizingError(
                f"{new_size} bytes remain after a {tail.total_bytes} byte tail, "
                f"not a multiple of {self.max_chunk_size}"
            )
        logger.info(
            f"Received {len(tail.chunks)} end chunk(s) ({tail.total_bytes} bytes). "
            f"Downloading {new_size} remaining bytes concurrently."
        )

        # address of the first body chunk's last byte
        start_offset = new_offset - new_size + self.max_chunk_size
        await self.body_scheduler.download_body(start_offset, new_size, sink, progress=progress)

        written = new_size
        for chunk in tail.ascending():
            try:
                sink.write(chunk)
            except OSError as e:
                raise FileWriteError(str(e)) from e
            written += len(chunk)
            logger.debug(f"Wrote {len(chunk)} bytes (end chunk)")
            if progress is not None:
                progress(written)

        logger.info(f"Finished writing {written} bytes")
        return written

    async def download(
        self,
        metadata: BlobMetadata,
        output_path: Union[str, Path],
        progress: Optional[Callable[[int], None]] = None,
    ) -> int:
        """
        Download the blob into a file, creating or truncating it.

        The file is only opened once the metadata has been accepted. On failure
        the partially written file is left in place.

        Args:
            metadata: Blob location
            output_path: Destination file
            progress: Optional callback with the cumulative bytes written

        Returns:
            Number of bytes written
        """
        validate_metadata(metadata)
        output_path = Path(output_path)

        try:
            outfile = open(output_path, 'wb')
        except OSError as e:
            raise FileWriteError(str(e)) from e

        try:
            with outfile:
                return await self.assemble(metadata, outfile, progress=progress)
        except OSError as e:
            logger.warning(f"Download aborted; partial output left at {output_path}")
            raise FileWriteError(str(e)) from e
        except BaseException:
            logger.warning(f"Download aborted; partial output left at {output_path}")
            raise
