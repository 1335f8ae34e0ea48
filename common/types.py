"""Shared data type definitions (BlobMetadata, TailResult, ChunkState)."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Tuple


@dataclass(frozen=True)
class BlobMetadata:
    """
    Location of a blob in the weave.

    end_offset is the weave offset of the blob's last byte. Chunks are
    addressed by their last byte, so this is also the address of the final
    chunk.
    """
    end_offset: int
    size: int


@dataclass(frozen=True)
class TailResult:
    """
    Chunks discovered by walking backward from the end of a blob.

    chunks are kept in fetch order, which is descending offset order.
    """
    chunks: Tuple[bytes, ...]
    total_bytes: int

    def ascending(self) -> Iterator[bytes]:
        """Yield the tail chunks in file order."""
        return reversed(self.chunks)


class ChunkState(Enum):
    """Lifecycle of one body chunk inside the scheduler window."""
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    FETCHED = "fetched"
    FLUSHED = "flushed"
