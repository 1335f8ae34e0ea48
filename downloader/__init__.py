"""
Chunk retrieval engine.

Exports the components used to download a blob from the gateway.
"""

from downloader.assembler import Assembler
from downloader.body_scheduler import BodyScheduler, ChunkWindow
from downloader.chunk_client import ChunkClient
from downloader.gateway import create_session
from downloader.metadata_client import MetadataClient
from downloader.retry import RetryingFetcher
from downloader.tail_walker import TailWalker

__all__ = [
    "Assembler",
    "BodyScheduler",
    "ChunkWindow",
    "ChunkClient",
    "create_session",
    "MetadataClient",
    "RetryingFetcher",
    "TailWalker",
]
