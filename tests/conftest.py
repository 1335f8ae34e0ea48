"""Shared pytest fixtures for all tests."""

import asyncio
import base64
import random

import httpx
import pytest

from cli.config import Config
from common.constants import MAX_CHUNK_SIZE
from downloader.gateway import create_session

KIB = 1024
GATEWAY_URL = 'http://gateway.test'


def make_blob(size: int, seed: int = 0) -> bytes:
    """Deterministic pseudo-random blob of the given size."""
    return random.Random(seed).randbytes(size)


def encode_chunk(data: bytes) -> str:
    """URL-safe base64 without padding, as the gateway sends it."""
    return base64.urlsafe_b64encode(data).rstrip(b'=').decode('ascii')


class FakeGateway:
    """
    In-memory gateway serving one blob through httpx.MockTransport.

    Chunks are addressed by the weave offset of their last byte. By default the
    blob is split into full chunks with the remainder as the final (highest
    offset) chunk.
    """

    def __init__(
        self,
        data: bytes,
        chunk_sizes: list = None,
        base_offset: int = 10_000_000,
        tx_id: str = 'tx-abc',
    ):
        self.data = data
        self.tx_id = tx_id
        self.base_offset = base_offset
        self.end_offset = base_offset + len(data) - 1

        if chunk_sizes is None:
            chunk_sizes = [MAX_CHUNK_SIZE] * (len(data) // MAX_CHUNK_SIZE)
            if len(data) % MAX_CHUNK_SIZE:
                chunk_sizes.append(len(data) % MAX_CHUNK_SIZE)
        assert sum(chunk_sizes) == len(data)

        # (first weave offset, last weave offset, bytes)
        self.chunks = []
        start = 0
        for size in chunk_sizes:
            self.chunks.append((base_offset + start, base_offset + start + size - 1, data[start:start + size]))
            start += size

        self.tx_status = 200
        self.tx_body = None
        self.failures = {}
        self.failure_mode = 'status'
        self.delays = {}
        self.chunk_requests = []
        self.tx_requests = []
        self.in_flight = 0
        self.max_in_flight = 0

    def chunk_address(self, index: int) -> int:
        """Weave offset used to request chunk number index."""
        return self.chunks[index][1]

    def fail(self, index: int, times: int) -> None:
        self.failures[self.chunk_address(index)] = times

    def _lookup(self, offset: int):
        for first, last, chunk in self.chunks:
            if first <= offset <= last:
                return chunk
        return None

    async def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path.startswith('/tx/'):
            self.tx_requests.append(path)
            if self.tx_status != 200:
                return httpx.Response(self.tx_status)
            body = self.tx_body or {'offset': str(self.end_offset), 'size': str(len(self.data))}
            return httpx.Response(200, json=body)

        if path.startswith('/chunk/'):
            offset = int(path.rsplit('/', 1)[1])
            self.chunk_requests.append(offset)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
            try:
                await asyncio.sleep(self.delays.get(offset, 0))
                if self.failures.get(offset, 0) > 0:
                    self.failures[offset] -= 1
                    if self.failure_mode == 'connect':
                        raise httpx.ConnectError('connection refused', request=request)
                    return httpx.Response(500)
                chunk = self._lookup(offset)
                if chunk is None:
                    return httpx.Response(404)
                return httpx.Response(200, json={
                    'chunk': encode_chunk(chunk),
                    'data_path': '',
                    'tx_path': '',
                })
            finally:
                self.in_flight -= 1

        return httpx.Response(404)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def session(self) -> httpx.AsyncClient:
        """Fresh client over this gateway; use it with `async with`."""
        return create_session(base_url=GATEWAY_URL, transport=self.transport)


class RecordingFetcher:
    """
    Stand-in for RetryingFetcher that serves chunks from a dict.

    Records concurrency and lets tests pick per-offset delays and failures.
    """

    def __init__(self, chunks_by_offset: dict, delays: dict = None, failures: dict = None):
        self.chunks_by_offset = chunks_by_offset
        self.delays = delays or {}
        self.failures = failures or {}
        self.calls = []
        self.completed = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def fetch_with_retry(self, offset: int) -> bytes:
        self.calls.append(offset)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(offset, 0))
            if offset in self.failures:
                raise self.failures[offset]
            self.completed.append(offset)
            return self.chunks_by_offset[offset]
        finally:
            self.in_flight -= 1


class RecordingSink:
    """Binary sink that remembers each write separately."""

    def __init__(self):
        self.writes = []

    def write(self, data: bytes) -> int:
        self.writes.append(bytes(data))
        return len(data)

    def getvalue(self) -> bytes:
        return b''.join(self.writes)


@pytest.fixture
def temp_config_dir(tmp_path):
    """
    Create temporary config directory.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        Path to temporary .weavefetch directory
    """
    config_dir = tmp_path / '.weavefetch'
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def temp_config(temp_config_dir):
    """
    Create temporary config instance with no retry delay.

    Args:
        temp_config_dir: Temporary config directory fixture

    Returns:
        Config instance with temp config file
    """
    config = Config(temp_config_dir / 'config.json')
    config.data['retry_delay'] = 0
    config.data['gateway_url'] = GATEWAY_URL
    return config


@pytest.fixture
def recording_sink():
    return RecordingSink()
