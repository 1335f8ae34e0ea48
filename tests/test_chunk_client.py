"""Unit tests for ChunkClient."""

from contextlib import asynccontextmanager

import httpx
import pytest

from common.constants import MAX_CHUNK_SIZE
from common.exceptions import (
    BadResponseError,
    RequestFailureError,
    UnknownStatusCodeError,
)
from downloader.chunk_client import ChunkClient, decode_chunk
from downloader.gateway import create_session
from conftest import GATEWAY_URL, encode_chunk


@asynccontextmanager
async def client_for(handler):
    async with create_session(base_url=GATEWAY_URL, transport=httpx.MockTransport(handler)) as session:
        yield ChunkClient(session)


@pytest.mark.asyncio
async def test_fetch_decodes_chunk_and_uses_offset_in_path():
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(200, json={'chunk': encode_chunk(b'hello world'), 'data_path': 'x'})

    async with client_for(handler) as client:
        data = await client.fetch(123456789012345678901234567890)

    assert data == b'hello world'
    assert seen == ['/chunk/123456789012345678901234567890']


@pytest.mark.asyncio
async def test_fetch_non_ok_status_is_unknown_status_code():
    async with client_for(lambda request: httpx.Response(500)) as client:
        with pytest.raises(UnknownStatusCodeError) as exc_info:
            await client.fetch(10)

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_fetch_not_found_is_classified_by_code():
    async with client_for(lambda request: httpx.Response(404)) as client:
        with pytest.raises(UnknownStatusCodeError) as exc_info:
            await client.fetch(10)

    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_fetch_transport_failure_is_request_failure():
    def handler(request):
        raise httpx.ConnectError('connection refused', request=request)

    async with client_for(handler) as client:
        with pytest.raises(RequestFailureError):
            await client.fetch(10)


@pytest.mark.asyncio
@pytest.mark.parametrize('body', [
    b'not json at all',
    b'{"data": "aGVsbG8"}',
    b'{"chunk": 42}',
    b'[]',
])
async def test_fetch_malformed_body_is_bad_response(body):
    async with client_for(lambda request: httpx.Response(200, content=body)) as client:
        with pytest.raises(BadResponseError):
            await client.fetch(10)


@pytest.mark.asyncio
async def test_fetch_invalid_base64_is_bad_response():
    async with client_for(lambda request: httpx.Response(200, json={'chunk': 'not*base64!'})) as client:
        with pytest.raises(BadResponseError) as exc_info:
            await client.fetch(10)

    assert 'Base64' in exc_info.value.detail


@pytest.mark.asyncio
async def test_fetch_rejects_empty_chunk():
    async with client_for(lambda request: httpx.Response(200, json={'chunk': ''})) as client:
        with pytest.raises(BadResponseError):
            await client.fetch(10)


@pytest.mark.asyncio
async def test_fetch_rejects_oversized_chunk():
    payload = encode_chunk(b'\x01' * (MAX_CHUNK_SIZE + 1))

    async with client_for(lambda request: httpx.Response(200, json={'chunk': payload})) as client:
        with pytest.raises(BadResponseError):
            await client.fetch(10)


def test_decode_chunk_handles_missing_padding_and_url_alphabet():
    raw = bytes([0xfb, 0xff, 0xfe, 0x00, 0x01])
    encoded = encode_chunk(raw)

    assert '=' not in encoded
    assert '-' in encoded or '_' in encoded
    assert decode_chunk(encoded) == raw


def test_decode_chunk_rejects_impossible_length():
    with pytest.raises(BadResponseError):
        decode_chunk('abcde')


@pytest.mark.parametrize('encoded', [
    # standard-alphabet encoding of b'\xfb\xff\xfe'
    '+//+',
    'ab+c',
    'ab/c',
    # explicit padding
    'aGk=',
    'aA==',
])
def test_decode_chunk_rejects_standard_alphabet_and_padding(encoded):
    with pytest.raises(BadResponseError):
        decode_chunk(encoded)
