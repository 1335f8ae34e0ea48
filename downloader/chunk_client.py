"""Single-attempt chunk fetch against the gateway."""

import base64
import binascii

import httpx
from pydantic import ValidationError

from common.constants import CHUNK_ENDPOINT, MAX_CHUNK_SIZE
from common.exceptions import (
    BadResponseError,
    RequestFailureError,
    UnknownStatusCodeError,
)
from common.logging_config import get_logger
from downloader.schemas import ChunkResponse

logger = get_logger(__name__)


def decode_chunk(encoded: str) -> bytes:
    """
    Decode URL-safe base64 without padding.

    Only the base64url alphabet is accepted; standard-alphabet characters and
    padding are rejected.

    Raises:
        BadResponseError: If the text is not valid base64url
    """
    if any(c in encoded for c in '+/='):
        raise BadResponseError("Gateway returned invalid Base64.")
    padded = encoded + '=' * (-len(encoded) % 4)
    try:
        return base64.b64decode(padded.encode('ascii'), altchars=b'-_', validate=True)
    except (binascii.Error, ValueError, UnicodeEncodeError):
        raise BadResponseError("Gateway returned invalid Base64.")


class ChunkClient:
    """
    Fetches one chunk by its end-anchored offset.

    No retry happens here; see RetryingFetcher.
    """

    def __init__(self, session: httpx.AsyncClient):
        """
        Initialize chunk client.

        Args:
            session: Gateway session from create_session()
        """
        self.session = session

    async def fetch(self, offset: int) -> bytes:
        """
        Fetch the chunk whose last byte sits at the given weave offset.

        Args:
            offset: Weave offset of the chunk's last byte

        Returns:
            Decoded chunk bytes (1..MAX_CHUNK_SIZE long)

        Raises:
            RequestFailureError: Transport failure
            UnknownStatusCodeError: Any status other than 200
            BadResponseError: Body is not a valid chunk document
        """
        url = CHUNK_ENDPOINT.format(offset=offset)
        try:
            response = await self.session.get(url)
        except httpx.HTTPError as e:
            raise RequestFailureError(f"{type(e).__name__}: {e}") from e

        if response.status_code != 200:
            raise UnknownStatusCodeError(response.status_code)

        try:
            document = ChunkResponse.model_validate_json(response.content)
        except ValidationError:
            raise BadResponseError("Gateway returned invalid JSON or the wrong data.")

        data = decode_chunk(document.chunk)
        if not 0 < len(data) <= MAX_CHUNK_SIZE:
            raise BadResponseError(f"Gateway returned a chunk of {len(data)} bytes.")

        logger.debug(f"Received chunk at offset {offset} ({len(data)} bytes)")
        return data
