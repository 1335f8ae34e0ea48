"""Resolves a transaction id to the blob's weave location."""

from urllib.parse import quote

import httpx
from pydantic import ValidationError

from common.constants import TX_OFFSET_ENDPOINT
from common.exceptions import (
    BadResponseError,
    NodeNotReadyError,
    NotFoundError,
    RequestFailureError,
    UnknownStatusCodeError,
)
from common.logging_config import get_logger
from common.types import BlobMetadata
from downloader.schemas import TxOffsetResponse

logger = get_logger(__name__)


def _parse_unsigned(value: str, field: str) -> int:
    if not (value.isascii() and value.isdigit()):
        raise BadResponseError(f"Gateway returned incorrect JSON ({field}={value!r}).")
    return int(value)


class MetadataClient:
    """Looks up (end_offset, size) for a transaction. Not retried."""

    def __init__(self, session: httpx.AsyncClient):
        self.session = session

    async def get_blob_metadata(self, tx_id: str) -> BlobMetadata:
        """
        Fetch offset metadata for a transaction.

        Args:
            tx_id: Transaction identifier

        Returns:
            BlobMetadata with end offset and size

        Raises:
            NotFoundError: 404
            NodeNotReadyError: 503, the node is still indexing
            UnknownStatusCodeError: Any other non-200 status
            BadResponseError: Invalid JSON or non-numeric values
            RequestFailureError: Transport failure
        """
        url = TX_OFFSET_ENDPOINT.format(tx_id=quote(tx_id, safe=''))
        logger.debug(f"Requesting transaction metadata: {url}")
        try:
            response = await self.session.get(url)
        except httpx.HTTPError as e:
            raise RequestFailureError(f"{type(e).__name__}: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Transaction {tx_id} not found")
        if response.status_code == 503:
            raise NodeNotReadyError(f"Transaction {tx_id} not yet indexed")
        if response.status_code != 200:
            raise UnknownStatusCodeError(response.status_code)

        try:
            document = TxOffsetResponse.model_validate_json(response.content)
        except ValidationError:
            raise BadResponseError("Gateway returned invalid JSON.")

        metadata = BlobMetadata(
            end_offset=_parse_unsigned(document.offset, 'offset'),
            size=_parse_unsigned(document.size, 'size'),
        )
        logger.debug(f"Transaction {tx_id}: end_offset={metadata.end_offset} size={metadata.size}")
        return metadata
