"""HTTP session factory for the gateway."""

from typing import Optional

import httpx

from common.constants import (
    DEFAULT_GATEWAY_URL,
    MAX_CONCURRENT_CONN,
    REQUEST_TIMEOUT_SECONDS,
)
from common.logging_config import get_logger

logger = get_logger(__name__)


def create_session(
    base_url: str = DEFAULT_GATEWAY_URL,
    timeout: float = REQUEST_TIMEOUT_SECONDS,
    max_connections: int = MAX_CONCURRENT_CONN,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create an async HTTP client bound to the gateway.

    Args:
        base_url: Gateway root URL (e.g., "https://arweave.net")
        timeout: Per-request timeout in seconds
        max_connections: Pool size; should not be smaller than the scheduler window
        transport: Optional transport override (tests use httpx.MockTransport)

    Returns:
        httpx.AsyncClient; the caller owns it and must close it
    """
    limits = httpx.Limits(
        max_connections=max_connections,
        max_keepalive_connections=max_connections,
    )
    logger.debug(f"Creating gateway session [base_url={base_url}, max_connections={max_connections}]")
    return httpx.AsyncClient(
        base_url=base_url.rstrip('/'),
        timeout=timeout,
        limits=limits,
        transport=transport,
    )
