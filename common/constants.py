"""Project-wide constants (chunk size, concurrency window, retry policy)."""

MAX_CHUNK_SIZE: int = 256 * 1024  # 256 KiB, largest chunk the gateway serves

MAX_CONCURRENT_CONN: int = 32

RETRY_COUNT: int = 3  # total attempts per chunk, not extra retries
RETRY_DELAY_SECONDS: float = 10

DEFAULT_GATEWAY_URL: str = "https://arweave.net"
REQUEST_TIMEOUT_SECONDS: float = 30

CHUNK_ENDPOINT = "/chunk/{offset}"
TX_OFFSET_ENDPOINT = "/tx/{tx_id}/offset"
