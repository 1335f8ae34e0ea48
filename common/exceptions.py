"""Custom exception classes for blob downloads."""

from typing import Optional


class WeaveFetchError(Exception):
    """
    Base exception class for all download errors.
    """
    pass


class InvalidArgumentsError(WeaveFetchError):
    """
    Raised when the command line is missing a required argument.
    """
    pass


class ChunkFetchError(WeaveFetchError):
    """
    Base class for failures of a single gateway request.

    Every subclass is retried identically by RetryingFetcher.
    """
    pass


class RequestFailureError(ChunkFetchError):
    """
    Raised when the request could not be sent or no response was received.
    """

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(detail or "Request failed")


class UnknownStatusCodeError(ChunkFetchError):
    """
    Raised when the gateway answers with a status code we do not handle.
    """

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(f"Unexpected status code {status_code}")


class BadResponseError(ChunkFetchError):
    """
    Raised when the gateway body is unreadable, not the expected JSON,
    or carries data that does not decode.
    """

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class NotFoundError(WeaveFetchError):
    """
    Raised when the requested transaction does not exist.
    """
    pass


class NodeNotReadyError(WeaveFetchError):
    """
    Raised when the gateway has not finished indexing the transaction.
    """
    pass


class SizeTooBigError(WeaveFetchError):
    """
    Raised when the blob is larger than this platform can address.
    """
    pass


class SizeIsZeroError(WeaveFetchError):
    """
    Raised when the blob is empty.
    """
    pass


class FileWriteError(WeaveFetchError):
    """
    Raised when the output file cannot be opened or written.
    """

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(detail)


class ChunkSizingError(WeaveFetchError):
    """
    Raised when observed chunk boundaries disagree with the declared blob size.
    """
    pass


class ConfigurationError(WeaveFetchError):
    """
    Raised when a configuration value is missing, mistyped or out of range.
    """
    pass
