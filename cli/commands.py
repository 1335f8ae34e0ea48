"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

import httpx

from cli.config import Config
from cli.constants import USAGE
from cli.models import DownloadCommand
from cli.utils import DownloadProgress, format_file_size
from common.exceptions import (
    BadResponseError,
    ChunkSizingError,
    ConfigurationError,
    FileWriteError,
    InvalidArgumentsError,
    NodeNotReadyError,
    NotFoundError,
    RequestFailureError,
    SizeIsZeroError,
    SizeTooBigError,
    UnknownStatusCodeError,
    WeaveFetchError,
)
from common.logging_config import get_logger
from downloader import (
    Assembler,
    ChunkClient,
    MetadataClient,
    RetryingFetcher,
    create_session,
)

logger = get_logger(__name__)


def format_error(error: WeaveFetchError) -> str:
    """
    Map a download error to the message shown to the user.

    Args:
        error: Any WeaveFetchError

    Returns:
        User-friendly error message
    """
    if isinstance(error, InvalidArgumentsError):
        return f"Failed to recognise arguments!\n{USAGE}"
    if isinstance(error, RequestFailureError):
        return "Request failed. Please try again."
    if isinstance(error, NotFoundError):
        return "The requested transaction or chunk could not be found."
    if isinstance(error, NodeNotReadyError):
        return "The node has not yet processed this transaction."
    if isinstance(error, UnknownStatusCodeError):
        return f"The gateway returned an unrecognised status code: {error.status_code}"
    if isinstance(error, BadResponseError):
        return f"The gateway returned an invalid response. Please retry. Msg: {error.detail}"
    if isinstance(error, SizeTooBigError):
        return "The transaction is too big for this platform."
    if isinstance(error, SizeIsZeroError):
        return "The transaction is empty."
    if isinstance(error, FileWriteError):
        return f"An error occurred while opening or writing to the file: {error.detail}"
    if isinstance(error, ChunkSizingError):
        return "The gateway returned a chunk that was incorrectly sized."
    if isinstance(error, ConfigurationError):
        return f"Invalid configuration: {error}"
    return f"Unexpected error: {error}"


async def handle_download(
    cmd: DownloadCommand,
    config: Config,
    session: Optional[httpx.AsyncClient] = None,
    show_progress: bool = True,
) -> str:
    """
    Handle the download command.

    Args:
        cmd: DownloadCommand with transaction id and output path
        config: Configuration instance
        session: Optional gateway session for dependency injection (testing)
        show_progress: Redraw a progress line on stdout while writing

    Returns:
        Success message

    Raises:
        WeaveFetchError: Any classified download failure
    """
    config.validate(gateway_url=cmd.gateway_url)

    owns_session = session is None
    if owns_session:
        session = create_session(
            base_url=cmd.gateway_url or config.get_base_url(),
            timeout=config.get_timeout(),
            max_connections=config.get_max_concurrency(),
        )

    try:
        logger.info(f"Attempting to receive transaction data for {cmd.transaction}")
        metadata = await MetadataClient(session).get_blob_metadata(cmd.transaction)
        logger.info(f"Got transaction data ({format_file_size(metadata.size)}). Starting download.")

        retry_config = config.get_retry_config()
        fetcher = RetryingFetcher(
            ChunkClient(session),
            retry_count=retry_config['retry_count'],
            retry_delay=retry_config['retry_delay'],
        )
        assembler = Assembler(fetcher, max_concurrent=config.get_max_concurrency())

        output_path = Path(cmd.output)
        progress = DownloadProgress(output_path.name, metadata.size) if show_progress else None
        try:
            written = await assembler.download(metadata, output_path, progress=progress)
        finally:
            if progress is not None:
                progress.finish()

        logger.info("Download complete")
        return f"Downloaded: {cmd.transaction} ({format_file_size(written)})\nSaved to: {output_path.absolute()}"
    finally:
        if owns_session:
            await session.aclose()
