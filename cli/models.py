"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class DownloadCommand:
    """Download a transaction's data to a file."""

    transaction: str
    output: str
    config_path: Optional[str] = None
    gateway_url: Optional[str] = None
    debug: bool = False
    command: Literal["download"] = "download"
