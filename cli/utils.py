"""Utility functions for CLI operations."""

import sys
from typing import TextIO

from cli.constants import GREEN, RESET


class DownloadProgress:
    """Progress callback that redraws one status line on a terminal stream."""

    def __init__(self, label: str, total_size: int, stream: TextIO = None):
        """
        Initialize the progress display.

        Args:
            label: Display name for the download (usually the output file)
            total_size: Total size of the blob in bytes
            stream: Output stream (defaults to stdout)
        """
        self.label = label
        self.total_size = total_size
        self.stream = stream if stream is not None else sys.stdout
        self._written = 0
        self._finished = False

    def __call__(self, written: int) -> None:
        """Record the cumulative number of bytes written and redraw."""
        self._written = written
        if self.total_size > 0:
            progress = (written / self.total_size) * 100
            self.stream.write(
                f"\rDownloading {self.label}: {format_file_size(written)} / "
                f"{format_file_size(self.total_size)} ({GREEN}{progress:.1f}%{RESET})"
            )
        else:
            self.stream.write(f"\rDownloading {self.label}: {format_file_size(written)}")
        self.stream.flush()

    def finish(self) -> None:
        """Terminate the progress line."""
        if not self._finished and self._written:
            self.stream.write('\n')
            self.stream.flush()
        self._finished = True


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"
