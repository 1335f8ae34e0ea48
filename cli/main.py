"""CLI entry point."""

import asyncio
import sys
from typing import Optional

from cli.commands import format_error, handle_download
from cli.config import DEFAULT_CONFIG_PATH, Config
from cli.constants import HELP_TEXT
from cli.parser import parse_args
from common.exceptions import WeaveFetchError
from common.logging_config import set_correlation_id, setup_logging


def main(argv: Optional[list[str]] = None) -> int:
    """Entry point for CLI."""
    if argv is None:
        argv = sys.argv[1:]

    if '--help' in argv or '-h' in argv:
        print(HELP_TEXT)
        return 0

    log_level = 'DEBUG' if '--debug' in argv else None
    logger = setup_logging('cli', log_level=log_level)

    try:
        cmd = parse_args(argv)
    except WeaveFetchError as e:
        print(format_error(e), file=sys.stderr)
        return 1

    if cmd.debug:
        logger.info("Debug logging enabled")
    set_correlation_id(cmd.transaction)

    config = Config(cmd.config_path or DEFAULT_CONFIG_PATH)

    try:
        message = asyncio.run(handle_download(cmd, config))
    except WeaveFetchError as e:
        logger.debug(f"Download failed: {e!r}")
        print(format_error(e), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

    print(message)
    return 0


if __name__ == "__main__":
    sys.exit(main())
