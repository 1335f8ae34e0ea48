"""Command line parser."""

from typing import Optional

from cli.models import DownloadCommand
from common.exceptions import InvalidArgumentsError


class ParseError(InvalidArgumentsError):
    """Raised when command line parsing fails."""

    pass


VALUE_FLAGS = {
    "--transaction": "transaction",
    "--output": "output",
    "--config": "config_path",
    "--gateway": "gateway_url",
}


def parse_args(argv: list[str]) -> DownloadCommand:
    """Parse command line arguments into a DownloadCommand.

    Unknown --flags are ignored, as are bare words.

    Args:
        argv: Arguments without the program name

    Returns:
        DownloadCommand

    Raises:
        ParseError: If --transaction or --output is missing, or a flag has no value
    """
    values: dict[str, Optional[str]] = {}
    debug = False

    tokens = iter(argv)
    for token in tokens:
        if not token.startswith("--"):
            continue
        if token == "--debug":
            debug = True
        elif token in VALUE_FLAGS:
            value = next(tokens, None)
            if value is None:
                raise ParseError(f"{token} requires a value")
            values[VALUE_FLAGS[token]] = value

    if not values.get("transaction") or not values.get("output"):
        raise ParseError("--transaction and --output are required")

    return DownloadCommand(
        transaction=values["transaction"],
        output=values["output"],
        config_path=values.get("config_path"),
        gateway_url=values.get("gateway_url"),
        debug=debug,
    )
