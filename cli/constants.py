"""CLI constants and user-facing text."""

GREEN = "\033[32m"
RESET = "\033[0m"

USAGE = "Correct usage: --transaction <tx id> --output <output file name>"

HELP_TEXT = f"""weavefetch - download transaction data from an Arweave gateway

{USAGE}

Options:
  --transaction <id>    Transaction whose data to download (required)
  --output <path>       File to create or overwrite (required)
  --gateway <url>       Gateway to use for this run
  --config <path>       Config file (default: ~/.weavefetch/config.json)
  --debug               Enable debug logging
  --help                Show this help"""
