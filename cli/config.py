"""Configuration management for the weavefetch CLI."""

import json
import os
import shutil
from pathlib import Path
from typing import Optional

from common.constants import (
    DEFAULT_GATEWAY_URL,
    MAX_CONCURRENT_CONN,
    REQUEST_TIMEOUT_SECONDS,
    RETRY_COUNT,
    RETRY_DELAY_SECONDS,
)
from common.exceptions import ConfigurationError
from common.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / '.weavefetch' / 'config.json'


class Config:
    """Manages CLI configuration stored in JSON file."""

    DEFAULT_CONFIG = {
        "gateway_url": os.environ.get("WEAVEFETCH_GATEWAY_URL", DEFAULT_GATEWAY_URL),
        "timeout": REQUEST_TIMEOUT_SECONDS,
        "max_concurrent_connections": MAX_CONCURRENT_CONN,
        "retry_count": RETRY_COUNT,
        "retry_delay": RETRY_DELAY_SECONDS,
    }

    def __init__(self, config_path: Path = DEFAULT_CONFIG_PATH):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to config JSON file (typically ~/.weavefetch/config.json)
        """
        self.config_path = Path(config_path)
        self.data = self._load()

    def _load(self) -> dict:
        """
        Load configuration from file, creating defaults if necessary.

        Returns:
            Configuration dictionary
        """
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError:
            import tempfile
            self.config_path = Path(tempfile.gettempdir()) / '.weavefetch' / 'config.json'
            self.config_path.parent.mkdir(parents=True, exist_ok=True)

        if self.config_path.exists():
            try:
                with open(self.config_path, 'r') as f:
                    data = json.load(f)
                if not isinstance(data, dict):
                    raise ValueError("config root must be an object")
                config = self.DEFAULT_CONFIG.copy()
                config.update(data)
                return config
            except (json.JSONDecodeError, ValueError, IOError) as e:
                backup_path = self.config_path.with_suffix('.json.bak')
                logger.warning(f"Ignoring unreadable config {self.config_path}: {e}")
                try:
                    shutil.copy(self.config_path, backup_path)
                except IOError:
                    logger.warning(f"Could not back up config to {backup_path}")
                return self.DEFAULT_CONFIG.copy()

        config = self.DEFAULT_CONFIG.copy()
        try:
            with open(self.config_path, 'w') as f:
                json.dump(config, f, indent=2)
        except IOError as e:
            logger.debug(f"Could not write default config: {e}")
        return config

    def get_base_url(self) -> str:
        """
        Get gateway base URL.

        Returns:
            Base URL string without trailing slash (e.g., "https://arweave.net")
        """
        return str(self.data.get('gateway_url', DEFAULT_GATEWAY_URL)).rstrip('/')

    def _get_number(self, key: str, default, minimum, integer: bool = False):
        """
        Read a numeric setting and check its lower bound.

        Raises:
            ConfigurationError: Value is not a number or is below minimum
        """
        value = self.data.get(key, default)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"'{key}' must be a number, got {value!r}")
        if integer and value != int(value):
            raise ConfigurationError(f"'{key}' must be a whole number, got {value!r}")
        if value < minimum:
            raise ConfigurationError(f"'{key}' must be at least {minimum}, got {value!r}")
        return int(value) if integer else value

    def get_timeout(self) -> float:
        """
        Get request timeout in seconds.

        Returns:
            Timeout value in seconds

        Raises:
            ConfigurationError: Timeout is not a positive number
        """
        timeout = self._get_number('timeout', REQUEST_TIMEOUT_SECONDS, minimum=0)
        if timeout == 0:
            raise ConfigurationError("'timeout' must be greater than 0")
        return timeout

    def get_max_concurrency(self) -> int:
        """Number of chunk fetches allowed in flight at once."""
        return self._get_number('max_concurrent_connections', MAX_CONCURRENT_CONN, minimum=1, integer=True)

    def get_retry_config(self) -> dict:
        """
        Get retry configuration.

        Returns:
            Dictionary with 'retry_count' (total attempts) and 'retry_delay' (seconds)
        """
        return {
            'retry_count': self._get_number('retry_count', RETRY_COUNT, minimum=1, integer=True),
            'retry_delay': self._get_number('retry_delay', RETRY_DELAY_SECONDS, minimum=0),
        }

    def validate(self, gateway_url: Optional[str] = None) -> None:
        """
        Check every setting a download uses, before any request is made.

        Args:
            gateway_url: Per-run gateway override; checked instead of the stored one

        Raises:
            ConfigurationError: First invalid setting found
        """
        url = gateway_url if gateway_url is not None else self.data.get('gateway_url')
        if not isinstance(url, str) or not url.startswith(('http://', 'https://')):
            raise ConfigurationError(f"'gateway_url' must be an http(s) URL, got {url!r}")
        self.get_timeout()
        self.get_max_concurrency()
        self.get_retry_config()
