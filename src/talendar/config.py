"""Configuration management for talendar."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from platformdirs import user_config_dir, user_data_dir

logger = logging.getLogger(__name__)

APP_NAME = "talendar"

_home = os.environ.get("TALENDAR_HOME")
CONFIG_DIR = Path(_home) if _home else Path(user_config_dir(APP_NAME))
DATA_DIR = Path(_home) / "data" if _home else Path(user_data_dir(APP_NAME))
CONFIG_FILE = CONFIG_DIR / "talendar.conf"
DEFAULT_CACHE_FILE = DATA_DIR / "cache.json"


@dataclass
class Config:
    """talendar configuration."""

    # IANA zone name; empty means the system local zone
    timezone: str = ""
    client_secret_file: str = ""
    request_timeout: float = 30.0
    cache_file: str = ""

    def zoneinfo(self) -> ZoneInfo | None:
        """The configured zone, or None for the system zone."""
        if not self.timezone:
            return None
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using system zone")
            return None


def _unquote(value: str) -> str:
    """Strip surrounding quotes, or an inline comment from unquoted values."""
    if value[:1] in ('"', "'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def load_config(path: Path | None = None) -> Config:
    """Load configuration from a KEY=value talendar.conf file."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "client_secret_file":
                config.client_secret_file = value
            case "request_timeout":
                try:
                    config.request_timeout = float(value)
                except ValueError:
                    logger.warning(f"Invalid REQUEST_TIMEOUT {value!r}, keeping {config.request_timeout}")
            case "cache_file":
                config.cache_file = value
            case _:
                logger.debug(f"Ignoring unknown config key {key!r}")

    return config


def resolve_cache_path(config: Config) -> Path:
    """Cache file location, with its parent directory created."""
    path = Path(config.cache_file).expanduser() if config.cache_file else DEFAULT_CACHE_FILE
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
