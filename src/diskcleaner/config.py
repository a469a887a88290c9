"""Configuration for diskcleaner.

Configuration is an explicit value handed to the engine. Nothing in the engine
reads process-wide defaults on its own.
"""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from diskcleaner.cache import CACHE_TTL
from diskcleaner.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path("~/.diskcleaner").expanduser()
CONFIG_FILE = CONFIG_DIR / "config.json"

DEFAULT_MIN_SIZE_BYTES = 50 * 1024 * 1024  # 50 MB
DEFAULT_MIN_AGE_DAYS = 30


class CleanerConfig(BaseModel):
    """Settings shared by the scan and apply entry points."""

    model_config = ConfigDict(extra="forbid")

    home: Path = Field(default_factory=Path.home, description="Home directory the engine is scoped to")
    trash_dir: Optional[Path] = Field(None, description="Trash holding area (default ~/.Trash)")
    log_path: Optional[Path] = Field(
        None, description="Log file (default ~/Library/Logs/disk_cleaner.log)"
    )
    cache_ttl_seconds: float = Field(CACHE_TTL, ge=0)
    default_min_size_bytes: int = Field(DEFAULT_MIN_SIZE_BYTES, ge=0)
    default_min_age_days: float = Field(DEFAULT_MIN_AGE_DAYS, ge=0)

    @property
    def trash_root(self) -> Path:
        """Effective trash directory."""
        return self.trash_dir if self.trash_dir is not None else self.home / ".Trash"

    @property
    def log_file(self) -> Path:
        """Effective log file path."""
        if self.log_path is not None:
            return self.log_path
        return self.home / "Library" / "Logs" / "disk_cleaner.log"


def load_config(path: Path | None = None) -> CleanerConfig:
    """
    Load configuration from a JSON file.

    Args:
        path: Config file to read (default ~/.diskcleaner/config.json)

    Returns:
        CleanerConfig; defaults when the file does not exist

    Raises:
        ConfigurationError: If the file cannot be read or does not validate.
    """
    config_file = path if path is not None else CONFIG_FILE
    if not config_file.exists():
        return CleanerConfig()

    try:
        with open(config_file) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise ConfigurationError(f"Cannot read config {config_file}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {config_file} must contain a JSON object")

    for key in ("home", "trash_dir", "log_path"):
        if isinstance(data.get(key), str):
            data[key] = str(Path(data[key]).expanduser())

    try:
        config = CleanerConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid config {config_file}: {e}") from e

    logger.debug("Loaded config from %s", config_file)
    return config
