"""Settings for linkstash, loaded from config.yaml."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

# Default paths
DEFAULT_BASE_PATH = Path.home() / ".linkstash"
DEFAULT_CONFIG_PATH = DEFAULT_BASE_PATH / "config.yaml"
DEFAULT_DATA_FILE = DEFAULT_BASE_PATH / "articles.json"

# Environment overrides
ENV_CONFIG = "LINKSTASH_CONFIG"
ENV_DATA_FILE = "LINKSTASH_DATA_FILE"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when the configuration file is invalid"""
    pass


@dataclass
class BackupSettings:
    """Backup behaviour before a migration rewrites the document."""
    enabled: bool = True
    dir: Optional[Path] = None
    keep: int = 5


@dataclass
class Settings:
    """Resolved linkstash settings."""
    data_file: Path = DEFAULT_DATA_FILE
    backup: BackupSettings = field(default_factory=BackupSettings)
    log_level: str = "WARNING"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        """
        Build settings from a parsed config mapping.

        Raises:
            ConfigError: If a value has the wrong type
        """
        if not isinstance(data, dict):
            raise ConfigError(f"Config must be a mapping, got {type(data).__name__}")

        settings = cls()

        if data.get("data_file") is not None:
            settings.data_file = _path(data["data_file"], "data_file")

        backup = data.get("backup")
        if backup is not None:
            if not isinstance(backup, dict):
                raise ConfigError("backup must be a mapping")
            if "enabled" in backup:
                if not isinstance(backup["enabled"], bool):
                    raise ConfigError("backup.enabled must be true or false")
                settings.backup.enabled = backup["enabled"]
            if backup.get("dir") is not None:
                settings.backup.dir = _path(backup["dir"], "backup.dir")
            if "keep" in backup:
                keep = backup["keep"]
                if not isinstance(keep, int) or isinstance(keep, bool) or keep < 1:
                    raise ConfigError(f"backup.keep must be an integer >= 1, got {keep!r}")
                settings.backup.keep = keep

        if data.get("log_level") is not None:
            level = str(data["log_level"]).upper()
            if level not in LOG_LEVELS:
                raise ConfigError(
                    f"log_level must be one of {', '.join(LOG_LEVELS)}, got {data['log_level']!r}"
                )
            settings.log_level = level

        return settings


def _path(value: Any, key: str) -> Path:
    if not isinstance(value, str) or not value:
        raise ConfigError(f"{key} must be a non-empty path string")
    return Path(value).expanduser()


def get_config_path(cli_config: Optional[Union[str, Path]] = None) -> Path:
    """Get the config file location.

    Priority: --config flag > LINKSTASH_CONFIG env var > default path.
    """
    if cli_config:
        return Path(cli_config).expanduser()
    env_path = os.getenv(ENV_CONFIG)
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_PATH


def load_settings(config_path: Optional[Union[str, Path]] = None,
                  data_file: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from YAML and apply overrides.

    Priority for the data file: `data_file` argument > LINKSTASH_DATA_FILE
    env var > config file > default. A missing config file means defaults.

    Raises:
        ConfigError: If the config file cannot be parsed or is invalid
    """
    path = get_config_path(config_path)

    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Cannot parse {path}: {e}") from e
        settings = Settings.from_dict(data)
    else:
        settings = Settings()

    env_data_file = os.getenv(ENV_DATA_FILE)
    if data_file:
        settings.data_file = Path(data_file).expanduser()
    elif env_data_file:
        settings.data_file = Path(env_data_file).expanduser()

    return settings
