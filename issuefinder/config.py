"""Configuration management for issuefinder."""

from dataclasses import dataclass, fields
from issuefinder import busy, fetch, policy
from pathlib import Path

import toml

CONFIG_FILE_PATH = Path.home() / ".issuefinder.toml"


@dataclass
class Settings:
    """Catalog settings."""

    page_size: int = policy.PAGE_SIZE
    step: int = fetch.STEP
    min_cap: int = fetch.MIN_CAP
    max_items: int = fetch.MAX_ITEMS
    busy_delay: float = busy.DELAY
    database_path: str | None = None

    def __post_init__(self):
        """Validate settings after initialization."""
        self._validate()

    def _validate(self):
        """Validate settings."""
        for name in ("page_size", "step", "min_cap", "max_items"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ValueError(f"Invalid {name} {value!r}: must be a positive integer")
        if not isinstance(self.busy_delay, int | float) or self.busy_delay < 0:
            raise ValueError(f"Invalid busy_delay {self.busy_delay!r}: must be non-negative")


def load_config(config_file_path: str | None = None) -> Settings:
    """Load settings from file."""
    if config_file_path:
        config_path = Path(config_file_path)
    else:
        config_path = CONFIG_FILE_PATH

    if not config_path.exists():
        return Settings()

    try:
        with open(config_path, "r") as f:
            config_data = toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        raise ValueError(f"Error loading config file {config_path}: {e}") from e

    # Extract only the fields that belong to Settings
    valid_fields = {field.name for field in fields(Settings)}
    filtered_config = {key: value for key, value in config_data.items() if key in valid_fields}

    try:
        return Settings(**filtered_config)
    except ValueError as e:
        raise ValueError(f"Error loading config file {config_path}: {e}") from e


def merge_config(settings: Settings, **overrides) -> Settings:
    """Merge settings with overrides, giving priority to overrides that are not None."""
    merged = {field.name: getattr(settings, field.name) for field in fields(Settings)}

    for key, value in overrides.items():
        if key not in merged:
            raise ValueError(f"Unknown setting: {key}")
        if value is not None:
            merged[key] = value

    return Settings(**merged)
