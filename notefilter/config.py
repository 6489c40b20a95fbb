"""
Configuration management for notefilter.

Provides a hierarchical configuration system with sensible defaults.
Supports both global (~/.config/notefilter/config.toml) and local
(notefilter.toml) configurations.
"""
import os
import tomli
import tomli_w
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict

from notefilter.query.dates import (
    DateField, DayOrder, day_first, locale_day_order, month_first,
)


DATE_ORDERS = ("auto", "dmy", "mdy")
OUTPUT_FORMATS = ("table", "json", "plain")


@dataclass
class FilterConfig:
    """
    notefilter configuration with sensible defaults.

    Configuration hierarchy (highest to lowest priority):
    1. Command-line arguments
    2. Environment variables (NOTEFILTER_*)
    3. Explicit config file (--config)
    4. Local config file (./notefilter.toml or ./.notefilterrc)
    5. User config file (~/.config/notefilter/config.toml)
    6. System defaults
    """

    # Query settings
    default_date_field: str = field(default="modified")  # modified, created
    date_order: str = field(default="auto")  # auto, dmy, mdy
    locale: str = field(default="en_GB")  # used when date_order is auto

    # Display settings
    output_format: str = field(default="table")  # table, json, plain
    color_output: bool = field(default=True)

    # Advanced
    log_level: str = field(default="WARNING")

    @classmethod
    def load(cls, config_file: Optional[Path] = None) -> "FilterConfig":
        """
        Load configuration from files and environment.

        Args:
            config_file: Specific config file to load (overrides search)

        Returns:
            Merged configuration object
        """
        config = cls()

        user_config_path = Path.home() / ".config" / "notefilter" / "config.toml"
        if user_config_path.exists():
            config._merge(cls._load_toml(user_config_path))

        local_paths = [
            Path.cwd() / "notefilter.toml",
            Path.cwd() / ".notefilterrc",
        ]

        for path in local_paths:
            if path.exists():
                config._merge(cls._load_toml(path))
                break

        if config_file and config_file.exists():
            config._merge(cls._load_toml(config_file))

        config._apply_env_vars()

        return config

    @staticmethod
    def _load_toml(path: Path) -> Dict[str, Any]:
        """Load TOML configuration file."""
        with open(path, "rb") as f:
            return tomli.load(f)

    def _merge(self, data: Dict[str, Any]):
        """Merge configuration data into this instance."""
        for key, value in data.items():
            if hasattr(self, key):
                setattr(self, key, value)

    def _apply_env_vars(self):
        """Apply environment variables with NOTEFILTER_ prefix."""
        prefix = "NOTEFILTER_"
        for key, value in os.environ.items():
            if key.startswith(prefix):
                config_key = key[len(prefix):].lower()
                if hasattr(self, config_key):
                    current_value = getattr(self, config_key)
                    if isinstance(current_value, bool):
                        setattr(self, config_key, value.lower() in ("true", "1", "yes"))
                    else:
                        setattr(self, config_key, value)

    def save(self, path: Optional[Path] = None):
        """
        Save current configuration to TOML file.

        Args:
            path: Path to save to (defaults to user config)
        """
        if path is None:
            path = Path.home() / ".config" / "notefilter" / "config.toml"

        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "wb") as f:
            tomli_w.dump(asdict(self), f)

    def date_field(self) -> DateField:
        """Get the field used by '@' filters without a 'c:'/'m:' prefix."""
        return DateField.from_string(self.default_date_field)

    def day_order(self) -> DayOrder:
        """
        Get the strategy for ambiguous numeric dates.

        Returns:
            day_first for 'dmy', month_first for 'mdy', or the locale's
            order for 'auto'
        """
        order = self.date_order.lower().strip()
        if order == "dmy":
            return day_first
        if order == "mdy":
            return month_first
        if order == "auto":
            return locale_day_order(self.locale)
        raise ValueError(f"Unknown date order: {self.date_order} (expected one of {', '.join(DATE_ORDERS)})")


# Global configuration instance
_config: Optional[FilterConfig] = None


def get_config(reload: bool = False, config_file: Optional[Path] = None) -> FilterConfig:
    """
    Get the global configuration instance.

    Args:
        reload: Force reload configuration from files
        config_file: Specific config file to load

    Returns:
        Global configuration instance
    """
    global _config
    if _config is None or reload:
        _config = FilterConfig.load(config_file)
    return _config


def init_config(**kwargs) -> FilterConfig:
    """
    Initialize configuration with command-line overrides.

    Args:
        **kwargs: Configuration overrides; None values are ignored

    Returns:
        Configured instance
    """
    config = get_config()

    for key, value in kwargs.items():
        if hasattr(config, key) and value is not None:
            setattr(config, key, value)

    return config
