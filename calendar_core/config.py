"""
Configuration parser for calendar_core.

Handles TOML file parsing for the few settings the core needs: the local
timezone used to interpret timezone-aware instants and the log level.
"""

import tomllib
import os
from pathlib import Path
from dataclasses import dataclass
from typing import Optional

from . import timezone_utils
from .log_utils import configure_logging


@dataclass
class Config:
    """Main configuration container for calendar_core."""

    timezone: str = "UTC"
    log_level: str = "WARNING"
    source_path: Optional[Path] = None

    @classmethod
    def get_default_config_path(cls) -> Path:
        """Get the default configuration file path."""
        xdg_config = os.environ.get('XDG_CONFIG_HOME', os.path.expanduser('~/.config'))
        return Path(xdg_config) / 'calendar-core' / 'calendar-core.toml'

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> 'Config':
        """Load configuration from TOML file."""
        if config_path is None:
            config_path = cls.get_default_config_path()
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'rb') as f:
            data = tomllib.load(f)

        # Parse General section
        general = data.get('General', {})
        return cls(
            timezone=general.get('timezone', cls.timezone),
            log_level=str(general.get('log_level', cls.log_level)).upper(),
            source_path=config_path,
        )

    def apply(self) -> None:
        """Install the timezone and log level process-wide."""
        timezone_utils.set_timezone(self.timezone)
        configure_logging(self.log_level)
