"""Run settings for the markdown publisher."""

from .errors import ConfigError
from .models import Settings
from .settings_loader import SettingsLoader

__all__ = [
    "ConfigError",
    "Settings",
    "SettingsLoader",
]
