"""Configuration and logging setup."""

from .logging_config import configure_logging
from .settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "configure_logging"]
