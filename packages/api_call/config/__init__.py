"""Public API for configuration utilities."""

from .loader import load_settings
from .models import DEFAULT_CONFIG_PATH, ApiCallSettings, HttpSettings, LoggingSettings

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ApiCallSettings",
    "HttpSettings",
    "LoggingSettings",
    "load_settings",
]
