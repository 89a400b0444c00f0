"""Configuration and logging setup."""

from src.config.settings import Settings, get_settings
from src.config.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "bind_request_context",
    "clear_request_context",
]
