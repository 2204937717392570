"""Configuration management module."""

from .settings import Settings, get_settings
from .container import Container

__all__ = [
    "Settings",
    "get_settings",
    "Container",
]
