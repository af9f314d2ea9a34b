"""Configuration tools and utilities."""

from .config_loader import ConfigLoader, get_config, get_indicator_registry

__all__ = [
    "ConfigLoader",
    "get_config",
    "get_indicator_registry",
]
