"""Configuration."""

from skilldispatch.config.manager import ConfigManager

__all__ = ["ConfigManager"]
