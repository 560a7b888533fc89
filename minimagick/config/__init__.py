"""Configuration management for minimagick."""

from minimagick.config.manager import ConfigManager
from minimagick.config.defaults import DEFAULT_CONFIG
from minimagick.config.settings import MagickSettings, default_settings

__all__ = ["ConfigManager", "DEFAULT_CONFIG", "MagickSettings", "default_settings"]
