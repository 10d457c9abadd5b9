"""Configuration module: exports Settings and load_settings."""

from ragchat.config.loader import load_settings
from ragchat.config.settings import Settings

__all__ = ["Settings", "load_settings"]
