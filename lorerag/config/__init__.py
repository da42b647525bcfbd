"""Configuration module - exports Settings and the YAML-aware loader."""

from lorerag.config.loader import load_settings
from lorerag.config.settings import Settings

__all__ = ["Settings", "load_settings"]
