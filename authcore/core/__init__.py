"""Core configuration, errors, logging, password hashing and tokens."""

from authcore.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
