"""
Configuration module for rekindle.

Uses pydantic-settings for environment variable loading.
"""

from rekindle.config.settings import RefreshSettings

__all__ = ["RefreshSettings"]
