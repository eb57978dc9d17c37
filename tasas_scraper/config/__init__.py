"""
Configuration module for the rate updater.

Provides:
- YAML settings loading with validation
- Parser source toggle (live vs fixtures)
- Environment variable substitution
"""

from .loader import (
    ConfigError,
    ConfigLoader,
    ParserConfig,
    UpdaterSettings,
    load_settings,
    parse_bank_ids,
)

__all__ = [
    "ConfigError",
    "ConfigLoader",
    "ParserConfig",
    "UpdaterSettings",
    "load_settings",
    "parse_bank_ids",
]
