"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Only the application surface reads these settings. Core components receive
explicit, immutable config objects built from them (see
``Settings.prover_config`` and ``Settings.evm_target``).

Usage:
    from zkbridge.config import settings

    print(settings.environment)
    print(settings.ledger.network)
"""

from zkbridge.config.settings import (
    ChainMode,
    Environment,
    LogLevel,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
    "ChainMode",
]
