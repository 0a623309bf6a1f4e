# ============================================================================
# CONFIG PACKAGE INIT
# ============================================================================
# STATUS: Configuration - exports and singleton
# PURPOSE: Configuration package exports for the FRK deployment tool
# LAST_REVIEWED: 19 OCT 2026
# EXPORTS: All config classes, get_config singleton, debug_config helper
# ENTRY_POINTS: from config import get_config, load_config, FrkConfig
# ============================================================================

"""
Configuration Package - Domain-Specific Configuration Modules

Structure:
    config/
    ├── __init__.py              # This file - exports and singleton
    ├── app_config.py            # Main config (composes domain configs)
    ├── frk_config.py            # FRK record + fail-fast loader
    ├── connection_config.py     # SQL Server / pyodbc connection
    ├── defaults.py              # Constants
    └── env_validation.py        # Regex validation of FRK_* variables

Usage:
    # Singleton pattern (preferred)
    from config import get_config
    config = get_config()
    conn_str = config.sql.connection_string()

    # Validated FRK record (needs the server's principal registry)
    from config import load_config
    frk = load_config(config.frk_raw, principal_exists=agent_repo.principal_exists)

    # Debug output
    from config import debug_config
    info = debug_config()  # Passwords masked
"""

from typing import Optional

from .defaults import FrkDefaults, SqlServerDefaults, ExportDefaults
from .frk_config import (
    FrkConfig,
    REQUIRED_FIELDS,
    is_reserved_database_name,
    load_config,
    raw_config_from_environment,
    raw_config_from_file,
    read_database_name,
    read_retention_days,
)
from .connection_config import SqlServerConfig
from .app_config import AppConfig


# ============================================================================
# SINGLETON PATTERN
# ============================================================================

_config_instance: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """
    Get global configuration singleton.

    Returns:
        AppConfig instance loaded from environment
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = AppConfig.from_environment()
    return _config_instance


def reset_config() -> None:
    """Drop the cached singleton (tests and CLI --config use this)."""
    global _config_instance
    _config_instance = None


def debug_config() -> dict:
    """
    Get sanitized configuration for debugging (masks sensitive values).

    Returns:
        Dictionary with configuration values, passwords masked
    """
    try:
        return get_config().debug_dict()
    except Exception as e:
        return {'error': f'Configuration validation failed: {e}'}


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    # Main config
    'AppConfig',
    'get_config',
    'reset_config',
    'debug_config',

    # FRK record
    'FrkConfig',
    'REQUIRED_FIELDS',
    'is_reserved_database_name',
    'load_config',
    'raw_config_from_environment',
    'raw_config_from_file',
    'read_database_name',
    'read_retention_days',

    # Connection
    'SqlServerConfig',

    # Defaults
    'FrkDefaults',
    'SqlServerDefaults',
    'ExportDefaults',
]
