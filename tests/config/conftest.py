"""
Config test fixtures — clean environment via monkeypatch.
"""

import pytest


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all env vars that config modules might read, for isolation."""
    env_vars_to_clear = [
        "FRK_DATABASE_NAME", "FRK_RETENTION_DAYS", "FRK_JOB_OWNER",
        "FRK_JOB_CATEGORY", "FRK_EXPORT_PATH",
        "FRK_SQL_SERVER", "FRK_SQL_DRIVER", "FRK_SQL_USER", "FRK_SQL_PASSWORD",
        "FRK_SQL_TRUST_CERT", "FRK_SQL_TIMEOUT",
        "LOG_LEVEL", "DEBUG_LOGGING",
    ]
    for var in env_vars_to_clear:
        monkeypatch.delenv(var, raising=False)
    return monkeypatch


@pytest.fixture
def deployment_env(clean_env):
    """The five FRK record variables set to a valid record."""
    clean_env.setenv("FRK_DATABASE_NAME", "DBAtools")
    clean_env.setenv("FRK_RETENTION_DAYS", "30")
    clean_env.setenv("FRK_JOB_OWNER", "svc_frk")
    clean_env.setenv("FRK_JOB_CATEGORY", "Database Maintenance (FRK)")
    clean_env.setenv("FRK_EXPORT_PATH", "D:\\SQL_Exports")
    return clean_env
