"""
Main Application Configuration.

Composes the configuration of one deployment target:
    - SqlServerConfig (connection to the target instance)
    - raw FRK record (validated later by load_config against the live server)

Exports:
    AppConfig: Main configuration class

Dependencies:
    pydantic: BaseModel for configuration validation
    config.connection_config: SqlServerConfig
    config.frk_config: raw_config_from_environment, raw_config_from_file

Pattern:
    Composition over inheritance - domain configs are composed, not inherited.
    The FrkConfig record itself is NOT built here: the job owner check needs
    a connection, so the raw mapping is kept and handed to load_config().
"""

import os
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field

from .connection_config import SqlServerConfig
from .frk_config import raw_config_from_environment, raw_config_from_file


# ============================================================================
# APPLICATION CONFIGURATION
# ============================================================================

class AppConfig(BaseModel):
    """
    Application configuration - composition of domain configs.
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    debug_logging: bool = Field(
        default=False,
        description="Verbose logging. Set DEBUG_LOGGING=true in environment to enable."
    )

    sql: SqlServerConfig = Field(
        default_factory=SqlServerConfig,
        description="Target SQL Server instance"
    )

    frk_raw: Dict[str, Any] = Field(
        default_factory=dict,
        description="Unvalidated FRK record (database_name, retention_days, job_owner, "
                    "job_category_name, export_path)"
    )

    config_source: str = Field(
        default="environment",
        description="Where frk_raw came from: 'environment' or a JSON file path"
    )

    def with_config_file(self, path: str) -> "AppConfig":
        """Copy of this config whose FRK record is read from a JSON file."""
        return self.model_copy(update={
            "frk_raw": raw_config_from_file(path),
            "config_source": path,
        })

    def debug_dict(self) -> dict:
        return {
            "log_level": self.log_level,
            "debug_logging": self.debug_logging,
            "sql": self.sql.debug_dict(),
            "frk": dict(self.frk_raw),
            "config_source": self.config_source,
        }

    @classmethod
    def from_environment(cls, config_file: Optional[str] = None) -> "AppConfig":
        """Load all configs from environment."""
        return cls(
            log_level=os.environ.get("LOG_LEVEL", "INFO"),
            debug_logging=os.environ.get("DEBUG_LOGGING", "false").lower() == "true",
            sql=SqlServerConfig.from_environment(),
            frk_raw=raw_config_from_file(config_file) if config_file else raw_config_from_environment(),
            config_source=config_file or "environment",
        )
