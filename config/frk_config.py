"""
FRK Deployment Configuration.

The single, immutable configuration record every deployment and every
scheduled run is parameterised with:

    database_name      Storage location for diagnostic output tables
    retention_days     How long output tables are kept (minimum 7)
    job_owner          Login that owns the SQL Agent jobs
    job_category_name  SQL Agent job category grouping the jobs
    export_path        Directory the export job writes CSV snapshots to

The record can be supplied as a JSON object (file or inline mapping) or
through FRK_* environment variables. Both paths produce a raw mapping that
goes through load_config(), so both yield the same validated FrkConfig.

Exports:
    FrkConfig: Validated configuration record
    load_config: Fail-fast loader with principal lookup
    read_retention_days: Run-time RetentionDays, without the deployment floor
    read_database_name: Run-time storage database
    raw_config_from_environment: Raw mapping from FRK_* variables
    raw_config_from_file: Raw mapping from a JSON file
    REQUIRED_FIELDS: Field names in declaration order
"""

import json
import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from exceptions import (
    ConfigValidationError,
    ConfigurationError,
    InvalidRetention,
    MissingConfigField,
    ReservedName,
    UnknownPrincipal,
)
from util_logger import LoggerFactory, ComponentType

from .defaults import FrkDefaults

logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "FrkConfig")


REQUIRED_FIELDS = (
    "database_name",
    "retention_days",
    "job_owner",
    "job_category_name",
    "export_path",
)

# Environment variable for each field
ENV_VARS: Dict[str, str] = {
    "database_name": "FRK_DATABASE_NAME",
    "retention_days": "FRK_RETENTION_DAYS",
    "job_owner": "FRK_JOB_OWNER",
    "job_category_name": "FRK_JOB_CATEGORY",
    "export_path": "FRK_EXPORT_PATH",
}


def is_reserved_database_name(name: str) -> bool:
    """True when name is one of the system databases (case-insensitive)."""
    return name.strip().lower() in FrkDefaults.RESERVED_DATABASE_NAMES


class FrkConfig(BaseModel):
    """
    FRK configuration record.

    Immutable after load. Constructing it directly enforces the same
    retention and reserved-name rules as load_config(); only the principal
    lookup is left to load_config() because it needs the live server.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    database_name: str = Field(
        ...,
        min_length=1,
        max_length=FrkDefaults.MAX_IDENTIFIER_LENGTH,
        description="Storage location (database) for diagnostic output tables",
        examples=["DBAtools"]
    )

    retention_days: int = Field(
        ...,
        ge=FrkDefaults.MIN_RETENTION_DAYS,
        description="Days to keep diagnostic output tables before cleanup drops them"
    )

    job_owner: str = Field(
        ...,
        min_length=1,
        max_length=FrkDefaults.MAX_IDENTIFIER_LENGTH,
        description="""Login that owns the SQL Agent jobs.

        Must exist in sys.server_principals at deployment time. Use a dedicated,
        least-privileged service account rather than 'sa'.
        """
    )

    job_category_name: str = Field(
        ...,
        min_length=1,
        max_length=FrkDefaults.MAX_IDENTIFIER_LENGTH,
        description="SQL Agent job category grouping the FRK jobs",
        examples=["Database Maintenance (FRK)"]
    )

    export_path: str = Field(
        ...,
        min_length=1,
        max_length=FrkDefaults.MAX_PATH_LENGTH,
        description="""Directory the export job writes CSV snapshots to.

        Writability is NOT verified here; the SQL Agent service account needs
        write access to it on the database host.
        """,
        examples=["D:\\SQL_Exports"]
    )

    @field_validator("database_name")
    @classmethod
    def _not_reserved(cls, v: str) -> str:
        if is_reserved_database_name(v):
            raise ValueError(f"'{v}' is a reserved system database name")
        return v

    def debug_dict(self) -> dict:
        """Debug output for logging."""
        return {
            "database_name": self.database_name,
            "retention_days": self.retention_days,
            "job_owner": self.job_owner,
            "job_category_name": self.job_category_name,
            "export_path": self.export_path,
        }

    @classmethod
    def from_environment(cls, principal_exists: Callable[[str], bool]) -> "FrkConfig":
        """Load from FRK_* environment variables through load_config()."""
        return load_config(raw_config_from_environment(), principal_exists)


def _coerce_retention(value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigValidationError(f"RetentionDays must be an integer (got {value!r}).")
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        raise ConfigValidationError(f"RetentionDays must be an integer (got {value!r}).") from None


def read_retention_days(raw: Mapping[str, Any]) -> int:
    """
    RetentionDays as a job run reads it.

    Present and an integer, but not held to the deployment floor: the
    cleanup guard enforces the floor at run time and records the refusal.

    Raises:
        MissingConfigField: retention_days absent or empty
        ConfigValidationError: retention_days is not an integer
    """
    value = raw.get("retention_days")
    if value is None or (isinstance(value, str) and not value.strip()):
        raise MissingConfigField(["retention_days"])
    return _coerce_retention(value)


def read_database_name(raw: Mapping[str, Any]) -> str:
    """
    Storage database as a job run reads it.

    Raises:
        MissingConfigField: database_name absent or empty
        ReservedName: database_name is a system database
    """
    database_name = str(raw.get("database_name") or "").strip()
    if not database_name:
        raise MissingConfigField(["database_name"])
    if is_reserved_database_name(database_name):
        raise ReservedName(database_name)
    return database_name


def load_config(raw: Mapping[str, Any], principal_exists: Callable[[str], bool]) -> FrkConfig:
    """
    Validate a raw configuration mapping and build the FrkConfig.

    Checks run in a fixed order and the principal lookup runs last, so a bad
    record is rejected before anything touches the server state:

    1. all five fields present and non-empty -> MissingConfigField
    2. retention is an integer >= 7 -> InvalidRetention
    3. storage location not a system database -> ReservedName
    4. job owner resolves in the principal registry -> UnknownPrincipal

    Args:
        raw: Mapping with the five configuration fields
        principal_exists: Lookup against the host's principal registry

    Returns:
        Validated, frozen FrkConfig

    Raises:
        ConfigValidationError: (or a subclass) on any violation
    """
    missing = [
        name for name in REQUIRED_FIELDS
        if raw.get(name) is None or (isinstance(raw.get(name), str) and not raw.get(name).strip())
    ]
    if missing:
        logger.error(f"❌ Configuration incomplete: missing {missing}")
        raise MissingConfigField(missing)

    retention_days = _coerce_retention(raw["retention_days"])
    if retention_days < FrkDefaults.MIN_RETENTION_DAYS:
        logger.error(f"❌ RetentionDays {retention_days} below floor {FrkDefaults.MIN_RETENTION_DAYS}")
        raise InvalidRetention(retention_days, FrkDefaults.MIN_RETENTION_DAYS)

    database_name = str(raw["database_name"]).strip()
    if is_reserved_database_name(database_name):
        logger.error(f"❌ Storage location '{database_name}' is reserved")
        raise ReservedName(database_name)

    try:
        config = FrkConfig(
            database_name=database_name,
            retention_days=retention_days,
            job_owner=str(raw["job_owner"]),
            job_category_name=str(raw["job_category_name"]),
            export_path=str(raw["export_path"]),
        )
    except ValidationError as e:
        raise ConfigValidationError(f"Invalid FRK configuration: {e}") from e

    if not principal_exists(config.job_owner):
        logger.error(f"❌ Job owner '{config.job_owner}' not found in server principals")
        raise UnknownPrincipal(config.job_owner)

    logger.info(f"✅ FRK configuration validated for database {config.database_name}",
                extra={'custom_dimensions': config.debug_dict()})
    return config


def raw_config_from_environment() -> Dict[str, Any]:
    """
    Read the raw configuration mapping from FRK_* environment variables.

    Unset variables come back as None so load_config() reports them all
    at once.
    """
    return {field: os.environ.get(env_var) for field, env_var in ENV_VARS.items()}


def raw_config_from_file(path: str) -> Dict[str, Any]:
    """
    Read the raw configuration mapping from a JSON file.

    The file holds one JSON object with the five configuration keys.
    """
    config_path = Path(path)
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from None
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Configuration file {config_path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file {config_path} must contain a JSON object")
    return data
