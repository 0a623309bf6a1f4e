"""
Configuration Defaults - Single source of truth for all default values.

Organization:
    - FrkDefaults: Naming conventions and safety floors of the FRK pipeline
    - SqlServerDefaults: Connection defaults for the target instance
    - ExportDefaults: Layout of the CSV export directory

Usage:
    from config.defaults import FrkDefaults

    # In Pydantic Field definitions:
    retention_days: int = Field(..., ge=FrkDefaults.MIN_RETENTION_DAYS)
"""


# =============================================================================
# FRK PIPELINE DEFAULTS
# =============================================================================

class FrkDefaults:
    """
    Naming conventions and safety floors.

    The job name prefix is how the reconciler finds previously installed
    jobs: every job whose name starts with it is deleted and recreated.
    """

    JOB_NAME_PREFIX = "FRK - "

    # Audit log lives beside the jobs so it commits with them
    AUDIT_LOG_DATABASE = "msdb"
    AUDIT_LOG_SCHEMA = "dbo"
    AUDIT_LOG_TABLE = "FRK_JobExecutionLog"

    # Diagnostic procedures are installed in master by the First Responder Kit
    PROCEDURE_DATABASE = "master"
    PROCEDURE_SCHEMA = "dbo"
    OUTPUT_SCHEMA = "dbo"

    # Cleanup and export only touch tables with this prefix
    OUTPUT_TABLE_PREFIX = "Blitz"

    MIN_RETENTION_DAYS = 7

    # sp_add_jobserver target for the local instance
    JOB_SERVER_NAME = "(local)"

    # Case-insensitive match
    RESERVED_DATABASE_NAMES = frozenset({"master", "model", "msdb", "tempdb"})

    MAX_IDENTIFIER_LENGTH = 128
    MAX_PATH_LENGTH = 255


# =============================================================================
# SQL SERVER CONNECTION DEFAULTS
# =============================================================================

class SqlServerDefaults:
    """Connection defaults for pyodbc."""

    SERVER = "localhost"
    DRIVER = "ODBC Driver 18 for SQL Server"
    CONNECTION_TIMEOUT_SECONDS = 30
    TRUST_SERVER_CERTIFICATE = False


# =============================================================================
# EXPORT DEFAULTS
# =============================================================================

class ExportDefaults:
    """CSV export layout: {export_path}/RawExport_{YYYYMMDD}/{table}.csv"""

    FOLDER_PREFIX = "RawExport_"
    DATE_FORMAT = "%Y%m%d"
    LOOKBACK_DAYS = 1
    FILE_EXTENSION = ".csv"
    TEMP_SUFFIX = ".tmp"
