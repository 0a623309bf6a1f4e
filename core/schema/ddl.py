# ============================================================================
# FRK DDL
# ============================================================================
# STATUS: Core - DDL for the storage database and the audit log
# PURPOSE: Idempotent CREATE statements used by the reconciler
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
FRK DDL Builders.

All statements are idempotent where the server allows it (IF ... IS NULL
guards) and quote every identifier through core.schema.tsql.

Exports:
    AuditLogDDL: FRK_JobExecutionLog table
    DatabaseDDL: CREATE / DROP DATABASE for the storage location
"""

from config.defaults import FrkDefaults

from .tsql import nstring, qualified_name, quote_name


class AuditLogDDL:
    """
    Builder for the audit log table.

    The table is created if absent and never dropped or altered, so run
    history survives redeployments.

    Example:
        stmt = AuditLogDDL.create_if_absent()
        cursor.execute(stmt)
    """

    COLUMNS = (
        "JobLogID",
        "JobName",
        "StepName",
        "StartTime",
        "EndTime",
        "Success",
        "ErrorMessage",
    )

    @staticmethod
    def table_name(
        database: str = FrkDefaults.AUDIT_LOG_DATABASE,
        schema: str = FrkDefaults.AUDIT_LOG_SCHEMA,
        table: str = FrkDefaults.AUDIT_LOG_TABLE,
    ) -> str:
        return qualified_name(database, schema, table)

    @staticmethod
    def create_if_absent(
        database: str = FrkDefaults.AUDIT_LOG_DATABASE,
        schema: str = FrkDefaults.AUDIT_LOG_SCHEMA,
        table: str = FrkDefaults.AUDIT_LOG_TABLE,
    ) -> str:
        full_name = qualified_name(database, schema, table)
        return (
            f"IF OBJECT_ID({nstring(full_name)}, N'U') IS NULL\n"
            f"CREATE TABLE {full_name} (\n"
            f"    {quote_name('JobLogID')} INT IDENTITY(1,1) PRIMARY KEY,\n"
            f"    {quote_name('JobName')} NVARCHAR(128),\n"
            f"    {quote_name('StepName')} NVARCHAR(128),\n"
            f"    {quote_name('StartTime')} DATETIME2 DEFAULT SYSDATETIME(),\n"
            f"    {quote_name('EndTime')} DATETIME2 NULL,\n"
            f"    {quote_name('Success')} BIT NULL,\n"
            f"    {quote_name('ErrorMessage')} NVARCHAR(MAX) NULL\n"
            f");"
        )

    @staticmethod
    def exists_query() -> str:
        """Parameterised existence check: one ? for the qualified table name."""
        return "SELECT CASE WHEN OBJECT_ID(?, N'U') IS NULL THEN 0 ELSE 1 END"


class DatabaseDDL:
    """CREATE / DROP DATABASE with host defaults (no file or collation options)."""

    @staticmethod
    def create(name: str) -> str:
        return f"CREATE DATABASE {quote_name(name)}"

    @staticmethod
    def drop(name: str) -> str:
        return f"DROP DATABASE {quote_name(name)}"
