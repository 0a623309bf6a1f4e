# ============================================================================
# SCRIPT TEMPLATE GENERATOR
# ============================================================================
# STATUS: Core - Renders the five FRK job step bodies
# PURPOSE: Configuration in, script text out. No I/O.
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Script Template Generator.

Renders the step body of each FRK job from the validated configuration.
Rendering is pure and deterministic: the same kind and configuration always
produce byte-identical text, which is what makes redeployment converge.

T-SQL bodies (daily, peak, weekly index, cleanup) share one audit envelope:

    1. INSERT an audit log row, capture SCOPE_IDENTITY()
    2. run the kind-specific work
    3. UPDATE the row: EndTime, Success = 1
    on error: UPDATE EndTime, Success = 0, ErrorMessage = ERROR_MESSAGE(), THROW

The export body is PowerShell (SqlServer module) and is not audit-wrapped;
it fails the job step when any table could not be written.

All configuration values are embedded through core.schema.tsql, so a
database name or export path containing quotes cannot break out of its
literal.

Exports:
    ScriptTemplateGenerator: Step body renderer
"""

from typing import Dict, List, Optional

from config.defaults import ExportDefaults, FrkDefaults
from config.frk_config import FrkConfig
from exceptions import ContractViolationError
from util_logger import LoggerFactory, ComponentType

from ..catalog import JOB_KINDS, JobSpec, get_spec
from ..models.diagnostics import DiagnosticCall
from ..models.enums import JobKind
from .tsql import like_prefix, nstring, ps_string, qualified_name, sql_literal

logger = LoggerFactory.create_logger(ComponentType.SCHEMA, "ScriptTemplateGenerator")


# THROW error number raised by the cleanup body when the retention guard trips
RETENTION_GUARD_ERROR_NUMBER = 50020

_INDENT = "    "


class ScriptTemplateGenerator:
    """
    Renders job step bodies.

    Example:
        generator = ScriptTemplateGenerator()
        script = generator.render(JobKind.DAILY, config)
    """

    def __init__(self, audit_log_table: Optional[str] = None):
        self.audit_log_table = audit_log_table or qualified_name(
            FrkDefaults.AUDIT_LOG_DATABASE,
            FrkDefaults.AUDIT_LOG_SCHEMA,
            FrkDefaults.AUDIT_LOG_TABLE,
        )

    # ========================================================================
    # PUBLIC API
    # ========================================================================

    def render(self, kind, config: FrkConfig) -> str:
        """
        Render the step body for one job kind.

        Args:
            kind: JobKind (or its string value)
            config: Validated configuration

        Returns:
            Script text (T-SQL or PowerShell)

        Raises:
            ContractViolationError: Unknown kind or config is not a FrkConfig
        """
        if not isinstance(config, FrkConfig):
            raise ContractViolationError(
                f"render() needs a validated FrkConfig, got {type(config).__name__}"
            )
        spec = get_spec(kind)

        if spec.kind is JobKind.EXPORT:
            script = self._render_export(config)
        elif spec.kind is JobKind.CLEANUP:
            script = self._wrap_in_audit_envelope(spec, self._cleanup_body(config))
        else:
            script = self._wrap_in_audit_envelope(spec, self._diagnostic_body(spec, config))

        logger.debug(f"🔧 Rendered {spec.name} ({len(script)} chars)")
        return script

    def render_all(self, config: FrkConfig) -> Dict[JobKind, str]:
        """Render every job body, in installation order."""
        return {kind: self.render(kind, config) for kind in JOB_KINDS}

    # ========================================================================
    # T-SQL
    # ========================================================================

    def render_call(self, call: DiagnosticCall, output_database: str) -> str:
        """One EXEC statement for a diagnostic call."""
        params = call.bound_parameters(output_database)
        args = ", ".join(f"@{name}={sql_literal(value)}" for name, value in params.items())
        procedure = qualified_name(call.procedure_database, call.procedure_schema, call.procedure)
        return f"EXEC {procedure} {args};"

    def _diagnostic_body(self, spec: JobSpec, config: FrkConfig) -> List[str]:
        return [self.render_call(call, config.database_name) for call in spec.calls]

    def _cleanup_body(self, config: FrkConfig) -> List[str]:
        """
        Retention guard, cutoff, FOR XML PATH aggregation, guarded execute.

        STRING_AGG is not available before SQL Server 2017, so the drop
        batch is built with FOR XML PATH + STUFF. The aggregate is NULL when
        no table qualifies; the length check makes that a no-op.
        """
        days = int(config.retention_days)
        floor = FrkDefaults.MIN_RETENTION_DAYS
        guard_message = nstring(
            f"Retention period is less than {floor} days. Aborting cleanup for safety."
        )
        schema = nstring(FrkDefaults.OUTPUT_SCHEMA)
        pattern = nstring(like_prefix(FrkDefaults.OUTPUT_TABLE_PREFIX))
        return [
            f"IF {days} < {floor}",
            f"{_INDENT}THROW {RETENTION_GUARD_ERROR_NUMBER}, {guard_message}, 1;",
            "",
            f"DECLARE @CutoffDate DATE = DATEADD(DAY, -{days}, GETDATE());",
            "DECLARE @sql NVARCHAR(MAX) = NULL;",
            "",
            "SELECT @sql = STUFF(",
            f"{_INDENT}(",
            f"{_INDENT * 2}SELECT N';DROP TABLE ' + QUOTENAME(SCHEMA_NAME(t.schema_id)) + N'.' + QUOTENAME(t.name)",
            f"{_INDENT * 2}FROM sys.tables AS t",
            f"{_INDENT * 2}WHERE t.create_date < @CutoffDate",
            f"{_INDENT * 2}{_INDENT}AND t.name LIKE {pattern}",
            f"{_INDENT * 2}{_INDENT}AND SCHEMA_NAME(t.schema_id) = {schema}",
            f"{_INDENT * 2}ORDER BY t.name",
            f"{_INDENT * 2}FOR XML PATH(''), TYPE",
            f"{_INDENT}).value('.', 'NVARCHAR(MAX)'),",
            f"{_INDENT}1, 1, N''",
            ");",
            "",
            "IF @sql IS NOT NULL AND LEN(@sql) > 0",
            "BEGIN",
            f"{_INDENT}EXEC sp_executesql @sql;",
            "END",
        ]

    def _wrap_in_audit_envelope(self, spec: JobSpec, body: List[str]) -> str:
        log = self.audit_log_table
        job = nstring(spec.name)
        step = nstring(spec.step_name)
        lines = [
            "SET NOCOUNT ON;",
            "DECLARE @CurrentLogID INT;",
            "BEGIN TRY",
            f"{_INDENT}INSERT INTO {log} (JobName, StepName, StartTime) VALUES ({job}, {step}, SYSDATETIME());",
            f"{_INDENT}SET @CurrentLogID = SCOPE_IDENTITY();",
            "",
        ]
        lines.extend(f"{_INDENT}{line}" if line else "" for line in body)
        lines.extend([
            "",
            f"{_INDENT}UPDATE {log} SET EndTime=SYSDATETIME(), Success=1 WHERE JobLogID=@CurrentLogID;",
            "END TRY",
            "BEGIN CATCH",
            f"{_INDENT}IF @CurrentLogID IS NOT NULL",
            f"{_INDENT * 2}UPDATE {log} SET EndTime=SYSDATETIME(), Success=0, "
            f"ErrorMessage=ERROR_MESSAGE() WHERE JobLogID=@CurrentLogID;",
            f"{_INDENT}THROW;",
            "END CATCH",
        ])
        return "\n".join(lines) + "\n"

    # ========================================================================
    # POWERSHELL
    # ========================================================================

    def _render_export(self, config: FrkConfig) -> str:
        """
        PowerShell export body.

        Each table is written to <table>.csv.tmp and moved over <table>.csv,
        so a failed table never leaves a truncated CSV behind. Failures are
        collected and thrown after the loop; files of the other tables stay.
        A table without rows still gets its header line.

        The script contains no $( ) subexpressions: SQL Agent parses those
        as job tokens in PowerShell steps.
        """
        table_query = (
            "SELECT name, QUOTENAME(SCHEMA_NAME(schema_id)) + N'.' + QUOTENAME(name) AS quoted_name "
            "FROM sys.tables "
            f"WHERE create_date >= DATEADD(DAY, -{ExportDefaults.LOOKBACK_DAYS}, GETDATE()) "
            f"AND name LIKE {nstring(like_prefix(FrkDefaults.OUTPUT_TABLE_PREFIX))} "
            f"AND SCHEMA_NAME(schema_id) = {nstring(FrkDefaults.OUTPUT_SCHEMA)} "
            "ORDER BY name;"
        )
        folder_format = ps_string(ExportDefaults.FOLDER_PREFIX + "{0}")
        file_format = ps_string("{0}" + ExportDefaults.FILE_EXTENSION)
        i1, i2, i3 = _INDENT, _INDENT * 2, _INDENT * 3
        lines = [
            "#NOSQLPS",
            "Import-Module SqlServer -Force",
            "",
            "$ErrorActionPreference = 'Stop'",
            "$SqlServer = $env:COMPUTERNAME",
            f"$Database = {ps_string(config.database_name)}",
            f"$ExportPath = {ps_string(config.export_path)}",
            "$Today = Get-Date -Format 'yyyyMMdd'",
            f"$LocalDumpPath = Join-Path $ExportPath ({folder_format} -f $Today)",
            "$Failures = @()",
            "",
            "Try {",
            f"{i1}if (-not (Test-Path -LiteralPath $LocalDumpPath)) {{",
            f"{i2}New-Item -Path $LocalDumpPath -ItemType Directory -Force | Out-Null",
            f"{i1}}}",
            "",
            f"{i1}$tableQuery = {ps_string(table_query)}",
            f"{i1}$tables = @(Invoke-Sqlcmd -ServerInstance $SqlServer -Database $Database "
            f"-Query $tableQuery -OutputSqlErrors $true)",
            "",
            f"{i1}foreach ($table in $tables) {{",
            f"{i2}$TableName = $table.name",
            f"{i2}$CsvFilePath = Join-Path $LocalDumpPath ({file_format} -f $TableName)",
            f"{i2}$TempFilePath = $CsvFilePath + {ps_string(ExportDefaults.TEMP_SUFFIX)}",
            f"{i2}Try {{",
            f"{i3}$ExportQuery = 'SELECT * FROM ' + $table.quoted_name + ';'",
            f"{i3}$Data = Invoke-Sqlcmd -ServerInstance $SqlServer -Database $Database -Query $ExportQuery "
            f"-OutputAs DataTables -OutputSqlErrors $true",
            f"{i3}$Columns = @($Data.Columns | ForEach-Object {{ $_.ColumnName }})",
            f"{i3}if ($Data.Rows.Count -gt 0) {{",
            f"{i3}{i1}$Data.Rows | Select-Object -Property $Columns |",
            f"{i3}{i2}Export-Csv -LiteralPath $TempFilePath -NoTypeInformation -Force",
            f"{i3}}} else {{",
            f"{i3}{i1}($Columns | ForEach-Object {{ '\"' + $_.Replace('\"', '\"\"') + '\"' }}) -join ',' |",
            f"{i3}{i2}Set-Content -LiteralPath $TempFilePath -Encoding UTF8 -Force",
            f"{i3}}}",
            f"{i3}Move-Item -LiteralPath $TempFilePath -Destination $CsvFilePath -Force",
            f"{i2}}}",
            f"{i2}Catch {{",
            f"{i3}Remove-Item -LiteralPath $TempFilePath -Force -ErrorAction SilentlyContinue",
            f"{i3}$Failures += ('{{0}}: {{1}}' -f $TableName, $_.Exception.Message)",
            f"{i2}}}",
            f"{i1}}}",
            "",
            f"{i1}if ($Failures.Count -gt 0) {{",
            f"{i2}throw ('Export failed for {{0}} of {{1}} table(s): {{2}}' -f "
            f"$Failures.Count, $tables.Count, ($Failures -join '; '))",
            f"{i1}}}",
            "",
            f"{i1}if ($tables.Count -eq 0) {{",
            f"{i2}Write-Output 'No new tables found for local export.'",
            f"{i1}}} else {{",
            f"{i2}Write-Output ('Local export completed successfully to {{0}}.' -f $LocalDumpPath)",
            f"{i1}}}",
            "}",
            "Catch {",
            f"{i1}Write-Error ('The FRK local export job failed. Error: {{0}}' -f $_.Exception.Message)",
            f"{i1}throw",
            "}",
        ]
        return "\n".join(lines) + "\n"


def describe_call(call: DiagnosticCall, output_database: str) -> str:
    """Human-readable call for logs and the plan output."""
    parts = [call.qualified_procedure]
    parts.extend(f"@{k}={v}" for k, v in call.parameters.items())
    target = qualified_name(output_database, call.output_schema, call.output_table)
    return f"{' '.join(parts)} -> {target}"
