"""
Rendered job step body tests.

Covers the audit envelope, the diagnostic calls, the cleanup body
(guard, cutoff, FOR XML PATH aggregation, boundary operator, null guard)
and the PowerShell export body.
"""

import re

import pytest

from config import FrkConfig
from core.catalog import JOB_KINDS, get_spec
from core.models import JobKind
from core.schema import RETENTION_GUARD_ERROR_NUMBER, ScriptTemplateGenerator
from core.schema.script_templates import describe_call
from exceptions import ContractViolationError
from tests.factories.config_factories import make_raw_config


AUDIT_LOG = "[msdb].[dbo].[FRK_JobExecutionLog]"


@pytest.fixture
def generator():
    return ScriptTemplateGenerator()


@pytest.fixture
def config():
    return FrkConfig(**make_raw_config(database_name="DBAtools", retention_days=30))


class TestRendering:

    def test_render_is_deterministic(self, generator, config):
        assert generator.render_all(config) == generator.render_all(config)

    def test_render_all_covers_every_kind(self, generator, config):
        assert list(generator.render_all(config)) == list(JOB_KINDS)

    def test_accepts_string_kind(self, generator, config):
        assert generator.render("daily", config) == generator.render(JobKind.DAILY, config)

    def test_unknown_kind_is_contract_violation(self, generator, config):
        with pytest.raises(ContractViolationError):
            generator.render("hourly", config)

    def test_raw_dict_is_contract_violation(self, generator):
        with pytest.raises(ContractViolationError):
            generator.render(JobKind.DAILY, make_raw_config())

    @pytest.mark.parametrize("kind", list(JOB_KINDS))
    def test_scripts_end_with_newline(self, generator, config, kind):
        assert generator.render(kind, config).endswith("\n")


class TestAuditEnvelope:

    @pytest.mark.parametrize("kind", [JobKind.DAILY, JobKind.PEAK, JobKind.WEEKLY_INDEX, JobKind.CLEANUP])
    def test_tsql_bodies_are_wrapped(self, generator, config, kind):
        script = generator.render(kind, config)
        spec = get_spec(kind)
        insert = (
            f"INSERT INTO {AUDIT_LOG} (JobName, StepName, StartTime) "
            f"VALUES (N'{spec.name}', N'{spec.step_name}', SYSDATETIME());"
        )
        assert insert in script
        assert "SET @CurrentLogID = SCOPE_IDENTITY();" in script
        assert "Success=1 WHERE JobLogID=@CurrentLogID" in script
        assert "Success=0, ErrorMessage=ERROR_MESSAGE() WHERE JobLogID=@CurrentLogID" in script
        assert "THROW;" in script

    def test_insert_precedes_work_and_success_follows(self, generator, config):
        script = generator.render(JobKind.DAILY, config)
        insert = script.index("INSERT INTO")
        first_exec = script.index("EXEC ")
        success = script.index("Success=1")
        assert insert < first_exec < success

    def test_catch_rethrows(self, generator, config):
        script = generator.render(JobKind.PEAK, config)
        catch = script[script.index("BEGIN CATCH"):]
        assert catch.index("Success=0") < catch.index("THROW;")

    def test_custom_audit_log_location(self, config):
        script = ScriptTemplateGenerator("[ops].[dbo].[Log]").render(JobKind.DAILY, config)
        assert "INSERT INTO [ops].[dbo].[Log]" in script


class TestDiagnosticBodies:

    def test_daily_calls_in_order(self, generator, config):
        script = generator.render(JobKind.DAILY, config)
        procedures = re.findall(r"EXEC \[master\]\.\[dbo\]\.\[(sp_\w+)\]", script)
        assert procedures == ["sp_Blitz", "sp_BlitzFirst", "sp_BlitzCache", "sp_BlitzWho"]

    def test_daily_blitz_cache_parameters(self, generator, config):
        script = generator.render(JobKind.DAILY, config)
        assert (
            "EXEC [master].[dbo].[sp_BlitzCache] @SortOrder=N'cpu', @Top=25, "
            "@OutputDatabaseName=N'DBAtools', @OutputSchemaName=N'dbo', @OutputTableName=N'BlitzCache';"
        ) in script

    def test_peak_targets_peak_tables(self, generator, config):
        script = generator.render(JobKind.PEAK, config)
        assert "@ExpertMode=1, @Seconds=30" in script
        assert "@OutputTableName=N'BlitzFirst_Peak'" in script
        assert "@OutputTableName=N'BlitzWho_Peak'" in script

    def test_weekly_index_parameters(self, generator, config):
        script = generator.render(JobKind.WEEKLY_INDEX, config)
        assert "[sp_BlitzIndex] @GetAllDatabases=1, @Mode=4," in script

    def test_database_name_with_quote_is_escaped(self, generator):
        config = FrkConfig(**make_raw_config(database_name="O'Neil DBA"))
        script = generator.render(JobKind.DAILY, config)
        assert "@OutputDatabaseName=N'O''Neil DBA'" in script

    def test_describe_call(self):
        call = get_spec(JobKind.PEAK).calls[0]
        assert describe_call(call, "DBAtools") == (
            "master.dbo.sp_BlitzFirst @ExpertMode=1 @Seconds=30 -> [DBAtools].[dbo].[BlitzFirst_Peak]"
        )


class TestCleanupBody:

    def test_runtime_guard(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "IF 30 < 7" in script
        assert f"THROW {RETENTION_GUARD_ERROR_NUMBER}," in script

    def test_guard_precedes_drop(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert script.index("THROW 50020") < script.index("sp_executesql")

    def test_cutoff_uses_retention(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "DECLARE @CutoffDate DATE = DATEADD(DAY, -30, GETDATE());" in script

    def test_strictly_older_comparison(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "t.create_date < @CutoffDate" in script
        assert "<= @CutoffDate" not in script

    def test_aggregation_without_string_agg(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "FOR XML PATH('')" in script
        assert "STUFF(" in script
        assert "STRING_AGG" not in script

    def test_prefix_and_schema_filter(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "t.name LIKE N'Blitz%'" in script
        assert "SCHEMA_NAME(t.schema_id) = N'dbo'" in script

    def test_null_guard_before_execute(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "IF @sql IS NOT NULL AND LEN(@sql) > 0" in script
        assert script.index("IF @sql IS NOT NULL") < script.index("EXEC sp_executesql @sql;")

    def test_identifiers_quoted_at_runtime(self, generator, config):
        script = generator.render(JobKind.CLEANUP, config)
        assert "QUOTENAME(t.name)" in script


class TestExportBody:

    def test_powershell_prelude(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert script.startswith("#NOSQLPS\nImport-Module SqlServer")

    def test_not_audit_wrapped(self, generator, config):
        assert "FRK_JobExecutionLog" not in generator.render(JobKind.EXPORT, config)

    def test_config_values_are_single_quoted_literals(self, generator):
        config = FrkConfig(**make_raw_config(database_name="DBAtools", export_path="D:\\It's $here"))
        script = generator.render(JobKind.EXPORT, config)
        assert "$Database = 'DBAtools'" in script
        assert "$ExportPath = 'D:\\It''s $here'" in script

    def test_no_agent_token_syntax(self, generator, config):
        assert "$(" not in generator.render(JobKind.EXPORT, config)

    def test_dated_folder_and_csv_names(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert "Get-Date -Format 'yyyyMMdd'" in script
        assert "'RawExport_{0}'" in script
        assert "'{0}.csv'" in script

    def test_temp_file_then_move(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert "Export-Csv -LiteralPath $TempFilePath -NoTypeInformation" in script
        assert "Move-Item -LiteralPath $TempFilePath -Destination $CsvFilePath -Force" in script

    def test_empty_table_gets_header_row(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert "-OutputAs DataTables" in script
        assert "if ($Data.Rows.Count -gt 0) {" in script
        assert "-join ',' |" in script
        assert "Set-Content -LiteralPath $TempFilePath -Encoding UTF8 -Force" in script

    def test_folder_created_before_table_lookup(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert script.index("New-Item -Path $LocalDumpPath -ItemType Directory") < script.index("$tables = @(")

    def test_failures_collected_then_thrown(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert "$Failures += " in script
        assert script.index("foreach ($table in $tables)") < script.index("if ($Failures.Count -gt 0)")

    def test_last_day_window(self, generator, config):
        script = generator.render(JobKind.EXPORT, config)
        assert "create_date >= DATEADD(DAY, -1, GETDATE())" in script
