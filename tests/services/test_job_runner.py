"""
Job runner tests: audit log entries for successful and failing runs.
"""

import logging
from datetime import timedelta

import pytest

from config import FrkConfig
from core.catalog import job_name
from core.models import JobKind
from exceptions import ContractViolationError, ExportPartialFailure, RetentionGuardError, TaskRuntimeError
from tests.factories.config_factories import make_raw_config


class TestSuccessfulRun:

    def test_exactly_one_closed_entry(self, runner, deployed, frk_config):
        result = runner.run(JobKind.DAILY, frk_config)
        entries = deployed.list_entries()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.job_log_id == result.job_log_id
        assert entry.job_name == job_name(JobKind.DAILY)
        assert entry.step_name == "Execute Full Health Check Suite"
        assert entry.end_time is not None
        assert entry.success is True
        assert entry.error_message is None

    def test_calls_run_in_catalog_order(self, runner, deployed, frk_config):
        runner.run(JobKind.DAILY, frk_config)
        assert [c[0] for c in deployed.diagnostic_calls] == [
            "sp_Blitz", "sp_BlitzFirst", "sp_BlitzCache", "sp_BlitzWho",
        ]
        assert all(c[1] == frk_config.database_name for c in deployed.diagnostic_calls)

    def test_peak_writes_peak_tables(self, runner, deployed, frk_config):
        runner.run("peak", frk_config)
        assert {"BlitzFirst_Peak", "BlitzWho_Peak"} <= set(deployed.tables)

    def test_result_dict(self, runner, frk_config):
        report = runner.run(JobKind.WEEKLY_INDEX, frk_config).to_dict()
        assert report["success"] is True
        assert report["calls"] == [
            f"master.dbo.sp_BlitzIndex @GetAllDatabases=1 @Mode=4 -> "
            f"[{frk_config.database_name}].[dbo].[BlitzIndex]"
        ]


class TestFailingRun:

    def test_failure_recorded_then_raised(self, runner, deployed, frk_config):
        deployed.fail_on("run_diagnostic", RuntimeError("sp_BlitzCache: timeout"), match="sp_BlitzCache")
        with pytest.raises(TaskRuntimeError) as exc_info:
            runner.run(JobKind.DAILY, frk_config)

        entries = deployed.list_entries()
        assert len(entries) == 1
        entry = entries[0]
        assert entry.success is False
        assert "timeout" in entry.error_message
        assert entry.end_time >= entry.start_time
        assert exc_info.value.job_log_id == entry.job_log_id
        assert exc_info.value.job_name == job_name(JobKind.DAILY)

    def test_later_calls_not_attempted(self, runner, deployed, frk_config):
        deployed.fail_on("run_diagnostic", RuntimeError("boom"), match="sp_BlitzFirst")
        with pytest.raises(TaskRuntimeError):
            runner.run(JobKind.DAILY, frk_config)
        assert [c[0] for c in deployed.diagnostic_calls] == ["sp_Blitz"]

    def test_end_time_after_start_with_moving_clock(self, runner, deployed, frk_config, clock):
        original = deployed.run_diagnostic

        def slow_then_fail(call, output_database):
            clock.advance(seconds=45)
            if call.procedure == "sp_BlitzWho":
                raise RuntimeError("killed")
            original(call, output_database)

        deployed.run_diagnostic = slow_then_fail
        with pytest.raises(TaskRuntimeError):
            runner.run(JobKind.PEAK, frk_config)
        entry = deployed.list_entries()[0]
        assert entry.duration_seconds == 90

    def test_no_audit_log_table(self, server, frk_config):
        from services import JobRunner
        with pytest.raises(RuntimeError):
            JobRunner(server, server).run(JobKind.DAILY, frk_config)
        assert server.diagnostic_calls == []


class TestCleanupKind:

    def test_cleanup_is_audit_logged(self, runner, deployed, frk_config, clock):
        deployed.add_table("BlitzFirst", clock() - timedelta(days=400))
        result = runner.run(JobKind.CLEANUP, frk_config)
        assert result.details["tables_dropped"] == ["BlitzFirst"]
        assert deployed.list_entries()[0].success is True

    def test_retention_below_floor_fails_at_runtime(self, runner, deployed, clock):
        deployed.add_table("BlitzFirst", clock() - timedelta(days=400))

        with pytest.raises(RetentionGuardError):
            runner.run_cleanup(5, "DBAtools")

        assert "BlitzFirst" in deployed.tables
        entry = deployed.list_entries()[0]
        assert entry.success is False
        assert "less than 7 days" in entry.error_message

    def test_run_cleanup_with_valid_retention(self, runner, deployed, clock):
        deployed.add_table("BlitzWho", clock() - timedelta(days=40))
        result = runner.run_cleanup(30, "DBAtools")
        assert result.success
        assert result.details["tables_dropped"] == ["BlitzWho"]
        assert deployed.list_entries()[0].job_name == job_name(JobKind.CLEANUP)


class TestRunLogContext:

    @staticmethod
    def _dimensions(caplog, fragment):
        records = [r for r in caplog.records if fragment in r.getMessage()]
        assert records, f"no record containing {fragment!r}"
        return records[0].custom_dimensions

    def test_records_carry_job_log_id(self, runner, frk_config, caplog):
        with caplog.at_level(logging.INFO, logger="job.JobRunner"):
            result = runner.run(JobKind.DAILY, frk_config)

        dims = self._dimensions(caplog, f"started (JobLogID {result.job_log_id})")
        assert dims["job_log_id"] == result.job_log_id
        assert dims["job_name"] == job_name(JobKind.DAILY)
        assert dims["step_name"] == "Execute Full Health Check Suite"
        assert dims["database"] == frk_config.database_name
        assert dims["component_name"] == "JobRunner"

    def test_each_run_has_its_own_context(self, runner, frk_config, caplog):
        with caplog.at_level(logging.INFO, logger="job.JobRunner"):
            first = runner.run(JobKind.DAILY, frk_config)
            second = runner.run(JobKind.PEAK, frk_config)

        assert second.job_log_id != first.job_log_id
        dims = self._dimensions(caplog, f"started (JobLogID {second.job_log_id})")
        assert dims["job_log_id"] == second.job_log_id
        assert dims["job_name"] == job_name(JobKind.PEAK)


class TestExportKind:

    def test_export_not_audit_logged(self, runner, deployed, tmp_path):
        config = FrkConfig(**make_raw_config(export_path=str(tmp_path)))
        result = runner.run(JobKind.EXPORT, config)
        assert result.success
        assert result.job_log_id is None
        assert deployed.list_entries() == []

    def test_export_partial_failure_propagates(self, runner, deployed, clock, tmp_path):
        config = FrkConfig(**make_raw_config(export_path=str(tmp_path)))
        deployed.add_table("BlitzWho", clock())
        deployed.fail_on("fetch_table", RuntimeError("denied"))
        with pytest.raises(ExportPartialFailure):
            runner.run(JobKind.EXPORT, config)


class TestContracts:

    def test_raw_mapping_rejected(self, runner):
        with pytest.raises(ContractViolationError):
            runner.run(JobKind.DAILY, make_raw_config())

    def test_unknown_kind_rejected(self, runner, frk_config):
        with pytest.raises(ContractViolationError):
            runner.run("hourly", frk_config)
