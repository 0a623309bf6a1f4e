"""
Job catalog tests: names, steps, schedules and diagnostic calls.
"""

import pytest

from core.catalog import JOB_KINDS, get_spec, job_name
from core.models import FrequencyType, JobKind, JobSchedule, JobSubsystem, Weekday
from exceptions import ContractViolationError


class TestJobNames:

    @pytest.mark.parametrize("kind, expected", [
        (JobKind.DAILY, "FRK - Daily Health Check"),
        (JobKind.PEAK, "FRK - Peak Hour Performance Snapshot"),
        (JobKind.WEEKLY_INDEX, "FRK - Weekly Index Analysis"),
        (JobKind.CLEANUP, "FRK - Weekly Data Cleanup"),
        (JobKind.EXPORT, "FRK - Export Raw Data Locally"),
    ])
    def test_job_name(self, kind, expected):
        assert job_name(kind) == expected

    def test_five_distinct_jobs(self):
        names = {job_name(kind) for kind in JOB_KINDS}
        assert len(names) == 5

    def test_all_names_carry_reserved_prefix(self):
        assert all(job_name(kind).startswith("FRK - ") for kind in JOB_KINDS)

    def test_unknown_kind(self):
        with pytest.raises(ContractViolationError):
            get_spec("hourly")


class TestSchedules:

    def test_daily_at_two(self):
        (schedule,) = get_spec(JobKind.DAILY).schedules
        assert schedule.name == "FRK_Daily_0200"
        assert schedule.freq_type is FrequencyType.DAILY
        assert schedule.freq_interval == 1
        assert schedule.active_start_time == 20000
        assert schedule.start_time_display == "02:00:00"

    def test_peak_twice_a_day(self):
        schedules = get_spec(JobKind.PEAK).schedules
        assert [(s.name, s.active_start_time) for s in schedules] == [
            ("FRK_Peak_Morning_1030", 103000),
            ("FRK_Peak_Afternoon_1430", 143000),
        ]

    def test_weekly_index_sunday(self):
        (schedule,) = get_spec(JobKind.WEEKLY_INDEX).schedules
        assert schedule.freq_type is FrequencyType.WEEKLY
        assert schedule.freq_interval == Weekday.SUNDAY == 1
        assert schedule.freq_recurrence_factor == 1
        assert schedule.active_start_time == 220000

    def test_cleanup_saturday(self):
        (schedule,) = get_spec(JobKind.CLEANUP).schedules
        assert schedule.name == "FRK_Weekly_Cleanup_Saturday"
        assert schedule.freq_interval == Weekday.SATURDAY == 64
        assert schedule.active_start_time == 230000

    def test_export_is_manual(self):
        assert get_spec(JobKind.EXPORT).schedules == ()

    def test_invalid_start_time_rejected(self):
        with pytest.raises(Exception):
            JobSchedule(name="bad", freq_type=FrequencyType.DAILY, freq_interval=1, active_start_time=16000)


class TestSteps:

    def test_export_is_powershell(self):
        assert get_spec(JobKind.EXPORT).subsystem is JobSubsystem.POWERSHELL
        assert not get_spec(JobKind.EXPORT).audit_wrapped

    @pytest.mark.parametrize("kind", [JobKind.DAILY, JobKind.PEAK, JobKind.WEEKLY_INDEX, JobKind.CLEANUP])
    def test_tsql_steps_are_audit_wrapped(self, kind):
        assert get_spec(kind).audit_wrapped

    def test_only_cleanup_runs_in_storage_database(self):
        assert [k for k in JOB_KINDS if get_spec(k).runs_in_storage_database] == [JobKind.CLEANUP]

    def test_daily_output_tables(self):
        assert get_spec(JobKind.DAILY).output_tables == ["Blitz", "BlitzFirst", "BlitzCache", "BlitzWho"]

    def test_every_output_table_matches_cleanup_prefix(self):
        for kind in JOB_KINDS:
            assert all(t.startswith("Blitz") for t in get_spec(kind).output_tables)

    def test_bound_parameters_append_output_location(self):
        call = get_spec(JobKind.DAILY).calls[1]
        assert list(call.bound_parameters("DBAtools").items()) == [
            ("ExpertMode", 1),
            ("Seconds", 60),
            ("OutputDatabaseName", "DBAtools"),
            ("OutputSchemaName", "dbo"),
            ("OutputTableName", "BlitzFirst"),
        ]
