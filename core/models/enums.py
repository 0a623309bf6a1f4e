"""
Pure Enumeration Types for the FRK Job Catalog.

Defines the job kinds and the SQL Server Agent encodings used when the jobs
are registered. No business logic - pure type definitions only.

Exports:
    JobKind: The five FRK jobs
    JobSubsystem: SQL Agent step subsystem
    FrequencyType: sp_add_jobschedule @freq_type values
    Weekday: sp_add_jobschedule @freq_interval bitmask for weekly schedules
    StepAction: sp_add_jobstep @on_success_action / @on_fail_action values
    StepOutcome: Outcome of one reconciler step
"""

from enum import Enum, IntEnum


class JobKind(str, Enum):
    """
    The five jobs installed by every deployment.

    Four are audit-wrapped T-SQL bodies; EXPORT is a PowerShell step with
    no schedule (manual trigger only).
    """

    DAILY = "daily"
    PEAK = "peak"
    WEEKLY_INDEX = "weekly_index"
    CLEANUP = "cleanup"
    EXPORT = "export"


class JobSubsystem(str, Enum):
    """SQL Agent step subsystem names (sp_add_jobstep @subsystem)."""

    TSQL = "TSQL"
    POWERSHELL = "PowerShell"


class FrequencyType(IntEnum):
    """sp_add_jobschedule @freq_type."""

    DAILY = 4
    WEEKLY = 8


class Weekday(IntEnum):
    """
    Weekly schedule bitmask (sp_add_jobschedule @freq_interval when
    @freq_type = 8). Values can be OR-ed for multi-day schedules.
    """

    SUNDAY = 1
    MONDAY = 2
    TUESDAY = 4
    WEDNESDAY = 8
    THURSDAY = 16
    FRIDAY = 32
    SATURDAY = 64


class StepAction(IntEnum):
    """sp_add_jobstep completion actions."""

    QUIT_WITH_SUCCESS = 1
    QUIT_WITH_FAILURE = 2


class StepOutcome(str, Enum):
    """Result of a single reconciler step."""

    SUCCESS = "success"
    SKIPPED = "skipped"  # Already in the desired state
    FAILED = "failed"
