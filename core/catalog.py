# ============================================================================
# FRK JOB CATALOG
# ============================================================================
# STATUS: Core - Single source of truth for the five FRK jobs
# PURPOSE: Job names, step names, diagnostic calls and schedules
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
FRK Job Catalog.

Every deployment installs exactly these five jobs. The catalog is
configuration-independent: the storage database, owner and category are
applied by the reconciler, and the rendered body comes from the script
template generator.

    Job                                   Schedule
    FRK - Daily Health Check              daily 02:00:00
    FRK - Peak Hour Performance Snapshot  daily 10:30:00 and 14:30:00
    FRK - Weekly Index Analysis           weekly Sunday 22:00:00
    FRK - Weekly Data Cleanup             weekly Saturday 23:00:00
    FRK - Export Raw Data Locally         manual only

Exports:
    JobSpec: Catalog entry for one job kind
    JOB_KINDS: Kinds in installation order
    get_spec: Catalog lookup
    job_name: Full job name for a kind
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from config.defaults import FrkDefaults
from exceptions import ContractViolationError

from .models.diagnostics import DiagnosticCall
from .models.enums import FrequencyType, JobKind, JobSubsystem, Weekday
from .models.job import JobSchedule


@dataclass(frozen=True)
class JobSpec:
    """
    Catalog entry for one job kind.

    Attributes:
        kind: Job kind
        suffix: Name after the FRK prefix
        step_name: The job's only step
        subsystem: TSQL or PowerShell
        calls: Diagnostic calls in execution order (empty for cleanup/export)
        schedules: Schedule entries (empty = manual trigger only)
        runs_in_storage_database: Step @database_name is the storage database
    """
    kind: JobKind
    suffix: str
    step_name: str
    subsystem: JobSubsystem
    calls: Tuple[DiagnosticCall, ...] = ()
    schedules: Tuple[JobSchedule, ...] = ()
    runs_in_storage_database: bool = False
    description: str = field(default="", compare=False)

    @property
    def name(self) -> str:
        return f"{FrkDefaults.JOB_NAME_PREFIX}{self.suffix}"

    @property
    def audit_wrapped(self) -> bool:
        """T-SQL bodies write the audit log; the PowerShell export does not."""
        return self.subsystem is JobSubsystem.TSQL

    @property
    def output_tables(self) -> List[str]:
        return [call.output_table for call in self.calls]


def _daily(name: str, start: int) -> JobSchedule:
    return JobSchedule(
        name=name,
        freq_type=FrequencyType.DAILY,
        freq_interval=1,
        active_start_time=start,
    )


def _weekly(name: str, day: Weekday, start: int) -> JobSchedule:
    return JobSchedule(
        name=name,
        freq_type=FrequencyType.WEEKLY,
        freq_interval=int(day),
        freq_recurrence_factor=1,
        active_start_time=start,
    )


# ============================================================================
# CATALOG
# ============================================================================

_CATALOG: Dict[JobKind, JobSpec] = {
    JobKind.DAILY: JobSpec(
        kind=JobKind.DAILY,
        suffix="Daily Health Check",
        step_name="Execute Full Health Check Suite",
        subsystem=JobSubsystem.TSQL,
        calls=(
            DiagnosticCall(procedure="sp_Blitz",
                           parameters={"CheckUserDatabaseObjects": 0},
                           output_table="Blitz"),
            DiagnosticCall(procedure="sp_BlitzFirst",
                           parameters={"ExpertMode": 1, "Seconds": 60},
                           output_table="BlitzFirst"),
            DiagnosticCall(procedure="sp_BlitzCache",
                           parameters={"SortOrder": "cpu", "Top": 25},
                           output_table="BlitzCache"),
            DiagnosticCall(procedure="sp_BlitzWho",
                           output_table="BlitzWho"),
        ),
        schedules=(_daily("FRK_Daily_0200", 20000),),
        description="Overall health, triage (60s sample), top 25 plans by CPU, active sessions",
    ),
    JobKind.PEAK: JobSpec(
        kind=JobKind.PEAK,
        suffix="Peak Hour Performance Snapshot",
        step_name="Execute Peak Hour Data Capture",
        subsystem=JobSubsystem.TSQL,
        calls=(
            DiagnosticCall(procedure="sp_BlitzFirst",
                           parameters={"ExpertMode": 1, "Seconds": 30},
                           output_table="BlitzFirst_Peak"),
            DiagnosticCall(procedure="sp_BlitzWho",
                           output_table="BlitzWho_Peak"),
        ),
        schedules=(
            _daily("FRK_Peak_Morning_1030", 103000),
            _daily("FRK_Peak_Afternoon_1430", 143000),
        ),
        description="Triage (30s sample) and active sessions at peak hours",
    ),
    JobKind.WEEKLY_INDEX: JobSpec(
        kind=JobKind.WEEKLY_INDEX,
        suffix="Weekly Index Analysis",
        step_name="Execute Index Deep Dive Analysis",
        subsystem=JobSubsystem.TSQL,
        calls=(
            DiagnosticCall(procedure="sp_BlitzIndex",
                           parameters={"GetAllDatabases": 1, "Mode": 4},
                           output_table="BlitzIndex"),
        ),
        schedules=(_weekly("FRK_Weekly_Index_Sunday", Weekday.SUNDAY, 220000),),
        description="Index usage and missing index analysis across all databases",
    ),
    JobKind.CLEANUP: JobSpec(
        kind=JobKind.CLEANUP,
        suffix="Weekly Data Cleanup",
        step_name="Execute Data Retention Cleanup",
        subsystem=JobSubsystem.TSQL,
        schedules=(_weekly("FRK_Weekly_Cleanup_Saturday", Weekday.SATURDAY, 230000),),
        runs_in_storage_database=True,
        description="Drop Blitz output tables older than the retention period",
    ),
    JobKind.EXPORT: JobSpec(
        kind=JobKind.EXPORT,
        suffix="Export Raw Data Locally",
        step_name="Export Raw CSV Files to Local Path",
        subsystem=JobSubsystem.POWERSHELL,
        description="Write Blitz tables created in the last day to dated CSV files",
    ),
}

JOB_KINDS: Tuple[JobKind, ...] = (
    JobKind.DAILY,
    JobKind.PEAK,
    JobKind.WEEKLY_INDEX,
    JobKind.CLEANUP,
    JobKind.EXPORT,
)


def get_spec(kind) -> JobSpec:
    """
    Catalog lookup by JobKind or its string value.

    Raises:
        ContractViolationError: Unknown kind
    """
    try:
        return _CATALOG[JobKind(kind)]
    except (ValueError, KeyError):
        raise ContractViolationError(
            f"Unknown FRK job kind {kind!r}; expected one of {[k.value for k in JOB_KINDS]}"
        ) from None


def job_name(kind) -> str:
    return get_spec(kind).name
