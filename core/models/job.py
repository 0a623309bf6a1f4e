"""
FRK Job Models.

Pydantic models describing a SQL Server Agent job the reconciler installs:
one step, its schedules, owner, category and target server.

Exports:
    JobSchedule: One sp_add_jobschedule entry
    JobDefinition: One fully resolved job ready for sp_add_job
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .enums import FrequencyType, JobKind, JobSubsystem, StepAction


class JobSchedule(BaseModel):
    """
    Schedule entry in SQL Agent encoding.

    active_start_time is HHMMSS as an integer (20000 = 02:00:00).
    freq_interval is 1 for daily schedules and a Weekday bitmask for weekly.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=128, description="Schedule name")
    freq_type: FrequencyType = Field(..., description="Daily (4) or weekly (8)")
    freq_interval: int = Field(..., ge=1, description="Every N days, or weekday bitmask")
    freq_recurrence_factor: int = Field(
        default=0,
        ge=0,
        description="Weeks between runs for weekly schedules (0 for daily)"
    )
    active_start_time: int = Field(..., ge=0, le=235959, description="HHMMSS")

    @field_validator("active_start_time")
    @classmethod
    def _valid_time_of_day(cls, v: int) -> int:
        hours, rest = divmod(v, 10000)
        minutes, seconds = divmod(rest, 100)
        if hours > 23 or minutes > 59 or seconds > 59:
            raise ValueError(f"active_start_time {v} is not a valid HHMMSS time")
        return v

    @property
    def start_time_display(self) -> str:
        """Start time as HH:MM:SS."""
        hours, rest = divmod(self.active_start_time, 10000)
        minutes, seconds = divmod(rest, 100)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


class JobDefinition(BaseModel):
    """
    One FRK job with its single step, resolved against a configuration.

    The command is the rendered step body; two definitions built from the
    same configuration compare equal.
    """

    model_config = ConfigDict(frozen=True)

    kind: JobKind
    name: str = Field(..., min_length=1, max_length=128)
    step_name: str = Field(..., min_length=1, max_length=128)
    subsystem: JobSubsystem
    owner: str = Field(..., description="owner_login_name")
    category: str = Field(..., description="category_name")
    command: str = Field(..., min_length=1, description="Rendered step body")
    step_database: Optional[str] = Field(
        default=None,
        description="Database the T-SQL step runs in (None = msdb default)"
    )
    schedules: List[JobSchedule] = Field(default_factory=list)
    on_success_action: StepAction = StepAction.QUIT_WITH_SUCCESS
    on_fail_action: StepAction = StepAction.QUIT_WITH_FAILURE
    server_name: str = Field(default="(local)", description="sp_add_jobserver target")

    def summary(self) -> dict:
        """Operator-facing summary (command omitted)."""
        return {
            "name": self.name,
            "step_name": self.step_name,
            "subsystem": self.subsystem.value,
            "owner": self.owner,
            "category": self.category,
            "step_database": self.step_database,
            "schedules": [
                {
                    "name": s.name,
                    "freq_type": int(s.freq_type),
                    "freq_interval": s.freq_interval,
                    "start": s.start_time_display,
                }
                for s in self.schedules
            ] or "manual",
        }
