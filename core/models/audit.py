# ============================================================================
# FRK AUDIT LOG MODELS
# ============================================================================
# STATUS: Core - Job run audit trail
# PURPOSE: One row of msdb.dbo.FRK_JobExecutionLog per job invocation
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Audit Log Models.

Pydantic model for the FRK_JobExecutionLog table. Every job body inserts one
entry before doing any work and closes it on completion or failure.

Lifecycle:
    open      EndTime NULL, Success NULL (in flight, or crashed)
    succeeded EndTime set, Success = 1, ErrorMessage NULL
    failed    EndTime set, Success = 0, ErrorMessage set

A crashed run leaves its entry open forever; nothing closes it
automatically. audit_report() in the deployment service lists them.

Exports:
    JobLogEntry: One audit log row
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, model_validator


class JobLogEntry(BaseModel):
    """
    Database representation of one job invocation.

    Fields mirror the table columns:
    - job_log_id: JobLogID (IDENTITY)
    - job_name / step_name: which job and step ran
    - start_time: StartTime (DEFAULT SYSDATETIME())
    - end_time: EndTime (NULL until completion)
    - success: Success (NULL until completion)
    - error_message: ErrorMessage (NULL unless failed)
    """

    model_config = ConfigDict()

    @field_serializer('start_time', 'end_time')
    @classmethod
    def serialize_datetime(cls, v: datetime) -> Optional[str]:
        return v.isoformat() if v else None

    job_log_id: int = Field(..., ge=1, description="JobLogID")
    job_name: str = Field(..., description="JobName")
    step_name: str = Field(..., description="StepName")
    start_time: datetime = Field(..., description="StartTime")
    end_time: Optional[datetime] = Field(default=None, description="EndTime")
    success: Optional[bool] = Field(default=None, description="Success")
    error_message: Optional[str] = Field(default=None, description="ErrorMessage")

    @model_validator(mode="after")
    def _end_after_start(self) -> "JobLogEntry":
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError("EndTime precedes StartTime")
        return self

    @property
    def is_open(self) -> bool:
        """In flight, or the run crashed before closing its entry."""
        return self.end_time is None or self.success is None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()
