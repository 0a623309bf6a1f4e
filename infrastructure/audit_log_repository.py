"""
Audit Log Repository - FRK_JobExecutionLog access.

Each method runs as its own unit of work so that the entry inserted at the
start of a run is durable before any diagnostic call is made.

Exports:
    AuditLogRepository: SQL Server implementation of IAuditLogRepository
"""

from typing import List, Optional

from config import SqlServerConfig
from core.models import JobLogEntry
from core.schema import AuditLogDDL

from .interface_repository import IAuditLogRepository
from .sqlserver import SqlServerRepository


_SELECT_COLUMNS = "JobLogID, JobName, StepName, StartTime, EndTime, Success, ErrorMessage"


class AuditLogRepository(SqlServerRepository, IAuditLogRepository):
    """Repository for msdb.dbo.FRK_JobExecutionLog."""

    def __init__(self, sql_config: Optional[SqlServerConfig] = None):
        super().__init__(sql_config, database="msdb")
        self.table = AuditLogDDL.table_name()

    @staticmethod
    def _row_to_entry(row) -> JobLogEntry:
        return JobLogEntry(
            job_log_id=row[0],
            job_name=row[1],
            step_name=row[2],
            start_time=row[3],
            end_time=row[4],
            success=None if row[5] is None else bool(row[5]),
            error_message=row[6],
        )

    def start_entry(self, job_name: str, step_name: str) -> int:
        with self._error_context("audit log insert", job_name):
            row = self._execute(
                f"INSERT INTO {self.table} (JobName, StepName, StartTime) "
                "OUTPUT INSERTED.JobLogID VALUES (?, ?, SYSDATETIME())",
                (job_name, step_name), fetch="one"
            )
            job_log_id = int(row[0])
            self.logger.debug(f"📝 Opened audit log entry {job_log_id} for {job_name}")
            return job_log_id

    def complete_entry(self, job_log_id: int) -> None:
        with self._error_context("audit log completion", str(job_log_id)):
            self._execute(
                f"UPDATE {self.table} SET EndTime=SYSDATETIME(), Success=1 WHERE JobLogID=?",
                (job_log_id,)
            )

    def fail_entry(self, job_log_id: int, error_message: str) -> None:
        with self._error_context("audit log failure update", str(job_log_id)):
            self._execute(
                f"UPDATE {self.table} SET EndTime=SYSDATETIME(), Success=0, ErrorMessage=? "
                "WHERE JobLogID=?",
                (error_message, job_log_id)
            )

    def list_entries(self, job_name: Optional[str] = None) -> List[JobLogEntry]:
        with self._error_context("audit log listing", job_name):
            if job_name is None:
                rows = self._execute(
                    f"SELECT {_SELECT_COLUMNS} FROM {self.table} ORDER BY JobLogID",
                    fetch="all"
                )
            else:
                rows = self._execute(
                    f"SELECT {_SELECT_COLUMNS} FROM {self.table} WHERE JobName=? ORDER BY JobLogID",
                    (job_name,), fetch="all"
                )
            return [self._row_to_entry(row) for row in rows or []]

    def list_open_entries(self) -> List[JobLogEntry]:
        with self._error_context("open audit log listing"):
            rows = self._execute(
                f"SELECT {_SELECT_COLUMNS} FROM {self.table} "
                "WHERE EndTime IS NULL OR Success IS NULL ORDER BY JobLogID",
                fetch="all"
            )
            return [self._row_to_entry(row) for row in rows or []]
