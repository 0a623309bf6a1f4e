"""
Repository Abstract Base Classes - Single Point of Truth.

Enforces exact method signatures across the SQL Server implementations and
the in-memory doubles used by the tests. All parameter names, return types,
and method signatures are defined here and nowhere else.

Philosophy: "Define once, enforce everywhere"

Exports:
    IAgentRepository: msdb / SQL Agent host interface used by the reconciler
    IAuditLogRepository: FRK_JobExecutionLog interface used by job runs
    IOutputTableRepository: Storage database interface (diagnostics, cleanup, export)
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from typing import List, Optional

import pandas as pd

from core.models import DiagnosticCall, JobDefinition, JobLogEntry, OutputTable


# ============================================================================
# SQL AGENT HOST
# ============================================================================

class IAgentRepository(ABC):
    """
    SQL Server Agent host interface with EXACT method signatures.

    Everything except create_database/drop_database participates in the
    unit of work opened by transaction(). CREATE DATABASE cannot run inside
    a multi-statement transaction on SQL Server, so callers must order it
    before transaction() and compensate it themselves.
    """

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """Unit of work: commit on normal exit, roll back on exception."""
        pass

    @abstractmethod
    def principal_exists(self, principal: str) -> bool:
        """True when principal is in sys.server_principals"""
        pass

    @abstractmethod
    def database_exists(self, database_name: str) -> bool:
        pass

    @abstractmethod
    def create_database(self, database_name: str) -> None:
        """CREATE DATABASE with host defaults. Not transactional."""
        pass

    @abstractmethod
    def drop_database(self, database_name: str) -> None:
        """DROP DATABASE. Not transactional."""
        pass

    @abstractmethod
    def category_exists(self, category_name: str) -> bool:
        """True when a LOCAL JOB category with this name exists"""
        pass

    @abstractmethod
    def create_category(self, category_name: str) -> None:
        pass

    @abstractmethod
    def list_jobs(self, name_prefix: str) -> List[str]:
        """Names of jobs whose name starts with name_prefix, sorted"""
        pass

    @abstractmethod
    def delete_job(self, job_name: str) -> None:
        pass

    @abstractmethod
    def audit_log_exists(self) -> bool:
        pass

    @abstractmethod
    def create_audit_log(self) -> None:
        """Create the audit log table if absent. Never drops it."""
        pass

    @abstractmethod
    def create_job(self, job: JobDefinition) -> None:
        """Add job, its step, its schedules and attach it to the job server"""
        pass


# ============================================================================
# AUDIT LOG
# ============================================================================

class IAuditLogRepository(ABC):
    """
    FRK_JobExecutionLog interface.

    Each call is its own unit of work: an entry inserted by start_entry()
    stays even when the job body fails afterwards.
    """

    @abstractmethod
    def start_entry(self, job_name: str, step_name: str) -> int:
        """Insert an open entry (StartTime = now) and return its JobLogID"""
        pass

    @abstractmethod
    def complete_entry(self, job_log_id: int) -> None:
        """EndTime = now, Success = 1"""
        pass

    @abstractmethod
    def fail_entry(self, job_log_id: int, error_message: str) -> None:
        """EndTime = now, Success = 0, ErrorMessage = error_message"""
        pass

    @abstractmethod
    def list_entries(self, job_name: Optional[str] = None) -> List[JobLogEntry]:
        """Entries ordered by JobLogID, optionally for one job"""
        pass

    @abstractmethod
    def list_open_entries(self) -> List[JobLogEntry]:
        """Entries with EndTime or Success still NULL"""
        pass


# ============================================================================
# STORAGE DATABASE
# ============================================================================

class IOutputTableRepository(ABC):
    """
    Storage database interface: runs the diagnostic procedures that create
    the output tables, lists them, drops them and reads them for export.
    """

    @abstractmethod
    def run_diagnostic(self, call: DiagnosticCall, output_database: str) -> None:
        """Execute one diagnostic procedure writing to output_database"""
        pass

    @abstractmethod
    def list_output_tables(self, name_prefix: str, schema: str = "dbo") -> List[OutputTable]:
        """Tables whose name starts with name_prefix, with their create_date"""
        pass

    @abstractmethod
    def execute_batch(self, batch: str) -> None:
        """Execute one statement batch as a single unit"""
        pass

    @abstractmethod
    def fetch_table(self, table_name: str, schema: str = "dbo") -> pd.DataFrame:
        """All rows of one table"""
        pass
