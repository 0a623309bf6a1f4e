"""
In-memory SQL Server double.

Implements the three repository interfaces over plain dicts with the same
transactional limits as the real host:

    - transaction() snapshots categories, jobs and the audit log table and
      restores them when the block raises
    - databases are NOT restored (CREATE DATABASE runs outside the
      transaction on the real host)
    - audit log writes are never rolled back by a later failure

fail_on(method, exc, match=...) injects a failure into one method, optionally
only when its first argument matches.
"""

import copy
import re
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from core.models import DiagnosticCall, JobDefinition, JobLogEntry, OutputTable
from infrastructure.interface_repository import (
    IAgentRepository,
    IAuditLogRepository,
    IOutputTableRepository,
)

_DROP_STATEMENT = re.compile(r"DROP TABLE \[((?:[^\]]|\]\])+)\]\.\[((?:[^\]]|\]\])+)\]")


class FakeClock:
    """Settable clock; every call returns the current value."""

    def __init__(self, now: Optional[datetime] = None):
        self.now = now or datetime(2026, 10, 19, 14, 30, 0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class FakeSqlServer(IAgentRepository, IAuditLogRepository, IOutputTableRepository):
    """One SQL Server instance: msdb, the agent and one storage database."""

    def __init__(self, principals=("svc_frk",), clock: Optional[FakeClock] = None):
        self.clock = clock or FakeClock()
        self.principals = set(principals)
        self.databases = {"master", "model", "msdb", "tempdb"}
        self.categories = set()
        self.jobs: Dict[str, JobDefinition] = {}
        self.audit_log_table = False
        self.audit_entries: Dict[int, JobLogEntry] = {}
        self.tables: Dict[str, Tuple[datetime, pd.DataFrame]] = {}
        self.diagnostic_calls: List[Tuple[str, str, str]] = []
        self.executed_batches: List[str] = []
        self.audit_log_creations = 0
        self._next_log_id = 1
        self._failures: Dict[str, Tuple[Exception, Optional[Any]]] = {}
        self._in_transaction = False

    # ========================================================================
    # TEST HELPERS
    # ========================================================================

    def fail_on(self, method: str, exc: Exception, match: Any = None) -> None:
        self._failures[method] = (exc, match)

    def _maybe_fail(self, method: str, subject: Any = None) -> None:
        if method not in self._failures:
            return
        exc, match = self._failures[method]
        if match is None or match == subject:
            raise exc

    def add_table(self, name: str, create_date: datetime, frame: Optional[pd.DataFrame] = None) -> None:
        if frame is None:
            frame = pd.DataFrame({"CheckID": [1, 2], "Finding": ["a", "b"]})
        self.tables[name] = (create_date, frame)

    def snapshot(self) -> Dict[str, Any]:
        """Everything a deployment can change."""
        return {
            "databases": set(self.databases),
            "categories": set(self.categories),
            "jobs": dict(self.jobs),
            "audit_log_table": self.audit_log_table,
        }

    # ========================================================================
    # IAgentRepository
    # ========================================================================

    @contextmanager
    def transaction(self):
        if self._in_transaction:
            raise RuntimeError("Nested transactions are not supported")
        saved = (set(self.categories), dict(self.jobs), self.audit_log_table)
        self._in_transaction = True
        try:
            yield self
        except Exception:
            self.categories, self.jobs, self.audit_log_table = saved
            raise
        finally:
            self._in_transaction = False

    def principal_exists(self, principal: str) -> bool:
        self._maybe_fail("principal_exists", principal)
        return principal in self.principals

    def database_exists(self, database_name: str) -> bool:
        return database_name.lower() in {db.lower() for db in self.databases}

    def create_database(self, database_name: str) -> None:
        self._maybe_fail("create_database", database_name)
        self.databases.add(database_name)

    def drop_database(self, database_name: str) -> None:
        self._maybe_fail("drop_database", database_name)
        self.databases.discard(database_name)

    def category_exists(self, category_name: str) -> bool:
        return category_name in self.categories

    def create_category(self, category_name: str) -> None:
        self._maybe_fail("create_category", category_name)
        self.categories.add(category_name)

    def list_jobs(self, name_prefix: str) -> List[str]:
        return sorted(name for name in self.jobs if name.lower().startswith(name_prefix.lower()))

    def delete_job(self, job_name: str) -> None:
        self._maybe_fail("delete_job", job_name)
        del self.jobs[job_name]

    def audit_log_exists(self) -> bool:
        return self.audit_log_table

    def create_audit_log(self) -> None:
        self._maybe_fail("create_audit_log")
        self.audit_log_table = True
        self.audit_log_creations += 1

    def create_job(self, job: JobDefinition) -> None:
        self._maybe_fail("create_job", job.name)
        if job.name in self.jobs:
            raise RuntimeError(f"The specified @job_name ('{job.name}') already exists.")
        self.jobs[job.name] = copy.deepcopy(job)

    # ========================================================================
    # IAuditLogRepository
    # ========================================================================

    def _require_audit_log(self) -> None:
        if not self.audit_log_table:
            raise RuntimeError("Invalid object name 'msdb.dbo.FRK_JobExecutionLog'.")

    def start_entry(self, job_name: str, step_name: str) -> int:
        self._require_audit_log()
        job_log_id = self._next_log_id
        self._next_log_id += 1
        self.audit_entries[job_log_id] = JobLogEntry(
            job_log_id=job_log_id,
            job_name=job_name,
            step_name=step_name,
            start_time=self.clock(),
        )
        return job_log_id

    def _close(self, job_log_id: int, success: bool, error_message: Optional[str]) -> None:
        self._require_audit_log()
        entry = self.audit_entries[job_log_id]
        self.audit_entries[job_log_id] = entry.model_copy(update={
            "end_time": self.clock(),
            "success": success,
            "error_message": error_message,
        })

    def complete_entry(self, job_log_id: int) -> None:
        self._maybe_fail("complete_entry", job_log_id)
        self._close(job_log_id, True, None)

    def fail_entry(self, job_log_id: int, error_message: str) -> None:
        self._close(job_log_id, False, error_message)

    def list_entries(self, job_name: Optional[str] = None) -> List[JobLogEntry]:
        return [
            entry for _, entry in sorted(self.audit_entries.items())
            if job_name is None or entry.job_name == job_name
        ]

    def list_open_entries(self) -> List[JobLogEntry]:
        return [entry for entry in self.list_entries() if entry.is_open]

    # ========================================================================
    # IOutputTableRepository
    # ========================================================================

    def run_diagnostic(self, call: DiagnosticCall, output_database: str) -> None:
        self._maybe_fail("run_diagnostic", call.procedure)
        self.diagnostic_calls.append((call.procedure, output_database, call.output_table))
        if call.output_table not in self.tables:
            self.add_table(call.output_table, self.clock())

    def list_output_tables(self, name_prefix: str, schema: str = "dbo") -> List[OutputTable]:
        self._maybe_fail("list_output_tables", name_prefix)
        return [
            OutputTable(name=name, create_date=created)
            for name, (created, _) in sorted(self.tables.items())
            if name.lower().startswith(name_prefix.lower())
        ]

    def execute_batch(self, batch: str) -> None:
        self._maybe_fail("execute_batch", batch)
        self.executed_batches.append(batch)
        for _schema, table in _DROP_STATEMENT.findall(batch):
            del self.tables[table.replace("]]", "]")]

    def fetch_table(self, table_name: str, schema: str = "dbo") -> pd.DataFrame:
        self._maybe_fail("fetch_table", table_name)
        return self.tables[table_name][1].copy()
