"""
SQL Agent Repository - msdb job management.

Implements IAgentRepository against msdb with the documented SQL Agent
procedures. Every value reaches the server as a bound parameter; only the
audit log DDL and CREATE/DROP DATABASE are composed as text, through
core.schema.

    principal lookup     sys.server_principals
    category             msdb.dbo.syscategories / sp_add_category
    jobs                 msdb.dbo.sysjobs / sp_delete_job / sp_add_job
    steps                sp_add_jobstep
    schedules            sp_add_jobschedule
    job server           sp_add_jobserver

Exports:
    AgentRepository: msdb implementation of IAgentRepository
"""

from typing import List, Optional

from config import SqlServerConfig
from config.defaults import FrkDefaults
from core.models import JobDefinition
from core.schema import AuditLogDDL, DatabaseDDL, like_prefix

from .interface_repository import IAgentRepository
from .sqlserver import SqlServerRepository


class AgentRepository(SqlServerRepository, IAgentRepository):
    """
    msdb repository for the reconciler.

    All methods except create_database/drop_database run on the
    transaction() connection when one is open.
    """

    def __init__(self, sql_config: Optional[SqlServerConfig] = None):
        super().__init__(sql_config, database="msdb")

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def principal_exists(self, principal: str) -> bool:
        with self._error_context("principal lookup", principal):
            row = self._execute(
                "SELECT 1 FROM sys.server_principals WHERE name = ?",
                (principal,), fetch="one"
            )
            return row is not None

    def database_exists(self, database_name: str) -> bool:
        with self._error_context("database lookup", database_name):
            row = self._execute(
                "SELECT 1 FROM sys.databases WHERE name = ?",
                (database_name,), fetch="one"
            )
            return row is not None

    def category_exists(self, category_name: str) -> bool:
        with self._error_context("category lookup", category_name):
            row = self._execute(
                "SELECT 1 FROM msdb.dbo.syscategories WHERE name = ? AND category_class = 1",
                (category_name,), fetch="one"
            )
            return row is not None

    def list_jobs(self, name_prefix: str = FrkDefaults.JOB_NAME_PREFIX) -> List[str]:
        with self._error_context("job listing", name_prefix):
            rows = self._execute(
                "SELECT name FROM msdb.dbo.sysjobs WHERE name LIKE ? ORDER BY name",
                (like_prefix(name_prefix),), fetch="all"
            )
            return [row[0] for row in rows or []]

    def audit_log_exists(self) -> bool:
        with self._error_context("audit log lookup", FrkDefaults.AUDIT_LOG_TABLE):
            row = self._execute(AuditLogDDL.exists_query(), (AuditLogDDL.table_name(),), fetch="one")
            return bool(row and row[0])

    # ========================================================================
    # DATABASE (not transactional)
    # ========================================================================

    def create_database(self, database_name: str) -> None:
        with self._error_context("database creation", database_name):
            with self._autocommit_connection() as conn:
                conn.cursor().execute(DatabaseDDL.create(database_name))
            self.logger.info(f"✅ Created database {database_name}")

    def drop_database(self, database_name: str) -> None:
        with self._error_context("database drop", database_name):
            with self._autocommit_connection() as conn:
                conn.cursor().execute(DatabaseDDL.drop(database_name))
            self.logger.warning(f"🗑️ Dropped database {database_name}")

    # ========================================================================
    # CATEGORY, JOBS, AUDIT LOG
    # ========================================================================

    def create_category(self, category_name: str) -> None:
        with self._error_context("category creation", category_name):
            self._execute(
                "EXEC msdb.dbo.sp_add_category @class=N'JOB', @type=N'LOCAL', @name=?",
                (category_name,)
            )
            self.logger.info(f"✅ FRK job category created: {category_name}")

    def delete_job(self, job_name: str) -> None:
        with self._error_context("job deletion", job_name):
            self._execute("EXEC msdb.dbo.sp_delete_job @job_name=?", (job_name,))
            self.logger.info(f"🗑️ Deleted job {job_name}")

    def create_audit_log(self) -> None:
        with self._error_context("audit log creation", FrkDefaults.AUDIT_LOG_TABLE):
            self._execute(AuditLogDDL.create_if_absent())

    def create_job(self, job: JobDefinition) -> None:
        with self._error_context("job creation", job.name):
            self._execute(
                "EXEC msdb.dbo.sp_add_job @job_name=?, @owner_login_name=?, @category_name=?",
                (job.name, job.owner, job.category)
            )

            step_sql = (
                "EXEC msdb.dbo.sp_add_jobstep @job_name=?, @step_name=?, @subsystem=?, "
                "@command=?, @on_success_action=?, @on_fail_action=?"
            )
            step_params = [
                job.name, job.step_name, job.subsystem.value, job.command,
                int(job.on_success_action), int(job.on_fail_action),
            ]
            if job.step_database:
                step_sql += ", @database_name=?"
                step_params.append(job.step_database)
            self._execute(step_sql, step_params)

            for schedule in job.schedules:
                self._execute(
                    "EXEC msdb.dbo.sp_add_jobschedule @job_name=?, @name=?, @freq_type=?, "
                    "@freq_interval=?, @freq_recurrence_factor=?, @active_start_time=?",
                    (job.name, schedule.name, int(schedule.freq_type), schedule.freq_interval,
                     schedule.freq_recurrence_factor, schedule.active_start_time)
                )

            self._execute(
                "EXEC msdb.dbo.sp_add_jobserver @job_name=?, @server_name=?",
                (job.name, job.server_name)
            )
            self.logger.info(
                f"✅ Created job {job.name} ({len(job.schedules)} schedule(s))",
                extra={'custom_dimensions': job.summary()}
            )
