# ============================================================================
# FRK JOB RUNNER
# ============================================================================
# STATUS: Service - Manual/CLI execution of the FRK job bodies
# PURPOSE: Run one job kind from Python with the same audit log envelope
#          the installed T-SQL step uses
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
FRK Job Runner.

Executes a job body outside SQL Agent (ad-hoc runs, CI smoke checks) with
the audit log contract of the installed step:

    start_entry()  -> JobLogID, StartTime set, EndTime/Success NULL
    body           -> diagnostic calls in catalog order, or the cleanup
    complete_entry -> EndTime set, Success = 1
    on error       -> fail_entry (EndTime, Success = 0, ErrorMessage), re-raise

The first failing diagnostic call stops the run; later calls are not
attempted. The export kind is not audit-wrapped and is delegated to the
ExportService as-is.

Exports:
    JobRunner: Executes one job kind
    JobRunResult: Outcome of one run
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from config.frk_config import FrkConfig
from core.catalog import JobSpec, get_spec
from core.models import JobKind
from core.schema.script_templates import describe_call
from exceptions import ContractViolationError, RetentionGuardError, TaskRuntimeError
from util_logger import LoggerFactory, ComponentType

from .export_service import ExportService
from .retention_cleanup import RetentionCleanupService

logger = LoggerFactory.create_logger(ComponentType.JOB, "JobRunner")


@dataclass
class JobRunResult:
    """Result of one job run."""
    job_name: str
    step_name: str
    job_log_id: Optional[int] = None
    success: bool = False
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None
    calls: List[str] = field(default_factory=list)
    details: Dict[str, Any] = field(default_factory=dict)

    def complete(self, details: Optional[Dict[str, Any]] = None) -> None:
        self.success = True
        self.completed_at = datetime.now(timezone.utc)
        if details:
            self.details.update(details)

    @property
    def duration_ms(self) -> Optional[int]:
        if self.completed_at:
            return int((self.completed_at - self.started_at).total_seconds() * 1000)
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "job_name": self.job_name,
            "step_name": self.step_name,
            "job_log_id": self.job_log_id,
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_ms": self.duration_ms,
            "calls": self.calls,
            "details": self.details,
        }


class JobRunner:
    """
    Runs FRK job bodies against the storage database.

    Usage:
        runner = JobRunner(AuditLogRepository(), OutputTableRepository("DBAtools"))
        result = runner.run(JobKind.DAILY, config)
    """

    def __init__(
        self,
        audit_repo,
        output_repo,
        cleanup_service: Optional[RetentionCleanupService] = None,
        export_service: Optional[ExportService] = None,
    ):
        self.audit_repo = audit_repo
        self.output_repo = output_repo
        self.cleanup_service = cleanup_service or RetentionCleanupService(output_repo)
        self.export_service = export_service or ExportService(output_repo)

    def run(self, kind, config: FrkConfig) -> JobRunResult:
        """
        Run one job kind.

        Raises:
            RetentionGuardError: Cleanup refused (recorded in the audit log)
            TaskRuntimeError: The body failed (recorded in the audit log)
            ExportPartialFailure: Export kind, one or more tables not written
        """
        if not isinstance(config, FrkConfig):
            raise ContractViolationError(
                f"JobRunner needs a FrkConfig, got {type(config).__name__}"
            )
        spec = get_spec(kind)
        if not spec.audit_wrapped:
            return self._run_export(spec, config)
        if spec.kind is JobKind.CLEANUP:
            return self.run_cleanup(config.retention_days, config.database_name)
        return self._run_audited(
            spec, config.database_name,
            lambda result, run_logger: self._run_calls(spec, config, result, run_logger),
        )

    def run_cleanup(self, retention_days: int, database_name: Optional[str] = None) -> JobRunResult:
        """
        Run the cleanup body with the retention value read at run time.

        The value is not held to the deployment floor here: the guard runs
        inside the audit envelope, so a refused run leaves a failed entry.

        Raises:
            RetentionGuardError: retention_days below the floor; nothing dropped
            TaskRuntimeError: The cleanup failed
        """
        spec = get_spec(JobKind.CLEANUP)

        def body(result: JobRunResult, run_logger) -> None:
            cleanup = self.cleanup_service.run(retention_days)
            result.details.update(cleanup.to_dict())

        return self._run_audited(spec, database_name, body)

    def _run_audited(self, spec: JobSpec, database_name: Optional[str],
                     body: Callable[[JobRunResult, Any], None]) -> JobRunResult:
        job_log_id = self.audit_repo.start_entry(spec.name, spec.step_name)
        run_logger = LoggerFactory.create_with_context(
            ComponentType.JOB, "JobRunner",
            job_name=spec.name, step_name=spec.step_name,
            job_log_id=job_log_id, database=database_name,
        )
        result = JobRunResult(job_name=spec.name, step_name=spec.step_name, job_log_id=job_log_id)
        run_logger.info(f"▶️ {spec.name} started (JobLogID {job_log_id})")

        try:
            body(result, run_logger)
        except RetentionGuardError as e:
            run_logger.error(f"🛑 {spec.name} refused: {e}")
            self.audit_repo.fail_entry(job_log_id, str(e))
            raise
        except Exception as e:
            run_logger.error(f"❌ {spec.name} failed: {e}", exc_info=True)
            self.audit_repo.fail_entry(job_log_id, str(e))
            raise TaskRuntimeError(spec.name, spec.step_name, str(e), job_log_id) from e

        self.audit_repo.complete_entry(job_log_id)
        result.complete()
        run_logger.info(f"✅ {spec.name} completed in {result.duration_ms} ms")
        return result

    def _run_calls(self, spec: JobSpec, config: FrkConfig, result: JobRunResult, run_logger) -> None:
        for call in spec.calls:
            description = describe_call(call, config.database_name)
            run_logger.debug(f"🔧 {description}")
            self.output_repo.run_diagnostic(call, config.database_name)
            result.calls.append(description)

    def _run_export(self, spec: JobSpec, config: FrkConfig) -> JobRunResult:
        result = JobRunResult(job_name=spec.name, step_name=spec.step_name)
        logger.info(f"▶️ {spec.name} started (not audit-logged)")
        export = self.export_service.run(config)
        result.complete(export.to_dict())
        return result
