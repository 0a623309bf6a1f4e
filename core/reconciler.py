# ============================================================================
# FRK RECONCILER
# ============================================================================
# STATUS: Core - Idempotent deployment of the FRK jobs
# PURPOSE: Bring one SQL Server instance to the canonical job/schedule/table
#          state in one unit of work
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
FRK Reconciler.

Single-pass, idempotent deployment:

    1. storage database exists            (created if absent)
    2. job category exists                (created if absent)
    3. every job named 'FRK - %' deleted  (full replace, never patched)
    4. audit log table exists             (created if absent, never dropped)
    5. the five jobs created with their step, schedules and job server
    6. commit

Steps 2-5 run inside the host transaction. SQL Server refuses CREATE
DATABASE inside a multi-statement transaction, so step 1 runs first and
registers a compensation (drop the database, only if this run created it).
On any failure the transaction rolls back, compensations run in reverse
order, and DeploymentTransactionError is raised. The host is left as it
was before the run.

The job owner check is a precondition (load_config); it is not repeated
here.

Exports:
    Reconciler: Deployment orchestrator
    DeploymentResult: Operator report
    StepResult: One step of the report
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from config.defaults import FrkDefaults
from config.frk_config import FrkConfig
from exceptions import ContractViolationError, DeploymentTransactionError
from util_logger import LoggerFactory, ComponentType

from .catalog import JOB_KINDS, get_spec
from .models.enums import StepOutcome
from .models.job import JobDefinition
from .saga import CompensationLog
from .schema.script_templates import ScriptTemplateGenerator

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "Reconciler")


# ============================================================================
# RESULT DATACLASSES
# ============================================================================

@dataclass
class StepResult:
    """Result of a single deployment step."""
    name: str
    status: StepOutcome
    message: str = ""
    error: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class DeploymentResult:
    """Complete result of one reconciler run."""
    database_name: str
    job_category_name: str
    export_path: str
    timestamp: str
    success: bool = False
    steps: List[StepResult] = field(default_factory=list)
    jobs_removed: List[str] = field(default_factory=list)
    jobs_created: List[str] = field(default_factory=list)
    database_created: bool = False
    category_created: bool = False
    audit_log_created: bool = False
    compensation_errors: List[str] = field(default_factory=list)

    def add_step(self, name: str, status: StepOutcome, message: str = "", **details) -> StepResult:
        step = StepResult(name=name, status=status, message=message, details=details)
        self.steps.append(step)
        return step

    def next_steps(self) -> List[str]:
        """Operator guidance printed after a successful deployment."""
        audit_log = ".".join((
            FrkDefaults.AUDIT_LOG_DATABASE,
            FrkDefaults.AUDIT_LOG_SCHEMA,
            FrkDefaults.AUDIT_LOG_TABLE,
        ))
        return [
            "Ensure SQL Agent is running and service account permissions are correct.",
            f"The export job is manual; run as-needed for CSVs (dir: {self.export_path}).",
            f"All activity is logged in {audit_log} for auditing/monitoring.",
            "For changes, simply re-run the deployment; it is idempotent.",
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "database_name": self.database_name,
            "job_category_name": self.job_category_name,
            "timestamp": self.timestamp,
            "success": self.success,
            "database_created": self.database_created,
            "category_created": self.category_created,
            "audit_log_created": self.audit_log_created,
            "jobs_removed": self.jobs_removed,
            "jobs_created": self.jobs_created,
            "steps": [
                {
                    "name": s.name,
                    "status": s.status.value,
                    "message": s.message,
                    "error": s.error,
                    "details": s.details
                }
                for s in self.steps
            ],
            "compensation_errors": self.compensation_errors,
            "next_steps": self.next_steps() if self.success else [],
            "summary": {
                "total_steps": len(self.steps),
                "successful": len([s for s in self.steps if s.status is StepOutcome.SUCCESS]),
                "failed": len([s for s in self.steps if s.status is StepOutcome.FAILED]),
                "skipped": len([s for s in self.steps if s.status is StepOutcome.SKIPPED])
            }
        }


# ============================================================================
# RECONCILER
# ============================================================================

class Reconciler:
    """
    Idempotent deployment orchestrator over an IAgentRepository.

    Example:
        reconciler = Reconciler(AgentRepository())
        result = reconciler.deploy(config)
    """

    STEP_DATABASE = "ensure_database"
    STEP_CATEGORY = "ensure_category"
    STEP_REMOVE_JOBS = "remove_existing_jobs"
    STEP_AUDIT_LOG = "ensure_audit_log"
    STEP_INSTALL_JOB = "install_job"
    STEP_COMMIT = "commit"

    def __init__(self, agent_repo, generator: Optional[ScriptTemplateGenerator] = None,
                 server_name: str = FrkDefaults.JOB_SERVER_NAME):
        self.agent_repo = agent_repo
        self.generator = generator or ScriptTemplateGenerator()
        self.server_name = server_name

    # ========================================================================
    # PLAN
    # ========================================================================

    def plan(self, config: FrkConfig) -> List[JobDefinition]:
        """
        The five job definitions a deployment would install.

        Pure: renders every body, touches nothing on the host.
        """
        if not isinstance(config, FrkConfig):
            raise ContractViolationError(
                f"Reconciler needs a validated FrkConfig, got {type(config).__name__}"
            )
        jobs = []
        for kind in JOB_KINDS:
            spec = get_spec(kind)
            jobs.append(JobDefinition(
                kind=spec.kind,
                name=spec.name,
                step_name=spec.step_name,
                subsystem=spec.subsystem,
                owner=config.job_owner,
                category=config.job_category_name,
                command=self.generator.render(kind, config),
                step_database=config.database_name if spec.runs_in_storage_database else None,
                schedules=list(spec.schedules),
                server_name=self.server_name,
            ))
        return jobs

    # ========================================================================
    # DEPLOY
    # ========================================================================

    def deploy(self, config: FrkConfig) -> DeploymentResult:
        """
        Run the deployment as one atomic operation.

        Returns:
            DeploymentResult (success=True)

        Raises:
            DeploymentTransactionError: Any step failed; nothing committed
        """
        jobs = self.plan(config)
        result = DeploymentResult(
            database_name=config.database_name,
            job_category_name=config.job_category_name,
            export_path=config.export_path,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        compensations = CompensationLog()
        current_step = self.STEP_DATABASE

        logger.info("=" * 70)
        logger.info("🚀 FRK DEPLOYMENT STARTED")
        logger.info(f"   Storage database: {config.database_name}")
        logger.info(f"   Job owner: {config.job_owner}")
        logger.info(f"   Category: {config.job_category_name}")
        logger.info("=" * 70)

        try:
            self._ensure_database(config.database_name, result, compensations)

            with self.agent_repo.transaction():
                current_step = self.STEP_CATEGORY
                self._ensure_category(config.job_category_name, result)

                current_step = self.STEP_REMOVE_JOBS
                self._remove_existing_jobs(result)

                current_step = self.STEP_AUDIT_LOG
                self._ensure_audit_log(result)

                for job in jobs:
                    current_step = f"{self.STEP_INSTALL_JOB}:{job.name}"
                    self.agent_repo.create_job(job)
                    result.jobs_created.append(job.name)
                    result.add_step(current_step, StepOutcome.SUCCESS,
                                    f"{len(job.schedules)} schedule(s)")

                current_step = self.STEP_COMMIT

        except Exception as e:
            # The transaction context has already rolled back
            result.compensation_errors = compensations.compensate()
            result.jobs_created = []
            result.jobs_removed = []
            result.add_step(current_step, StepOutcome.FAILED, "aborted").error = str(e)
            logger.error("=" * 70)
            logger.error("❌ ERROR! No changes committed; deployment aborted.")
            logger.error(f"   Step: {current_step}")
            logger.error(f"   Reason: {e}")
            logger.error("=" * 70)
            raise DeploymentTransactionError(current_step, e, result.compensation_errors, result=result) from e

        compensations.clear()
        result.success = True
        result.add_step(self.STEP_COMMIT, StepOutcome.SUCCESS, f"{len(result.jobs_created)} jobs installed")
        logger.info("=" * 70)
        logger.info("✅ SUCCESS: All FRK jobs, configuration, and monitoring deployed.",
                    extra={'custom_dimensions': {'jobs_created': result.jobs_created,
                                                 'jobs_removed': result.jobs_removed}})
        for line in result.next_steps():
            logger.info(f"   - {line}")
        logger.info("=" * 70)
        return result

    # ========================================================================
    # STEPS
    # ========================================================================

    def _ensure_database(self, database_name: str, result: DeploymentResult,
                         compensations: CompensationLog) -> None:
        if self.agent_repo.database_exists(database_name):
            result.add_step(self.STEP_DATABASE, StepOutcome.SKIPPED, f"{database_name} exists")
            return

        logger.info(f"🔧 Creating database: {database_name}")
        self.agent_repo.create_database(database_name)
        compensations.register(
            self.STEP_DATABASE,
            f"drop database {database_name}",
            lambda: self.agent_repo.drop_database(database_name),
        )
        result.database_created = True
        result.add_step(self.STEP_DATABASE, StepOutcome.SUCCESS, f"created {database_name}")

    def _ensure_category(self, category_name: str, result: DeploymentResult) -> None:
        if self.agent_repo.category_exists(category_name):
            result.add_step(self.STEP_CATEGORY, StepOutcome.SKIPPED, f"{category_name} exists")
            return
        self.agent_repo.create_category(category_name)
        result.category_created = True
        result.add_step(self.STEP_CATEGORY, StepOutcome.SUCCESS, f"created {category_name}")

    def _remove_existing_jobs(self, result: DeploymentResult) -> None:
        logger.info("🔧 Dropping existing FRK jobs for clean deployment...")
        existing = self.agent_repo.list_jobs(FrkDefaults.JOB_NAME_PREFIX)
        for name in existing:
            self.agent_repo.delete_job(name)
            result.jobs_removed.append(name)
        status = StepOutcome.SUCCESS if existing else StepOutcome.SKIPPED
        result.add_step(self.STEP_REMOVE_JOBS, status, f"{len(existing)} job(s) removed",
                        jobs=list(existing))

    def _ensure_audit_log(self, result: DeploymentResult) -> None:
        if self.agent_repo.audit_log_exists():
            result.add_step(self.STEP_AUDIT_LOG, StepOutcome.SKIPPED, "audit log exists")
            return
        self.agent_repo.create_audit_log()
        result.audit_log_created = True
        result.add_step(self.STEP_AUDIT_LOG, StepOutcome.SUCCESS, "audit log created")
