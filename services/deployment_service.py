"""
Deployment Service - Entry point from a raw configuration record to the host.

Combines the configuration loader (with the live principal lookup) and the
Reconciler, so a raw record is either rejected before anything is touched
or deployed as one unit of work.

Exports:
    DeploymentService: Deploy, plan and audit reporting
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from config.frk_config import FrkConfig, load_config
from core.models import JobDefinition
from core.reconciler import DeploymentResult, Reconciler
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.SERVICE, "DeploymentService")


class DeploymentService:
    """
    Usage:
        service = DeploymentService(agent_repo, audit_repo)
        result = service.deploy_from_raw(raw_config_from_file("frk.json"))
    """

    def __init__(self, agent_repo, audit_repo=None, reconciler: Optional[Reconciler] = None):
        self.agent_repo = agent_repo
        self.audit_repo = audit_repo
        self.reconciler = reconciler or Reconciler(agent_repo)

    def load(self, raw: Mapping[str, Any],
             principal_exists: Optional[Callable[[str], bool]] = None) -> FrkConfig:
        """Validate a raw record; the job owner is looked up on the host unless overridden."""
        return load_config(raw, principal_exists or self.agent_repo.principal_exists)

    def deploy_from_raw(self, raw: Mapping[str, Any]) -> DeploymentResult:
        """
        Raises:
            ConfigValidationError: Record rejected, nothing touched
            DeploymentTransactionError: Deployment rolled back
        """
        return self.reconciler.deploy(self.load(raw))

    def plan_from_raw(self, raw: Mapping[str, Any],
                      principal_exists: Optional[Callable[[str], bool]] = None) -> List[JobDefinition]:
        """Job definitions a deployment would install. Touches nothing."""
        return self.reconciler.plan(self.load(raw, principal_exists))

    def audit_report(self) -> Dict[str, Any]:
        """
        Runs that started but never finished (EndTime IS NULL), in JobLogID order.

        Returns an empty report when the audit log has not been deployed yet.
        """
        if self.audit_repo is None:
            raise ValueError("audit_report requires an audit log repository")

        if not self.agent_repo.audit_log_exists():
            logger.warning("⚠️ Audit log table does not exist; deploy first")
            return {"audit_log_exists": False, "open_entries": [], "open_count": 0}

        open_entries = self.audit_repo.list_open_entries()
        if open_entries:
            logger.warning(f"⚠️ {len(open_entries)} FRK run(s) without an EndTime")
        return {
            "audit_log_exists": True,
            "open_entries": [entry.model_dump(mode="json") for entry in open_entries],
            "open_count": len(open_entries),
        }
