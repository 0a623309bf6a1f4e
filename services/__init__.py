"""
Service Layer.

    deployment_service  raw record -> validated config -> Reconciler
    job_runner          one job body with the audit log envelope
    retention_cleanup   drop output tables older than the retention cutoff
    export_service      dated CSV snapshot of recent output tables

Exports:
    DeploymentService, JobRunner, JobRunResult, RetentionCleanupService,
    CleanupResult, ExportService, ExportResult
"""

from .deployment_service import DeploymentService
from .export_service import ExportResult, ExportService
from .job_runner import JobRunner, JobRunResult
from .retention_cleanup import CleanupResult, RetentionCleanupService

__all__ = [
    'DeploymentService',
    'JobRunner',
    'JobRunResult',
    'RetentionCleanupService',
    'CleanupResult',
    'ExportService',
    'ExportResult',
]
