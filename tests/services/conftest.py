"""
Service test fixtures: deployed in-memory server and wired services.
"""

import pytest

from services import ExportService, JobRunner, RetentionCleanupService


@pytest.fixture
def deployed(server):
    """Server with the audit log table in place, as after a deployment."""
    server.create_audit_log()
    return server


@pytest.fixture
def cleanup_service(deployed, clock):
    return RetentionCleanupService(deployed, clock=clock)


@pytest.fixture
def export_service(deployed, clock):
    return ExportService(deployed, clock=clock)


@pytest.fixture
def runner(deployed, cleanup_service, export_service):
    return JobRunner(deployed, deployed, cleanup_service=cleanup_service, export_service=export_service)
