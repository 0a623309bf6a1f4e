# ============================================================================
# REPOSITORY FACTORY
# ============================================================================
# STATUS: Infrastructure - Central factory for all repository instances
# PURPOSE: Create the SQL Server repositories from one connection config
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================

"""
Repository Factory - Central Creation Point

Single point of repository instantiation. Services take the interfaces;
only the CLI asks this factory for the SQL Server implementations, and the
tests hand the services in-memory doubles instead.
"""

from typing import Dict, Any, Optional

from config import SqlServerConfig
from util_logger import LoggerFactory, ComponentType

from .agent_repository import AgentRepository
from .audit_log_repository import AuditLogRepository
from .output_table_repository import OutputTableRepository

logger = LoggerFactory.create_logger(ComponentType.REPOSITORY, "RepositoryFactory")


class RepositoryFactory:
    """
    Factory for creating repository instances.

    Example:
        repos = RepositoryFactory.create_repositories(database_name="DBAtools")
        agent_repo = repos['agent_repo']
    """

    @staticmethod
    def create_repositories(
        database_name: str,
        sql_config: Optional[SqlServerConfig] = None
    ) -> Dict[str, Any]:
        """
        Create all repository instances for one target.

        Args:
            database_name: Storage database for the output table repository
            sql_config: Connection settings (defaults to get_config().sql)

        Returns:
            Dictionary with agent_repo, audit_repo and output_repo
        """
        logger.info("🏭 Creating SQL Server repositories")
        repos = {
            'agent_repo': AgentRepository(sql_config),
            'audit_repo': AuditLogRepository(sql_config),
            'output_repo': OutputTableRepository(database_name, sql_config),
        }
        logger.info("✅ All repositories created successfully")
        return repos

    @staticmethod
    def create_agent_repository(sql_config: Optional[SqlServerConfig] = None) -> AgentRepository:
        return AgentRepository(sql_config)

    @staticmethod
    def create_audit_log_repository(sql_config: Optional[SqlServerConfig] = None) -> AuditLogRepository:
        return AuditLogRepository(sql_config)

    @staticmethod
    def create_output_table_repository(
        database_name: str,
        sql_config: Optional[SqlServerConfig] = None
    ) -> OutputTableRepository:
        return OutputTableRepository(database_name, sql_config)
