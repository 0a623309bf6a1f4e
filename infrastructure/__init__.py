"""
Infrastructure Package - Lazy Loading Implementation.

Provides the repository implementations with lazy loading, so importing
the package (or the interfaces) never imports pyodbc or reads connection
settings. The driver is only loaded when a SQL Server repository is first
accessed, which lets the services and tests run against in-memory doubles.
"""

from typing import TYPE_CHECKING

# For type checking only - doesn't actually import at runtime
if TYPE_CHECKING:
    from .factory import RepositoryFactory as _RepositoryFactory
    from .base import BaseRepository as _BaseRepository
    from .sqlserver import SqlServerRepository as _SqlServerRepository
    from .agent_repository import AgentRepository as _AgentRepository
    from .audit_log_repository import AuditLogRepository as _AuditLogRepository
    from .output_table_repository import OutputTableRepository as _OutputTableRepository


def __getattr__(name: str):
    """
    Lazy import mechanism - only imports when actually accessed.
    """
    if name == "RepositoryFactory":
        from .factory import RepositoryFactory
        return RepositoryFactory

    elif name == "BaseRepository":
        from .base import BaseRepository
        return BaseRepository
    elif name == "SqlServerRepository":
        from .sqlserver import SqlServerRepository
        return SqlServerRepository

    elif name == "AgentRepository":
        from .agent_repository import AgentRepository
        return AgentRepository
    elif name == "AuditLogRepository":
        from .audit_log_repository import AuditLogRepository
        return AuditLogRepository
    elif name == "OutputTableRepository":
        from .output_table_repository import OutputTableRepository
        return OutputTableRepository

    elif name in ("IAgentRepository", "IAuditLogRepository", "IOutputTableRepository"):
        from . import interface_repository
        return getattr(interface_repository, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "RepositoryFactory",
    "BaseRepository",
    "SqlServerRepository",
    "AgentRepository",
    "AuditLogRepository",
    "OutputTableRepository",
    "IAgentRepository",
    "IAuditLogRepository",
    "IOutputTableRepository",
]
