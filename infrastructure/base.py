# ============================================================================
# BASE REPOSITORY - PURE ABSTRACT CLASS
# ============================================================================
# STATUS: Infrastructure - Repository hierarchy root
# PURPOSE: Common error handling and logging for all repositories
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
Base Repository - Pure Abstract Class.

Abstract base repository class that all storage-specific repositories inherit from.
Contains NO storage implementation details, only error handling patterns and
logging infrastructure.

Architecture:
    BaseRepository (this file - pure abstract)
        |
    SqlServerRepository (pyodbc connection management)
        |
    AgentRepository, AuditLogRepository, OutputTableRepository

Key Design Principles:
    - NO storage backend dependencies
    - NO connection management
    - NO query execution
    - ONLY common patterns and utilities

Exports:
    BaseRepository: Abstract base class for repositories
"""

from abc import ABC
from contextlib import contextmanager
from typing import Optional
import logging

from exceptions import ContractViolationError
from util_logger import LoggerFactory, ComponentType


class BaseRepository(ABC):
    """
    Pure abstract base repository.

    Responsibilities:
    ----------------
    - Logging setup and configuration
    - Error handling with consistent patterns

    NOT Responsible For:
    -------------------
    - Connection management (handled by storage-specific subclasses)
    - Query execution (handled by storage-specific subclasses)
    - Transaction management (storage-specific)

    Usage Example:
    -------------
    ```python
    class MyRepository(SqlServerRepository):
        def delete_job(self, job_name):
            with self._error_context("job deletion", job_name):
                self._execute(...)
    ```
    """

    def __init__(self):
        """
        Initialize base repository logging.

        Subclasses MUST call super().__init__() before any storage setup.
        """
        self.logger = self._setup_logger()
        self.logger.debug(f"🏛️ {self.__class__.__name__} base initialized")

    def _setup_logger(self) -> logging.Logger:
        """Component-specific logger for this repository."""
        return LoggerFactory.create_logger(
            ComponentType.REPOSITORY,
            self.__class__.__name__
        )

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """
        Context manager for consistent error handling across all operations.

        All errors are logged with the operation and entity, then re-raised
        unchanged. Storage-specific subclasses translate driver errors.

        Logging Format:
        --------------
        Contract Error: "❌ Contract violation during {operation}: {error}"
        Other Error: "❌ {operation} failed for {entity_id}: {error}"
        """
        try:
            yield

        except ContractViolationError as e:
            self.logger.error(f"❌ Contract violation during {operation}: {e}")
            raise

        except Exception as e:
            error_msg = f"❌ {operation} failed"
            if entity_id:
                error_msg += f" for {entity_id}"
            error_msg += f": {e}"
            self.logger.error(error_msg)
            raise
