# ============================================================================
# SQL SERVER REPOSITORY BASE
# ============================================================================
# STATUS: Infrastructure - pyodbc connection and transaction management
# PURPOSE: Connections, cursors, transactions and loud query execution
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
SQL Server Repository Base.

Storage-specific base for every repository that talks to the target
instance through pyodbc.

Connection modes:
    - Per-call: _execute() opens a connection, runs one statement, commits
    - Unit of work: inside transaction() every _execute() shares one
      connection; commit on exit, rollback on exception
    - Autocommit: _autocommit_connection() for statements SQL Server refuses
      inside a user transaction (CREATE/DROP DATABASE)

Exports:
    SqlServerRepository: pyodbc base repository
"""

from contextlib import contextmanager
from typing import Any, Optional, Sequence

import pyodbc

from config import SqlServerConfig, get_config
from exceptions import DatabaseError

from .base import BaseRepository


class SqlServerRepository(BaseRepository):
    """
    pyodbc base repository.

    Args:
        sql_config: Connection settings (defaults to get_config().sql)
        database: Initial catalog for connections opened by this repository
    """

    def __init__(self, sql_config: Optional[SqlServerConfig] = None, database: str = "msdb"):
        super().__init__()
        self.sql_config = sql_config or get_config().sql
        self.database = database
        self.conn_string = self.sql_config.connection_string(database)
        self._tx_conn = None
        self.logger.debug(
            f"🔧 {self.__class__.__name__} targeting {self.sql_config.server}/{database}"
        )

    # ========================================================================
    # ERROR HANDLING
    # ========================================================================

    @contextmanager
    def _error_context(self, operation: str, entity_id: Optional[str] = None):
        """Base error context plus translation of pyodbc errors to DatabaseError."""
        try:
            with super()._error_context(operation, entity_id):
                yield
        except pyodbc.Error as e:
            target = f" for {entity_id}" if entity_id else ""
            raise DatabaseError(f"{operation} failed{target}: {e}") from e

    # ========================================================================
    # CONNECTIONS
    # ========================================================================

    @contextmanager
    def _get_connection(self):
        """
        Context manager for pyodbc connections.

        Inside transaction() the shared connection is yielded and left open.
        Otherwise a new connection is opened (autocommit off), rolled back on
        error and always closed.
        """
        if self._tx_conn is not None:
            yield self._tx_conn
            return

        conn = None
        try:
            self.logger.debug(f"🔗 Connecting to {self.sql_config.server}/{self.database}")
            conn = pyodbc.connect(self.conn_string, autocommit=False)
            yield conn
        except pyodbc.Error as e:
            self.logger.error(f"❌ SQL Server connection error: {e}")
            if conn is not None:
                conn.rollback()
            raise
        finally:
            if conn is not None:
                conn.close()

    @contextmanager
    def _autocommit_connection(self, database: str = "master"):
        """Connection outside any transaction, for CREATE/DROP DATABASE."""
        conn = pyodbc.connect(self.sql_config.connection_string(database), autocommit=True)
        try:
            yield conn
        finally:
            conn.close()

    @contextmanager
    def transaction(self):
        """
        Unit of work over one connection.

        XACT_ABORT ON makes any statement error doom the transaction, so a
        failed step can never be half-committed.
        """
        if self._tx_conn is not None:
            raise RuntimeError("Nested transactions are not supported")

        conn = pyodbc.connect(self.conn_string, autocommit=False)
        self._tx_conn = conn
        try:
            cursor = conn.cursor()
            cursor.execute("SET XACT_ABORT ON;")
            cursor.close()
            self.logger.debug("🔒 Transaction started")
            yield self
            conn.commit()
            self.logger.debug("✅ Transaction committed")
        except BaseException:
            try:
                conn.rollback()
                self.logger.warning("↩️ Transaction rolled back")
            except pyodbc.Error as rollback_error:
                self.logger.error(f"❌ Rollback failed: {rollback_error}")
            raise
        finally:
            self._tx_conn = None
            conn.close()

    @property
    def in_transaction(self) -> bool:
        return self._tx_conn is not None

    # ========================================================================
    # EXECUTION
    # ========================================================================

    def _execute(self, query: str, params: Optional[Sequence[Any]] = None,
                 fetch: Optional[str] = None) -> Optional[Any]:
        """
        Execute one statement with LOUD failures.

        Procedure calls can return several result sets (and raise errors
        from later ones), so every result set is drained before commit.

        Args:
            query: T-SQL with ? placeholders
            params: Values bound to the placeholders
            fetch: None | 'one' | 'all'

        Returns:
            Row / rows for fetch modes, otherwise the affected row count
        """
        if fetch not in (None, "one", "all"):
            raise ValueError(f"❌ INVALID FETCH MODE: {fetch}")

        with self._get_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(query, *(params or ()))
                if fetch == "one":
                    result = cursor.fetchone()
                elif fetch == "all":
                    result = cursor.fetchall()
                else:
                    result = cursor.rowcount
                while cursor.nextset():
                    pass
            except pyodbc.Error as e:
                self.logger.error(f"❌ QUERY EXECUTION FAILED: {e}")
                self.logger.error(f"   Query: {query[:200]}")
                raise
            finally:
                cursor.close()

            if self._tx_conn is None:
                conn.commit()
            return result
