"""
Output Table Repository - storage database access.

Runs the First Responder Kit procedures and reads, lists and drops the
tables they write into the storage database.

Exports:
    OutputTableRepository: SQL Server implementation of IOutputTableRepository
"""

from typing import List, Optional

import pandas as pd

from config import SqlServerConfig
from core.models import DiagnosticCall, OutputTable
from core.schema import like_prefix, qualified_name, quote_name

from .interface_repository import IOutputTableRepository
from .sqlserver import SqlServerRepository


class OutputTableRepository(SqlServerRepository, IOutputTableRepository):
    """
    Repository bound to one storage database.

    Args:
        database_name: The configured storage database
        sql_config: Connection settings
    """

    def __init__(self, database_name: str, sql_config: Optional[SqlServerConfig] = None):
        super().__init__(sql_config, database=database_name)

    def run_diagnostic(self, call: DiagnosticCall, output_database: str) -> None:
        params = call.bound_parameters(output_database)
        procedure = qualified_name(call.procedure_database, call.procedure_schema, call.procedure)
        placeholders = ", ".join(f"@{name}=?" for name in params)
        with self._error_context("diagnostic call", call.qualified_procedure):
            self.logger.info(f"▶️ {call.qualified_procedure} -> {call.output_table}")
            self._execute(f"EXEC {procedure} {placeholders}", list(params.values()))

    def list_output_tables(self, name_prefix: str, schema: str = "dbo") -> List[OutputTable]:
        with self._error_context("output table listing", name_prefix):
            rows = self._execute(
                "SELECT name, create_date FROM sys.tables "
                "WHERE name LIKE ? AND SCHEMA_NAME(schema_id) = ? ORDER BY name",
                (like_prefix(name_prefix), schema), fetch="all"
            )
            return [OutputTable(name=row[0], create_date=row[1]) for row in rows or []]

    def execute_batch(self, batch: str) -> None:
        with self._error_context("batch execution", self.database):
            self._execute(batch)

    def fetch_table(self, table_name: str, schema: str = "dbo") -> pd.DataFrame:
        with self._error_context("table read", table_name):
            with self._get_connection() as conn:
                cursor = conn.cursor()
                try:
                    cursor.execute(f"SELECT * FROM {quote_name(schema)}.{quote_name(table_name)};")
                    columns = [column[0] for column in cursor.description]
                    rows = [tuple(row) for row in cursor.fetchall()]
                finally:
                    cursor.close()
            return pd.DataFrame.from_records(rows, columns=columns)
