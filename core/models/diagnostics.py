"""
Diagnostic Call Models.

A diagnostic call is one EXEC of a First Responder Kit procedure with its
own parameters plus the output location parameters every call shares
(@OutputDatabaseName, @OutputSchemaName, @OutputTableName).

Exports:
    DiagnosticCall: One procedure invocation
    OutputTable: A table in the storage database produced by a call
"""

from datetime import datetime
from typing import Dict, Union

from pydantic import BaseModel, ConfigDict, Field

from config.defaults import FrkDefaults


class DiagnosticCall(BaseModel):
    """
    One procedure call of a job body.

    parameters keep declaration order; string values are rendered as
    N'...' literals, integers verbatim.
    """

    model_config = ConfigDict(frozen=True)

    procedure: str = Field(..., description="Procedure name, e.g. sp_BlitzFirst")
    parameters: Dict[str, Union[int, str]] = Field(
        default_factory=dict,
        description="Call-specific parameters without the leading @"
    )
    output_table: str = Field(..., description="Value of @OutputTableName")
    output_schema: str = Field(default=FrkDefaults.OUTPUT_SCHEMA)
    procedure_database: str = Field(default=FrkDefaults.PROCEDURE_DATABASE)
    procedure_schema: str = Field(default=FrkDefaults.PROCEDURE_SCHEMA)

    @property
    def qualified_procedure(self) -> str:
        """Three-part name, e.g. master.dbo.sp_Blitz."""
        return f"{self.procedure_database}.{self.procedure_schema}.{self.procedure}"

    def bound_parameters(self, output_database: str) -> Dict[str, Union[int, str]]:
        """
        Full parameter set for one call, output location included.

        Order: call-specific parameters first, then the output location.
        """
        params: Dict[str, Union[int, str]] = dict(self.parameters)
        params["OutputDatabaseName"] = output_database
        params["OutputSchemaName"] = self.output_schema
        params["OutputTableName"] = self.output_table
        return params


class OutputTable(BaseModel):
    """Row of sys.tables in the storage database."""

    model_config = ConfigDict(frozen=True)

    name: str
    create_date: datetime
