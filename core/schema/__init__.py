"""
Core Script and Schema Generation Package.

Contains T-SQL/PowerShell escaping, the job step body templates and the DDL
the reconciler runs.

Exports:
    ScriptTemplateGenerator: Job step body renderer
    AuditLogDDL, DatabaseDDL: DDL builders
    quote_name, qualified_name, nstring, sql_literal, like_prefix, ps_string,
    build_drop_batch: Escaping helpers
"""

from .tsql import (
    quote_name,
    qualified_name,
    nstring,
    sql_literal,
    like_prefix,
    ps_string,
    build_drop_batch,
)
from .ddl import AuditLogDDL, DatabaseDDL
from .script_templates import ScriptTemplateGenerator, RETENTION_GUARD_ERROR_NUMBER

__all__ = [
    'ScriptTemplateGenerator',
    'RETENTION_GUARD_ERROR_NUMBER',
    'AuditLogDDL',
    'DatabaseDDL',
    'quote_name',
    'qualified_name',
    'nstring',
    'sql_literal',
    'like_prefix',
    'ps_string',
    'build_drop_batch',
]
