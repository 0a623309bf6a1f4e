"""Tests for identifier quoting and literal escaping in generated scripts."""

import pytest

from core.schema import (
    AuditLogDDL,
    DatabaseDDL,
    build_drop_batch,
    like_prefix,
    nstring,
    ps_string,
    qualified_name,
    quote_name,
    sql_literal,
)
from exceptions import ContractViolationError


class TestQuoteName:
    """quote_name must behave like QUOTENAME()."""

    def test_plain_identifier(self):
        assert quote_name("BlitzFirst") == "[BlitzFirst]"

    def test_closing_bracket_doubled(self):
        assert quote_name("Blitz]x") == "[Blitz]]x]"

    def test_injection_stays_inside_brackets(self):
        rendered = quote_name("x]; DROP DATABASE master;--")
        assert rendered == "[x]]; DROP DATABASE master;--]"

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            quote_name("")

    def test_over_128_rejected(self):
        with pytest.raises(ValueError):
            quote_name("a" * 129)

    def test_128_accepted(self):
        assert quote_name("a" * 128) == "[" + "a" * 128 + "]"

    def test_non_string_is_contract_violation(self):
        with pytest.raises(ContractViolationError):
            quote_name(42)

    def test_qualified_name(self):
        assert qualified_name("msdb", "dbo", "FRK_JobExecutionLog") == "[msdb].[dbo].[FRK_JobExecutionLog]"


class TestLiterals:

    def test_nstring_doubles_quotes(self):
        assert nstring("O'Brien") == "N'O''Brien'"

    def test_sql_literal_int_verbatim(self):
        assert sql_literal(25) == "25"

    def test_sql_literal_str(self):
        assert sql_literal("cpu") == "N'cpu'"

    def test_sql_literal_bool_rejected(self):
        with pytest.raises(ContractViolationError):
            sql_literal(True)

    def test_sql_literal_float_rejected(self):
        with pytest.raises(ContractViolationError):
            sql_literal(1.5)

    def test_like_prefix_plain(self):
        assert like_prefix("Blitz") == "Blitz%"

    def test_like_prefix_escapes_wildcards(self):
        assert like_prefix("FRK_[x]%") == "FRK[_][[]x][%]%"


class TestPowerShellLiterals:

    def test_single_quote_doubled(self):
        assert ps_string("D:\\It's") == "'D:\\It''s'"

    def test_dollar_and_backtick_untouched(self):
        assert ps_string("$env:TEMP`n") == "'$env:TEMP`n'"

    def test_typographic_quotes_doubled(self):
        assert ps_string("a\u2019b") == "'a\u2019\u2019b'"

    def test_nul_rejected(self):
        with pytest.raises(ValueError):
            ps_string("a\x00b")


class TestDropBatch:

    def test_empty_is_none(self):
        assert build_drop_batch([]) is None

    def test_statements_joined_with_semicolon(self):
        assert build_drop_batch(["Blitz", "BlitzCache"]) == "DROP TABLE [dbo].[Blitz];DROP TABLE [dbo].[BlitzCache]"

    def test_hostile_table_name_quoted(self):
        batch = build_drop_batch(["Blitz]; DROP DATABASE x;--"])
        assert batch == "DROP TABLE [dbo].[Blitz]]; DROP DATABASE x;--]"


class TestDDL:

    def test_audit_log_created_only_if_absent(self):
        ddl = AuditLogDDL.create_if_absent()
        assert ddl.startswith("IF OBJECT_ID(N'[msdb].[dbo].[FRK_JobExecutionLog]', N'U') IS NULL")
        assert "CREATE TABLE [msdb].[dbo].[FRK_JobExecutionLog]" in ddl

    @pytest.mark.parametrize("column", list(AuditLogDDL.COLUMNS))
    def test_audit_log_has_column(self, column):
        assert f"[{column}]" in AuditLogDDL.create_if_absent()

    def test_audit_log_column_types(self):
        ddl = AuditLogDDL.create_if_absent()
        assert "[JobLogID] INT IDENTITY(1,1) PRIMARY KEY" in ddl
        assert "[StartTime] DATETIME2 DEFAULT SYSDATETIME()" in ddl
        assert "[ErrorMessage] NVARCHAR(MAX) NULL" in ddl
        assert "DROP" not in ddl

    def test_database_ddl_quotes_name(self):
        assert DatabaseDDL.create("DBA]tools") == "CREATE DATABASE [DBA]]tools]"
        assert DatabaseDDL.drop("DBAtools") == "DROP DATABASE [DBAtools]"
