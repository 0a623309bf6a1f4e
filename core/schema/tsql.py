# ============================================================================
# T-SQL AND POWERSHELL LITERAL COMPOSITION
# ============================================================================
# STATUS: Core - Escaping boundary for generated job bodies
# PURPOSE: Identifier quoting and literal escaping for T-SQL and PowerShell
# LAST_REVIEWED: 19 OCT 2026
# ============================================================================
"""
T-SQL and PowerShell Composition Helpers.

Every configuration value that ends up inside generated script text goes
through one of these functions. Nothing else in the code base builds
identifiers or literals by hand.

    quote_name("Blitz]x")     -> [Blitz]]x]        QUOTENAME() semantics
    nstring("O'Brien")        -> N'O''Brien'       Unicode string literal
    like_prefix("Blitz_")     -> Blitz[_]%         LIKE pattern, wildcards escaped
    ps_string("D:\\It's")     -> 'D:\\It''s'       PowerShell verbatim string

Exports:
    quote_name: Bracket-quote an identifier
    qualified_name: Quote and dot-join a multi-part name
    nstring: N'...' literal
    sql_literal: Render an int or str parameter value
    like_prefix: LIKE pattern matching names that start with a prefix
    ps_string: Single-quoted PowerShell literal
    build_drop_batch: Batched DROP TABLE statement for the cleanup
"""

from typing import Iterable, Optional, Union

from config.defaults import FrkDefaults
from exceptions import ContractViolationError


# PowerShell treats the typographic single quotes as quote characters too
_PS_SINGLE_QUOTES = ("'", "\u2018", "\u2019", "\u201a", "\u201b")


def quote_name(identifier: str) -> str:
    """
    Bracket-quote an identifier the way QUOTENAME() does.

    QUOTENAME returns NULL for input longer than 128 characters; that case
    is an error here instead of a silently broken script.
    """
    if not isinstance(identifier, str):
        raise ContractViolationError(
            f"identifier must be str, got {type(identifier).__name__}"
        )
    if not identifier:
        raise ValueError("identifier must not be empty")
    if len(identifier) > FrkDefaults.MAX_IDENTIFIER_LENGTH:
        raise ValueError(
            f"identifier exceeds {FrkDefaults.MAX_IDENTIFIER_LENGTH} characters: {identifier[:40]}..."
        )
    return "[" + identifier.replace("]", "]]") + "]"


def qualified_name(*parts: str) -> str:
    """Quote each part and join: ('msdb', 'dbo', 'T') -> [msdb].[dbo].[T]"""
    return ".".join(quote_name(part) for part in parts)


def nstring(value: str) -> str:
    """Unicode string literal with embedded quotes doubled."""
    if not isinstance(value, str):
        raise ContractViolationError(f"nstring expects str, got {type(value).__name__}")
    return "N'" + value.replace("'", "''") + "'"


def sql_literal(value: Union[int, str]) -> str:
    """Render a procedure parameter value: integers verbatim, strings as N'...'."""
    if isinstance(value, bool):
        raise ContractViolationError("bool parameters must be passed as 0/1 integers")
    if isinstance(value, int):
        return str(value)
    if isinstance(value, str):
        return nstring(value)
    raise ContractViolationError(f"Unsupported parameter type {type(value).__name__}")


def like_prefix(prefix: str) -> str:
    """
    LIKE pattern matching every name that starts with prefix.

    The LIKE wildcards %, _ and [ in the prefix are bracket-escaped so they
    match literally.
    """
    escaped = (
        prefix.replace("[", "[[]")
        .replace("%", "[%]")
        .replace("_", "[_]")
    )
    return escaped + "%"


def ps_string(value: str) -> str:
    """
    Single-quoted PowerShell literal.

    Single-quoted strings are verbatim ($ and ` are not expanded); the only
    escape is doubling the quote character.
    """
    if not isinstance(value, str):
        raise ContractViolationError(f"ps_string expects str, got {type(value).__name__}")
    if "\x00" in value:
        raise ValueError("PowerShell literal must not contain NUL")
    escaped = value
    for quote in _PS_SINGLE_QUOTES:
        escaped = escaped.replace(quote, quote * 2)
    return "'" + escaped + "'"


def build_drop_batch(tables: Iterable[str], schema: str = FrkDefaults.OUTPUT_SCHEMA) -> Optional[str]:
    """
    One batch dropping every table, statements joined with ';'.

    Returns None when there is nothing to drop; callers treat that as a
    successful no-op.
    """
    statements = [f"DROP TABLE {quote_name(schema)}.{quote_name(table)}" for table in tables]
    if not statements:
        return None
    return ";".join(statements)
