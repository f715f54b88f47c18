# ============================================================================
# SQLITE COMPILER
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: SQL layer - SQLite types and defaults
# PURPOSE: Normalize SQLite declared types and column defaults
# CREATED: 14 OCT 2026
# ============================================================================
"""
SQLite Compiler

SQLite stores whatever type name the migration declared. Known names
are mapped directly; everything else follows SQLite's column affinity
rules (INT -> integer, CHAR/CLOB/TEXT -> string, BLOB -> binary,
REAL/FLOA/DOUB -> float, otherwise NUMERIC).

Defaults come from PRAGMA table_info and are usually quoted literals.
"""

import re
from typing import Any, Dict

from core.types import Dialect, FieldType, SqlDefault
from core.visitor import Context, visits
from sql.compiler import DatabaseCompiler, register_compiler


SQLITE_TYPE_MAP: Dict[str, str] = {
    "INTEGER": "integer",
    "FLOAT": "float",
    "REAL": "float",
    "TEXT": "string",
    "BLOB": "binary",
    "UUID": "uuid",
    "JSON": "json",
    "JSONB": "jsonb",
    "NUMERIC": "decimal",
    "DECIMAL": "decimal",
    "BOOLEAN": "boolean",
    "DATE": "date",
    "DATETIME": "naive_datetime",
    "TIMESTAMP": "naive_datetime",
    "TIME": "time",
}

_PARAMS = re.compile(r"\([^)]*\)")


def normalize_sqlite_type(raw: Any) -> FieldType:
    """Normalize a SQLite declared column type."""
    if not isinstance(raw, str) or not raw.strip():
        return "binary"

    name = _PARAMS.sub("", raw).strip().upper()
    if name in SQLITE_TYPE_MAP:
        return SQLITE_TYPE_MAP[name]

    if "INT" in name:
        return "integer"
    if "CHAR" in name or "CLOB" in name or "TEXT" in name:
        return "string"
    if "BLOB" in name:
        return "binary"
    if "REAL" in name or "FLOA" in name or "DOUB" in name:
        return "float"
    return "decimal"


_INTEGER = re.compile(r"^[0-9]+$")
_FLOAT = re.compile(r"^[0-9]+\.[0-9]+$")


def parse_sqlite_default(value: Any) -> Any:
    """
    Parse a default value from PRAGMA table_info.

    Quotes are stripped before matching, so "'{}'" becomes an empty
    dict and "'[]'" an empty list.
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return value

    trimmed = value.strip().strip("'").strip('"')

    if trimmed == "{}":
        return {}
    if trimmed == "[]":
        return []
    if trimmed == "NULL":
        return None
    if trimmed == "CURRENT_TIMESTAMP":
        return SqlDefault.CURRENT_TIMESTAMP
    if trimmed == "CURRENT_DATE":
        return SqlDefault.CURRENT_DATE
    if trimmed == "CURRENT_TIME":
        return SqlDefault.CURRENT_TIME
    if _INTEGER.match(trimmed):
        return int(trimmed)
    if _FLOAT.match(trimmed):
        return float(trimmed)
    if trimmed.lower() in ("true", "false"):
        return trimmed.lower() == "true"
    return trimmed


@register_compiler(Dialect.SQLITE)
class SqliteCompiler(DatabaseCompiler):
    """Database model builder for SQLite introspection trees."""

    @visits("type")
    def visit_type(self, payload: Any, context: Context) -> FieldType:
        return normalize_sqlite_type(payload)

    @visits("default")
    def visit_default(self, payload: Any, context: Context) -> Any:
        return parse_sqlite_default(payload)


__all__ = [
    "SQLITE_TYPE_MAP",
    "normalize_sqlite_type",
    "parse_sqlite_default",
    "SqliteCompiler",
]
