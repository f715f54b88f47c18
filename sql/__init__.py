# ============================================================================
# SQL MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: SQL layer initialization
# PURPOSE: Export the database model, dialect compilers and introspection
# CREATED: 14 OCT 2026
# ============================================================================

from sql.models import (
    Table,
    Column,
    ColumnMeta,
    PrimaryKey,
    ForeignKey,
    ForeignKeyAction,
    Index,
    IndexMeta,
)
from sql.compiler import DatabaseCompiler, register_compiler, get_compiler, list_compilers
from sql.postgres import PostgresCompiler, parse_postgres_default, normalize_postgres_type
from sql.sqlite import SqliteCompiler, parse_sqlite_default, normalize_sqlite_type
from sql.introspection import Introspector, SnapshotIntrospector, build_table, load_table

__all__ = [
    # Models
    "Table",
    "Column",
    "ColumnMeta",
    "PrimaryKey",
    "ForeignKey",
    "ForeignKeyAction",
    "Index",
    "IndexMeta",
    # Compilers
    "DatabaseCompiler",
    "register_compiler",
    "get_compiler",
    "list_compilers",
    "PostgresCompiler",
    "SqliteCompiler",
    "parse_postgres_default",
    "parse_sqlite_default",
    "normalize_postgres_type",
    "normalize_sqlite_type",
    # Introspection
    "Introspector",
    "SnapshotIntrospector",
    "build_table",
    "load_table",
]
