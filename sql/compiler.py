# ============================================================================
# DATABASE MODEL BUILDER
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: SQL layer - Introspection tree to Table
# PURPOSE: Generic tag handlers plus the per-dialect compiler registry
# CREATED: 14 OCT 2026
# ============================================================================
"""
Database Model Builder

Turns an introspection tree into a Table:

    ("table", [
        ("identifier", "users"),
        [("column", [("identifier", "id"), ("type", "integer"), ("meta", {...})]), ...],
        [("foreign_key", [name, [cols], ref_table, [ref_cols], ("meta", {...})]), ...],
        [("index", [("identifier", "idx"), [cols], ("meta", {...})]), ...],
    ])

DatabaseCompiler handles the structural tags. Dialect subclasses add
handlers for "type" and "default" and register themselves with
@register_compiler so build_table() can dispatch on a dialect tag.
"""

import logging
from typing import Any, Dict, List, Optional, Type

from core.errors import UnsupportedDialectError
from core.types import Dialect
from core.visitor import Context, Visitor, is_tagged, visits
from sql.models import (
    Column,
    ColumnMeta,
    ForeignKey,
    ForeignKeyAction,
    Index,
    IndexMeta,
    PrimaryKey,
    Table,
)

logger = logging.getLogger(__name__)


# ============================================================================
# COMPILER REGISTRY
# ============================================================================

_COMPILERS: Dict[str, Type["DatabaseCompiler"]] = {}


def register_compiler(dialect: Dialect):
    """
    Decorator to register a database compiler for a dialect.

    Usage:
        @register_compiler(Dialect.SQLITE)
        class SqliteCompiler(DatabaseCompiler):
            ...
    """
    def decorator(cls: Type["DatabaseCompiler"]) -> Type["DatabaseCompiler"]:
        key = Dialect(dialect).value
        if key in _COMPILERS:
            raise ValueError(f"Compiler already registered for dialect: {key}")
        cls.dialect = Dialect(dialect)
        _COMPILERS[key] = cls
        logger.debug(f"Registered database compiler: {key} -> {cls.__name__}")
        return cls
    return decorator


def get_compiler(dialect: Any) -> "DatabaseCompiler":
    """Instantiate the compiler for a dialect."""
    key = dialect.value if isinstance(dialect, Dialect) else str(dialect)
    compiler_cls = _COMPILERS.get(key)
    if compiler_cls is None:
        raise UnsupportedDialectError(dialect, sorted(_COMPILERS.keys()))
    return compiler_cls()


def list_compilers() -> List[str]:
    return sorted(_COMPILERS.keys())


# ============================================================================
# GENERIC COMPILER
# ============================================================================

class DatabaseCompiler(Visitor):
    """Structural handlers shared by every dialect."""

    dialect: Optional[Dialect] = None

    def compile(self, node: Any, context: Context = None) -> Table:
        """Build a Table from a ("table", ...) node."""
        table = self.visit(node, context or {})
        if not isinstance(table, Table):
            raise ValueError(f"Expected a table node, got {node!r}")
        return table

    @visits("table")
    def visit_table(self, payload: List[Any], context: Context) -> Table:
        name_node, column_nodes, fk_nodes, index_nodes = (list(payload) + [[], [], []])[:4]

        name = self.visit(name_node, context)
        columns: List[Column] = self.visit(column_nodes or [], context)
        foreign_keys: List[ForeignKey] = self.visit(fk_nodes or [], context)
        indices: List[Index] = self.visit(index_nodes or [], context)

        fk_columns = {c for fk in foreign_keys for c in fk.columns}
        for column in columns:
            if column.name in fk_columns:
                column.meta.foreign_key = True

        table = Table(
            name=name,
            dialect=self.dialect,
            columns=columns,
            primary_key=PrimaryKey.from_columns(columns),
            foreign_keys=foreign_keys,
            indices=indices,
        )
        logger.debug(
            f"Built table {name}: {len(columns)} columns, "
            f"{len(foreign_keys)} foreign keys, {len(indices)} indices"
        )
        return table

    @visits("identifier")
    def visit_identifier(self, payload: Any, context: Context) -> str:
        return str(payload)

    @visits("column")
    def visit_column(self, payload: List[Any], context: Context) -> Column:
        name_node, type_node, meta_node = (list(payload) + [None])[:3]

        raw_meta = meta_node[1] if is_tagged(meta_node) else meta_node
        raw_meta = dict(raw_meta or {})
        raw_default = raw_meta.pop("default", None)

        meta = self.visit(("meta", raw_meta), context)
        meta["default"] = self.visit(
            raw_default if is_tagged(raw_default) else ("default", raw_default),
            context,
        )

        return Column(
            name=self.visit(name_node, context),
            type=self.visit(type_node if is_tagged(type_node) else ("type", type_node), context),
            meta=ColumnMeta(**meta),
        )

    @visits("type")
    def visit_type(self, payload: Any, context: Context) -> Any:
        return self.visit(payload, context)

    @visits("default")
    def visit_default(self, payload: Any, context: Context) -> Any:
        return payload

    @visits("meta")
    def visit_meta(self, payload: Dict[str, Any], context: Context) -> Dict[str, Any]:
        return self.visit_map(payload or {}, context)

    @visits("foreign_key")
    def visit_foreign_key(self, payload: List[Any], context: Context) -> ForeignKey:
        name_node, columns, ref_table, ref_columns, meta_node = (list(payload) + [None])[:5]
        meta = self.visit(meta_node, context) or {}

        return ForeignKey(
            name=self.visit(name_node, context),
            columns=[str(c) for c in self.visit(columns, context)],
            referenced_table=str(self.visit(ref_table, context)),
            referenced_columns=[str(c) for c in self.visit(ref_columns, context)],
            on_delete=_action(meta.get("on_delete")),
            on_update=_action(meta.get("on_update")),
        )

    @visits("index")
    def visit_index(self, payload: List[Any], context: Context) -> Index:
        name_node, columns, meta_node = (list(payload) + [None])[:3]
        meta = self.visit(meta_node, context) or {}

        return Index(
            name=self.visit(name_node, context),
            columns=[str(c) for c in self.visit(columns, context)],
            meta=IndexMeta(
                unique=bool(meta.get("unique", False)),
                type=meta.get("type"),
                where_clause=meta.get("where_clause"),
            ),
        )


def _action(value: Any) -> Optional[ForeignKeyAction]:
    if isinstance(value, ForeignKeyAction) or value is None:
        return value
    return ForeignKeyAction.parse(value)


__all__ = [
    "DatabaseCompiler",
    "register_compiler",
    "get_compiler",
    "list_compilers",
]
