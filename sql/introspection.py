# ============================================================================
# INTROSPECTION
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: SQL layer - Introspection collaborator contract
# PURPOSE: Obtain table trees and build Tables for a dialect
# CREATED: 14 OCT 2026
# ============================================================================
"""
Introspection

The core never connects to a database. An Introspector supplies the
tagged tree for a table:

    introspector.table("users", repo) -> ("table", [...])

and raises IntrospectionError when the table cannot be described.

SnapshotIntrospector reads table descriptions from a YAML snapshot,
which lets schemas be inferred and cached offline (CI, code generation)
without a live connection.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Protocol, Union

import yaml

from core.errors import IntrospectionError
from core.types import Dialect
from core.visitor import Node, tagged
from sql.compiler import get_compiler
from sql.models import Table

# Registers the dialect compilers
import sql.postgres  # noqa: F401
import sql.sqlite  # noqa: F401

logger = logging.getLogger(__name__)


class Introspector(Protocol):
    """Introspection collaborator."""

    dialect: Dialect

    def table(self, table_name: str, repo: Any) -> Node:
        """Return the table tree or raise IntrospectionError."""
        ...


# ============================================================================
# BUILDING
# ============================================================================

def build_table(node: Node, dialect: Any) -> Table:
    """
    Build a Table from an introspection tree.

    Raises:
        UnsupportedDialectError: No compiler registered for the dialect
    """
    return get_compiler(dialect).compile(node)


def load_table(introspector: Introspector, table_name: str, repo: Any) -> Table:
    """Introspect a table and build its Table model."""
    node = introspector.table(table_name, repo)
    return build_table(node, introspector.dialect)


# ============================================================================
# SNAPSHOT INTROSPECTOR
# ============================================================================

class SnapshotIntrospector:
    """
    Introspector backed by a YAML snapshot.

    Snapshot shape:
        dialect: postgres
        tables:
          users:
            columns:
              - {name: id, type: integer, nullable: false, primary_key: true,
                 default: "nextval('users_id_seq'::regclass)"}
              - {name: status, type: {enum: [draft, published]}}
            foreign_keys:
              - {name: fk, columns: [org_id], references_table: orgs,
                 references_columns: [id], on_delete: CASCADE}
            indices:
              - {name: users_email_index, columns: [email], unique: true, type: btree}
    """

    def __init__(self, tables: Dict[str, Any], dialect: Union[str, Dialect]):
        self.tables = tables or {}
        self.dialect = Dialect(dialect)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "SnapshotIntrospector":
        """Load a snapshot file."""
        path = Path(path)
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise IntrospectionError(str(path), e) from e

        if "dialect" not in data:
            raise IntrospectionError(str(path), "snapshot has no dialect")

        logger.info(f"Loaded snapshot {path.name}: {len(data.get('tables') or {})} tables")
        return cls(data.get("tables") or {}, data["dialect"])

    def table_names(self) -> List[str]:
        return list(self.tables.keys())

    def table(self, table_name: str, repo: Any = None) -> Node:
        definition = self.tables.get(table_name)
        if definition is None:
            raise IntrospectionError(table_name, "table not found in snapshot")

        return tagged("table", [
            tagged("identifier", table_name),
            [self._column(c) for c in definition.get("columns") or []],
            [self._foreign_key(fk) for fk in definition.get("foreign_keys") or []],
            [self._index(ix) for ix in definition.get("indices") or []],
        ])

    def _column(self, column: Dict[str, Any]) -> Node:
        return tagged("column", [
            tagged("identifier", column["name"]),
            tagged("type", self._type(column.get("type"))),
            tagged("meta", {
                "nullable": column.get("nullable", True),
                "default": column.get("default"),
                "primary_key": column.get("primary_key", False),
                "check_constraints": list(column.get("check_constraints") or []),
            }),
        ])

    def _type(self, raw: Any) -> Any:
        if isinstance(raw, dict) and len(raw) == 1:
            (kind, value), = raw.items()
            if kind == "array":
                return tagged("array", self._type(value))
            return tagged(kind, value)
        return raw

    def _foreign_key(self, fk: Dict[str, Any]) -> Node:
        return tagged("foreign_key", [
            tagged("identifier", fk.get("name")) if fk.get("name") else None,
            [tagged("identifier", c) for c in fk.get("columns") or []],
            tagged("identifier", fk["references_table"]),
            [tagged("identifier", c) for c in fk.get("references_columns") or []],
            tagged("meta", {
                "on_delete": fk.get("on_delete"),
                "on_update": fk.get("on_update"),
            }),
        ])

    def _index(self, index: Dict[str, Any]) -> Node:
        return tagged("index", [
            tagged("identifier", index["name"]),
            [tagged("identifier", c) for c in index.get("columns") or []],
            tagged("meta", {
                "unique": index.get("unique", False),
                "type": tagged("identifier", index["type"]) if index.get("type") else None,
                "where_clause": index.get("where_clause"),
            }),
        ])


__all__ = [
    "Introspector",
    "build_table",
    "load_table",
    "SnapshotIntrospector",
]
