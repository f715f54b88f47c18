# ============================================================================
# DATABASE MODEL
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: SQL layer - Typed entities built from introspection
# PURPOSE: Table, Column, PrimaryKey, ForeignKey, Index
# CREATED: 14 OCT 2026
# EXPORTS: Table, Column, ColumnMeta, PrimaryKey, ForeignKey, ForeignKeyAction, Index, IndexMeta
# DEPENDENCIES: pydantic
# ============================================================================
"""
Database Model

Ephemeral description of a table as the database reports it. Rebuilt
on every introspection and consumed by the relation schema compiler.

Column types here are already normalized per dialect, so a Postgres
"character varying(255)" column and a SQLite "TEXT" column both carry
the "string" type. Type mapping that depends on key flags or defaults
(surrogate ids, binary ids, JSON heuristics) happens later.
"""

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field

from core.types import Dialect, FieldType


class ForeignKeyAction(str, Enum):
    """Referential actions for ON DELETE / ON UPDATE."""
    RESTRICT = "restrict"
    CASCADE = "cascade"
    SET_NULL = "set_null"
    SET_DEFAULT = "set_default"

    @classmethod
    def parse(cls, action: Any) -> Optional["ForeignKeyAction"]:
        """Parse a catalog action string; unknown values become None."""
        if not isinstance(action, str):
            return None
        return {
            "RESTRICT": cls.RESTRICT,
            "CASCADE": cls.CASCADE,
            "SET NULL": cls.SET_NULL,
            "SET DEFAULT": cls.SET_DEFAULT,
            "NO ACTION": cls.RESTRICT,
        }.get(action.strip().upper())


# ============================================================================
# COLUMNS
# ============================================================================

class ColumnMeta(BaseModel):
    """Column flags and parsed default."""
    nullable: bool = Field(default=True)
    default: Any = Field(default=None, description="Parsed default value or SqlDefault")
    primary_key: bool = Field(default=False)
    foreign_key: bool = Field(default=False)
    check_constraints: List[str] = Field(default_factory=list)

    model_config = {"frozen": False}


class Column(BaseModel):
    """A table column."""
    name: str = Field(..., description="Column name")
    type: FieldType = Field(..., description="Dialect-normalized type")
    meta: ColumnMeta = Field(default_factory=ColumnMeta)

    model_config = {"frozen": False}

    @property
    def is_primary_key(self) -> bool:
        return self.meta.primary_key

    @property
    def is_nullable(self) -> bool:
        return self.meta.nullable

    @property
    def has_default(self) -> bool:
        return self.meta.default is not None

    @property
    def has_check_constraints(self) -> bool:
        return bool(self.meta.check_constraints)


# ============================================================================
# KEYS AND INDICES
# ============================================================================

class PrimaryKey(BaseModel):
    """Primary key columns in declaration order."""
    columns: List[Column] = Field(default_factory=list)

    @classmethod
    def from_columns(cls, columns: List[Column]) -> "PrimaryKey":
        """Collect the columns flagged as primary key, preserving order."""
        return cls(columns=[c for c in columns if c.meta.primary_key])

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    @property
    def is_present(self) -> bool:
        return len(self.columns) > 0

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def includes_column(self, name: str) -> bool:
        return name in self.column_names


class ForeignKey(BaseModel):
    """Foreign key constraint."""
    name: Optional[str] = Field(default=None, description="Constraint name")
    columns: List[str] = Field(default_factory=list)
    referenced_table: str = Field(...)
    referenced_columns: List[str] = Field(default_factory=list)
    on_delete: Optional[ForeignKeyAction] = None
    on_update: Optional[ForeignKeyAction] = None

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    def includes_column(self, name: str) -> bool:
        return name in self.columns


class IndexMeta(BaseModel):
    """Index flags."""
    unique: bool = False
    type: Optional[str] = Field(default=None, description="Index method (btree, hash, gin, ...)")
    where_clause: Optional[str] = None


class Index(BaseModel):
    """Table index."""
    name: str
    columns: List[str] = Field(default_factory=list)
    meta: IndexMeta = Field(default_factory=IndexMeta)

    @property
    def is_composite(self) -> bool:
        return len(self.columns) > 1

    @property
    def is_unique(self) -> bool:
        return self.meta.unique

    @property
    def is_partial(self) -> bool:
        return self.meta.where_clause is not None

    def includes_column(self, name: str) -> bool:
        return name in self.columns


# ============================================================================
# TABLE
# ============================================================================

class Table(BaseModel):
    """
    Introspected table.

    Built by a dialect compiler; `dialect` selects the type mapper used
    by the relation schema compiler.
    """
    name: str
    dialect: Dialect
    columns: List[Column] = Field(default_factory=list)
    primary_key: PrimaryKey = Field(default_factory=PrimaryKey)
    foreign_keys: List[ForeignKey] = Field(default_factory=list)
    indices: List[Index] = Field(default_factory=list)

    def get_column(self, name: str) -> Optional[Column]:
        for column in self.columns:
            if column.name == name:
                return column
        return None

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    @property
    def primary_key_column_names(self) -> List[str]:
        return self.primary_key.column_names

    @property
    def foreign_key_column_names(self) -> List[str]:
        names: List[str] = []
        for fk in self.foreign_keys:
            for column in fk.columns:
                if column not in names:
                    names.append(column)
        return names

    def is_primary_key_column(self, name: str) -> bool:
        return self.primary_key.includes_column(name)

    def is_foreign_key_column(self, name: str) -> bool:
        return any(fk.includes_column(name) for fk in self.foreign_keys)

    def get_foreign_key_for_column(self, name: str) -> Optional[ForeignKey]:
        for fk in self.foreign_keys:
            if fk.includes_column(name):
                return fk
        return None


__all__ = [
    "ForeignKeyAction",
    "ColumnMeta",
    "Column",
    "PrimaryKey",
    "ForeignKey",
    "IndexMeta",
    "Index",
    "Table",
]
