# ============================================================================
# RELATION SCHEMA COMPILER
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Table to Schema
# PURPOSE: Apply dialect type mapping and resolve keys/indices to fields
# CREATED: 14 OCT 2026
# ============================================================================
"""
Relation Schema Compiler

Walks the five components of a Table in a fixed order:

    name -> source, columns -> fields, primary_key, foreign_keys, indices

Each step sees the results of the previous ones in its context, so
primary keys and indices resolve column names to the fields already
built instead of deriving them again.

A composite foreign key keeps only its first column pair.
"""

import logging
from typing import Any, Dict, List, Optional

from core.config import RelationConfig
from core.visitor import Context, Visitor, visits
from relation.schema import FieldMeta, Field, ForeignKey, Index, PrimaryKey, Schema
from relation.type_mappers import TypeContext, TypeMapper, get_type_mapper, split_mapped
from sql import models as db

logger = logging.getLogger(__name__)

COMPONENTS = [
    ("name", "source"),
    ("columns", "fields"),
    ("primary_key", "primary_key"),
    ("foreign_keys", "foreign_keys"),
    ("indices", "indices"),
]


class SchemaCompiler(Visitor):
    """Compiles a database Table into a relation Schema."""

    def __init__(self, type_mapper: TypeMapper):
        self.type_mapper = type_mapper

    def compile(self, table: db.Table) -> Schema:
        attributes: Dict[str, Any] = {}
        for source_key, target_key in COMPONENTS:
            context = {**attributes, "table": table}
            attributes[target_key] = self.visit((source_key, getattr(table, source_key)), context)
        return Schema(**attributes)

    # =========================================================================
    # COMPONENTS
    # =========================================================================

    @visits("name")
    def visit_name(self, payload: str, context: Context) -> str:
        return payload

    @visits("columns")
    def visit_columns(self, payload: List[db.Column], context: Context) -> List[Field]:
        return [self.visit(("column", column), context) for column in payload]

    @visits("column")
    def visit_column(self, column: db.Column, context: Context) -> Field:
        mapped = self.type_mapper.map_type(column.type, TypeContext.from_meta(column.meta))
        field_type, extra = split_mapped(mapped)

        meta = {
            "nullable": column.meta.nullable,
            "default": column.meta.default,
            "check_constraints": list(column.meta.check_constraints),
            "primary_key": column.meta.primary_key,
            "foreign_key": column.meta.foreign_key,
            "type": column.type,
        }
        meta.update(extra)

        return Field(name=column.name, type=field_type, meta=FieldMeta(**meta))

    @visits("primary_key")
    def visit_primary_key(self, payload: db.PrimaryKey, context: Context) -> Optional[PrimaryKey]:
        if not payload.is_present:
            return None
        return PrimaryKey(fields=_resolve(payload.column_names, context["fields"]))

    @visits("foreign_keys")
    def visit_foreign_keys(self, payload: List[db.ForeignKey], context: Context) -> List[ForeignKey]:
        return [self.visit(("foreign_key", fk), context) for fk in payload if fk.columns]

    @visits("foreign_key")
    def visit_foreign_key(self, fk: db.ForeignKey, context: Context) -> ForeignKey:
        if fk.is_composite:
            logger.debug(
                f"Composite foreign key {fk.name or fk.columns} truncated to {fk.columns[0]}"
            )
        return ForeignKey(
            field=fk.columns[0],
            references_table=fk.referenced_table,
            references_field=fk.referenced_columns[0] if fk.referenced_columns else None,
        )

    @visits("indices")
    def visit_indices(self, payload: List[db.Index], context: Context) -> List[Index]:
        return [self.visit(("index", index), context) for index in payload]

    @visits("index")
    def visit_index(self, index: db.Index, context: Context) -> Index:
        return Index(
            name=index.name,
            fields=_resolve(index.columns, context["fields"]),
            unique=index.meta.unique,
            type=index.meta.type,
        )


def _resolve(names: List[str], fields: List[Field]) -> List[Field]:
    by_name = {f.name: f for f in fields}
    return [by_name[name] for name in names if name in by_name]


def compile_table(table: db.Table, config: Optional[RelationConfig] = None) -> Schema:
    """
    Compile a Table with the type mapper for its dialect.

    Raises:
        UnsupportedDialectError: No type mapper for table.dialect
    """
    config = config or RelationConfig()
    mapper = get_type_mapper(table.dialect, config.inference)
    schema = SchemaCompiler(mapper).compile(table)
    logger.debug(f"Compiled schema {schema.source}: {len(schema.fields)} fields")
    return schema


__all__ = [
    "COMPONENTS",
    "SchemaCompiler",
    "compile_table",
]
