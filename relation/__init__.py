# ============================================================================
# RELATION MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer initialization
# PURPOSE: Export schema models, compiler, declarations, renderer and cache
# CREATED: 14 OCT 2026
# ============================================================================

from relation.schema import Field, FieldMeta, PrimaryKey, ForeignKey, Index, Schema, merge, project
from relation.type_mappers import (
    TypeContext,
    TypeMapper,
    PostgresTypeMapper,
    SqliteTypeMapper,
    register_type_mapper,
    get_type_mapper,
)
from relation.compiler import SchemaCompiler, compile_table
from relation.definitions import parse_type, schema_from_definition, load_definitions
from relation.declarations import (
    AttributeDeclaration,
    Declarations,
    DeclarationGenerator,
    FieldDeclaration,
    PrimaryKeySpec,
    generate,
)
from relation.renderer import render_model
from relation.cache import SchemaCache, calculate_digest, migrations_digest
from relation.inference import infer_schema, load_schema

__all__ = [
    # Schema
    "Field",
    "FieldMeta",
    "PrimaryKey",
    "ForeignKey",
    "Index",
    "Schema",
    "merge",
    "project",
    # Type mapping
    "TypeContext",
    "TypeMapper",
    "PostgresTypeMapper",
    "SqliteTypeMapper",
    "register_type_mapper",
    "get_type_mapper",
    # Compilation
    "SchemaCompiler",
    "compile_table",
    # Custom schemas
    "parse_type",
    "schema_from_definition",
    "load_definitions",
    # Declarations
    "AttributeDeclaration",
    "Declarations",
    "DeclarationGenerator",
    "FieldDeclaration",
    "PrimaryKeySpec",
    "generate",
    "render_model",
    # Cache
    "SchemaCache",
    "calculate_digest",
    "migrations_digest",
    "infer_schema",
    "load_schema",
]
