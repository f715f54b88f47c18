# ============================================================================
# CORE MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Core module initialization
# PURPOSE: Export the visitor substrate, errors and configuration
# CREATED: 14 OCT 2026
# ============================================================================

from core.errors import (
    RelationSchemaError,
    IntrospectionError,
    UnsupportedDialectError,
    SourceMismatchError,
    FieldMismatchError,
    SchemaDefinitionError,
    CacheIOError,
    DigestComputationError,
)
from core.visitor import Visitor, visits, tagged, is_tagged
from core.config import RelationConfig, get_defaults

__all__ = [
    # Errors
    "RelationSchemaError",
    "IntrospectionError",
    "UnsupportedDialectError",
    "SourceMismatchError",
    "FieldMismatchError",
    "SchemaDefinitionError",
    "CacheIOError",
    "DigestComputationError",
    # Visitor
    "Visitor",
    "visits",
    "tagged",
    "is_tagged",
    # Config
    "RelationConfig",
    "get_defaults",
]
