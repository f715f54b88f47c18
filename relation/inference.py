# ============================================================================
# SCHEMA INFERENCE PIPELINE
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - End-to-end entry point
# PURPOSE: Cached inference, custom-schema merge and field projection
# CREATED: 16 OCT 2026
# ============================================================================
"""
Schema Inference Pipeline

    introspect -> build Table -> compile Schema -> cache
                                                    |
                           merge(custom) -> project(fields) -> Schema

When the cache is disabled every call introspects and compiles afresh.
"""

import logging
from typing import Any, Iterable, Optional

from core.config import RelationConfig, get_defaults
from relation.cache import SchemaCache
from relation.schema import Schema
from sql.introspection import Introspector

logger = logging.getLogger(__name__)


def infer_schema(
    repo: Any,
    table_name: str,
    introspector: Introspector,
    config: Optional[RelationConfig] = None,
) -> Schema:
    """
    Inferred schema for a table, served from the cache when valid.

    Raises:
        IntrospectionError: The table cannot be introspected
        UnsupportedDialectError: No compiler or type mapper for the dialect
    """
    cache = SchemaCache(config or get_defaults())
    if not cache.enabled:
        return cache.infer(repo, table_name, introspector)
    return cache.get_or_infer(repo, table_name, introspector)


def load_schema(
    repo: Any,
    table_name: str,
    introspector: Introspector,
    config: Optional[RelationConfig] = None,
    custom: Optional[Schema] = None,
    fields: Optional[Iterable[str]] = None,
) -> Schema:
    """
    Final schema for code generation.

    Args:
        repo: Repository identifier
        table_name: Source table
        introspector: Introspection collaborator
        config: Pipeline configuration
        custom: Hand-authored schema merged over the inferred one
        fields: Field names to keep, in declaration order

    Raises:
        SourceMismatchError: custom describes another table
    """
    schema = infer_schema(repo, table_name, introspector, config)

    if custom is not None:
        schema = schema.merge(custom)
        logger.debug(f"Merged custom schema into {table_name}")

    if fields is not None:
        schema = schema.project(fields)
        logger.debug(f"Projected {table_name} to {schema.field_names}")

    return schema


__all__ = [
    "infer_schema",
    "load_schema",
]
