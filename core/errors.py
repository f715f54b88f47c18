# ============================================================================
# ERROR TAXONOMY
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Core - Exception hierarchy
# PURPOSE: Named failures for introspection, dialects, merge and caching
# CREATED: 14 OCT 2026
# ============================================================================
"""
Error Taxonomy

User-visible failures are limited to introspection and dialect support.
Merge raises on programming errors (mismatched sources or field names).
Cache and digest errors are raised internally and recovered at the
cache boundary, where they degrade to a miss or the "empty" digest.
"""

from typing import Any, Optional


class RelationSchemaError(Exception):
    """Base error for schema inference and caching."""
    pass


# ============================================================================
# FATAL ERRORS
# ============================================================================

class IntrospectionError(RelationSchemaError):
    """Introspection collaborator could not describe the table."""

    def __init__(self, table: str, reason: Any):
        self.table = table
        self.reason = reason
        super().__init__(f"Failed to introspect table {table}: {reason}")


class UnsupportedDialectError(RelationSchemaError):
    """No compiler or type mapper is registered for the dialect."""

    def __init__(self, dialect: Any, available: Optional[list] = None):
        self.dialect = dialect
        self.available = available or []
        message = f"Unsupported database dialect: {dialect!r}"
        if self.available:
            message += f". Available: {', '.join(self.available)}"
        super().__init__(message)


# ============================================================================
# CALLER ERRORS
# ============================================================================

class SourceMismatchError(RelationSchemaError):
    """Two schemas with different source tables were merged."""

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot merge schemas with different sources: {left} != {right}"
        )


class FieldMismatchError(RelationSchemaError):
    """Two fields with different names were merged."""

    def __init__(self, left: str, right: str):
        self.left = left
        self.right = right
        super().__init__(
            f"Cannot merge fields with different names: {left!r} and {right!r}"
        )


class SchemaDefinitionError(RelationSchemaError):
    """A hand-authored schema definition is malformed."""

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Invalid schema definition for {source}: {reason}")


# ============================================================================
# RECOVERABLE ERRORS
# ============================================================================

class CacheIOError(RelationSchemaError):
    """Cache file could not be read, decoded or written."""

    def __init__(self, path: Any, reason: Any):
        self.path = path
        self.reason = reason
        super().__init__(f"Cache I/O failed for {path}: {reason}")


class DigestComputationError(RelationSchemaError):
    """Migration files could not be hashed."""

    def __init__(self, path: Any, reason: Any):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot compute migration digest for {path}: {reason}")


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "RelationSchemaError",
    "IntrospectionError",
    "UnsupportedDialectError",
    "SourceMismatchError",
    "FieldMismatchError",
    "SchemaDefinitionError",
    "CacheIOError",
    "DigestComputationError",
]
