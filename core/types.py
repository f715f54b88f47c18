# ============================================================================
# NORMALIZED TYPES
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Core - Type tags shared by the database and relation layers
# PURPOSE: Atom-like type names, parameterized array/enum types, SQL defaults
# CREATED: 14 OCT 2026
# EXPORTS: FieldType, ArrayType, EnumType, SqlDefault, Dialect
# DEPENDENCIES: pydantic
# ============================================================================
"""
Normalized Types

A field type is either a plain string tag ("id", "string", "map", ...)
or a parameterized pydantic model:

- ArrayType(of=<FieldType>)   e.g. ArrayType(of="integer")
- EnumType(values=[...])      e.g. EnumType(values=["draft", "published"])

Parameterized types carry a ``kind`` discriminator so they survive a
JSON round trip through the schema cache unchanged.
"""

from enum import Enum
from typing import Annotated, Any, List, Literal, Union

from pydantic import BaseModel, Field


# ============================================================================
# TYPE TAGS
# ============================================================================

class Dialect(str, Enum):
    """Supported database dialects."""
    POSTGRES = "postgres"
    SQLITE = "sqlite"


class SqlDefault(str, Enum):
    """Database-generated default values."""
    AUTO_INCREMENT = "auto_increment"
    CURRENT_TIMESTAMP = "current_timestamp"
    CURRENT_DATE = "current_date"
    CURRENT_TIME = "current_time"


# Surrogate integer key and UUID-like key
ID = "id"
BINARY_ID = "binary_id"

INTEGER_TYPES = ("id", "integer")
BINARY_ID_TYPES = ("binary_id", "uuid")


# ============================================================================
# PARAMETERIZED TYPES
# ============================================================================

class ArrayType(BaseModel):
    """Array of a member type."""
    kind: Literal["array"] = "array"
    of: "FieldType" = Field(..., description="Member type")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"array<{type_name(self.of)}>"


class EnumType(BaseModel):
    """Enumerated type with a fixed list of values."""
    kind: Literal["enum"] = "enum"
    values: List[str] = Field(default_factory=list, description="Declared enum values")

    model_config = {"frozen": True}

    def __str__(self) -> str:
        return f"enum<{', '.join(self.values)}>"


ParameterizedType = Annotated[Union[ArrayType, EnumType], Field(discriminator="kind")]
FieldType = Union[str, ParameterizedType]

ArrayType.model_rebuild()


def type_name(field_type: Any) -> str:
    """Readable name for a field type."""
    if isinstance(field_type, Enum):
        return field_type.value
    return str(field_type)


def is_binary_id(field_type: Any) -> bool:
    """True for the UUID-like key family."""
    return isinstance(field_type, str) and field_type in BINARY_ID_TYPES


__all__ = [
    "Dialect",
    "SqlDefault",
    "ID",
    "BINARY_ID",
    "INTEGER_TYPES",
    "BINARY_ID_TYPES",
    "ArrayType",
    "EnumType",
    "ParameterizedType",
    "FieldType",
    "type_name",
    "is_binary_id",
]
