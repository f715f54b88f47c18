# ============================================================================
# POSTGRES COMPILER
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: SQL layer - Postgres types and defaults
# PURPOSE: Normalize Postgres catalog types and column default expressions
# CREATED: 14 OCT 2026
# ============================================================================
"""
Postgres Compiler

Type strings come from the catalog as formatted by the introspector
("integer", "character varying(255)", "timestamp with time zone",
"jsonb[]"). Enum columns arrive as ("enum", [values]).

uuid, json and jsonb are kept as tokens; the relation type mapper
decides what they become from key flags and defaults.
"""

import re
from typing import Any, Dict

from core.types import ArrayType, Dialect, EnumType, FieldType, SqlDefault
from core.visitor import Context, is_tagged, visits
from sql.compiler import DatabaseCompiler, register_compiler


# ============================================================================
# TYPE NORMALIZATION
# ============================================================================

POSTGRES_TYPE_MAP: Dict[str, str] = {
    # Integers
    "integer": "integer",
    "int": "integer",
    "int4": "integer",
    "bigint": "integer",
    "int8": "integer",
    "smallint": "integer",
    "int2": "integer",
    "serial": "integer",
    "serial4": "integer",
    "bigserial": "integer",
    "serial8": "integer",
    "smallserial": "integer",
    "serial2": "integer",
    # Floating point and exact numerics
    "real": "float",
    "float4": "float",
    "double precision": "float",
    "float8": "float",
    "numeric": "decimal",
    "decimal": "decimal",
    "money": "decimal",
    # Characters
    "text": "string",
    "character varying": "string",
    "varchar": "string",
    "character": "string",
    "char": "string",
    "bpchar": "string",
    "name": "string",
    "citext": "string",
    # Booleans and binary
    "boolean": "boolean",
    "bool": "boolean",
    "bytea": "binary",
    # Date and time
    "date": "date",
    "time": "time",
    "time without time zone": "time",
    "time with time zone": "time",
    "timetz": "time",
    "timestamp": "naive_datetime",
    "timestamp without time zone": "naive_datetime",
    "timestamp with time zone": "utc_datetime",
    "timestamptz": "utc_datetime",
    # Tokens resolved by the type mapper
    "uuid": "uuid",
    "json": "json",
    "jsonb": "jsonb",
}

_PARAMS = re.compile(r"\([^)]*\)")
_SPACES = re.compile(r"\s+")


def normalize_postgres_type(raw: Any) -> FieldType:
    """
    Normalize a Postgres catalog type name.

    Network, geometric, interval, range, xml and unknown types fall
    back to "string".
    """
    if isinstance(raw, (ArrayType, EnumType)):
        return raw
    if not isinstance(raw, str):
        return "string"

    name = raw.strip().lower()
    if name.endswith("[]"):
        return ArrayType(of=normalize_postgres_type(name[:-2]))
    if name.startswith("_"):
        # Internal array type names (_int4, _text)
        return ArrayType(of=normalize_postgres_type(name[1:]))

    if name in POSTGRES_TYPE_MAP:
        return POSTGRES_TYPE_MAP[name]

    base = _SPACES.sub(" ", _PARAMS.sub("", name)).strip()
    return POSTGRES_TYPE_MAP.get(base, "string")


# ============================================================================
# DEFAULT PARSING
# ============================================================================

_CAST = re.compile(r"^'.*'::\w+")
_QUOTED = re.compile(r"^'.*'$", re.DOTALL)
_INTEGER = re.compile(r"^[0-9]+$")
_FLOAT = re.compile(r"^[0-9]+\.[0-9]+$")


def parse_postgres_default(value: Any) -> Any:
    """
    Parse a column default expression as reported by pg_get_expr.

    Examples:
        "nextval('users_id_seq'::regclass)" -> SqlDefault.AUTO_INCREMENT
        "'draft'::character varying"        -> "draft"
        "42"                                -> 42
    """
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        return value

    trimmed = value.strip()

    if trimmed == "NULL":
        return None
    if trimmed.startswith("nextval("):
        return SqlDefault.AUTO_INCREMENT
    if trimmed.startswith("now()") or trimmed.startswith("CURRENT_TIMESTAMP"):
        return SqlDefault.CURRENT_TIMESTAMP
    if trimmed.startswith("CURRENT_DATE"):
        return SqlDefault.CURRENT_DATE
    if trimmed.startswith("CURRENT_TIME"):
        return SqlDefault.CURRENT_TIME
    if _CAST.match(trimmed):
        return trimmed.split("::", 1)[0].strip("'")
    if _QUOTED.match(trimmed):
        return trimmed.strip("'")
    if _INTEGER.match(trimmed):
        return int(trimmed)
    if _FLOAT.match(trimmed):
        return float(trimmed)
    if trimmed.lower() in ("true", "false"):
        return trimmed.lower() == "true"
    return trimmed


# ============================================================================
# COMPILER
# ============================================================================

@register_compiler(Dialect.POSTGRES)
class PostgresCompiler(DatabaseCompiler):
    """Database model builder for Postgres introspection trees."""

    @visits("type")
    def visit_type(self, payload: Any, context: Context) -> FieldType:
        if is_tagged(payload):
            return self.visit(payload, context)
        return normalize_postgres_type(payload)

    @visits("enum")
    def visit_enum(self, payload: Any, context: Context) -> EnumType:
        return EnumType(values=[str(v) for v in payload or []])

    @visits("array")
    def visit_array(self, payload: Any, context: Context) -> ArrayType:
        return ArrayType(of=self.visit_type(payload, context))

    @visits("default")
    def visit_default(self, payload: Any, context: Context) -> Any:
        return parse_postgres_default(payload)


__all__ = [
    "POSTGRES_TYPE_MAP",
    "normalize_postgres_type",
    "parse_postgres_default",
    "PostgresCompiler",
]
