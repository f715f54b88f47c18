# ============================================================================
# TYPE MAPPERS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Per-dialect type mapping strategies
# PURPOSE: Map column types plus key/default context to field types
# CREATED: 14 OCT 2026
# ============================================================================
"""
Type Mappers

One TypeMapper per dialect, registered by decorator and selected at
runtime from the table's dialect tag.

Each mapper is an ordered list of rules. The first rule returning a
value wins. When no rule matches, already-normalized types pass through
and anything unrecognized becomes "string".

A rule may return ``(type, extra_meta)``; the schema compiler merges
extra_meta into the field metadata (Postgres enums attach their default
this way).

    mapper = get_type_mapper("postgres")
    mapper.map_type("integer", TypeContext(primary_key=True))   # "id"
    mapper.map_type("uuid", TypeContext(foreign_key=True))      # "binary_id"
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from core.config import InferenceDefaults
from core.errors import UnsupportedDialectError
from core.types import ArrayType, Dialect, EnumType, FieldType
from sql.postgres import normalize_postgres_type
from sql.sqlite import normalize_sqlite_type

MappedType = Union[FieldType, Tuple[FieldType, Dict[str, Any]]]

KNOWN_TYPES = frozenset({
    "id", "binary_id", "binary", "integer", "float", "decimal", "string",
    "boolean", "map", "any", "date", "time", "naive_datetime",
    "utc_datetime", "uuid", "json", "jsonb",
})

JSON_TYPES = ("json", "jsonb")


@dataclass(frozen=True)
class TypeContext:
    """Column facts that influence type mapping."""
    primary_key: bool = False
    foreign_key: bool = False
    default: Any = None

    @classmethod
    def from_meta(cls, meta: Any) -> "TypeContext":
        return cls(
            primary_key=bool(getattr(meta, "primary_key", False)),
            foreign_key=bool(getattr(meta, "foreign_key", False)),
            default=getattr(meta, "default", None),
        )


def split_mapped(mapped: MappedType) -> Tuple[FieldType, Dict[str, Any]]:
    """Separate a mapped type from extra metadata."""
    if isinstance(mapped, tuple):
        return mapped[0], dict(mapped[1])
    return mapped, {}


# ============================================================================
# REGISTRY
# ============================================================================

_TYPE_MAPPERS: Dict[str, Type["TypeMapper"]] = {}


def register_type_mapper(dialect: Dialect):
    """Decorator to register a TypeMapper for a dialect."""
    def decorator(cls: Type["TypeMapper"]) -> Type["TypeMapper"]:
        key = Dialect(dialect).value
        if key in _TYPE_MAPPERS:
            raise ValueError(f"Type mapper already registered for dialect: {key}")
        cls.dialect = Dialect(dialect)
        _TYPE_MAPPERS[key] = cls
        return cls
    return decorator


def get_type_mapper(dialect: Any, config: Optional[InferenceDefaults] = None) -> "TypeMapper":
    """
    Get the type mapper for a dialect.

    Raises:
        UnsupportedDialectError: No mapper registered
    """
    key = dialect.value if isinstance(dialect, Dialect) else str(dialect)
    mapper_cls = _TYPE_MAPPERS.get(key)
    if mapper_cls is None:
        raise UnsupportedDialectError(dialect, sorted(_TYPE_MAPPERS.keys()))
    return mapper_cls(config)


# ============================================================================
# BASE MAPPER
# ============================================================================

Rule = Callable[[FieldType, TypeContext], Optional[MappedType]]


class TypeMapper:
    """Ordered rule set for one dialect."""

    dialect: Optional[Dialect] = None

    def __init__(self, config: Optional[InferenceDefaults] = None):
        self.config = config or InferenceDefaults()

    def rules(self) -> List[Rule]:
        return []

    def normalize(self, raw_type: Any) -> FieldType:
        """Bring a raw dialect type name into normalized form."""
        return raw_type

    def map_type(self, raw_type: Any, context: Optional[TypeContext] = None) -> MappedType:
        context = context or TypeContext()
        field_type = raw_type
        if isinstance(raw_type, str) and raw_type not in KNOWN_TYPES:
            field_type = self.normalize(raw_type)

        for rule in self.rules():
            result = rule(field_type, context)
            if result is not None:
                return result

        if isinstance(field_type, (ArrayType, EnumType)) or field_type in KNOWN_TYPES:
            return field_type
        return "string"

    # =========================================================================
    # SHARED RULES
    # =========================================================================

    def _array(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if not isinstance(field_type, ArrayType):
            return None
        if field_type.of in JSON_TYPES:
            # Per-element JSON structure is not inspected
            return ArrayType(of="map")
        member, _ = split_mapped(self.map_type(field_type.of, context))
        return ArrayType(of=member)

    def _json(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if field_type not in JSON_TYPES:
            return None
        default = context.default
        # Postgres reports '[]'::jsonb defaults as JSON text
        if default == [] or default == "[]":
            return ArrayType(of="any")
        if default is None:
            return self.config.json_nil_default_type or field_type
        return "map"


# ============================================================================
# POSTGRES
# ============================================================================

@register_type_mapper(Dialect.POSTGRES)
class PostgresTypeMapper(TypeMapper):
    """Postgres rules: surrogate ids, binary ids, arrays, enums, JSON."""

    def normalize(self, raw_type: Any) -> FieldType:
        return normalize_postgres_type(raw_type)

    def rules(self) -> List[Rule]:
        return [
            self._integer_key,
            self._uuid,
            self._array,
            self._enum,
            self._json,
        ]

    def _integer_key(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if field_type == "integer" and (context.primary_key or context.foreign_key):
            return "id"
        return None

    def _uuid(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if field_type != "uuid":
            return None
        if context.primary_key or context.foreign_key:
            return "binary_id"
        return "binary"

    def _enum(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if not isinstance(field_type, EnumType):
            return None
        if context.default is None:
            return field_type
        return field_type, {"default": str(context.default)}


# ============================================================================
# SQLITE
# ============================================================================

@register_type_mapper(Dialect.SQLITE)
class SqliteTypeMapper(TypeMapper):
    """SQLite rules: boolean and JSON heuristics over defaults, binary ids."""

    def normalize(self, raw_type: Any) -> FieldType:
        return normalize_sqlite_type(raw_type)

    def rules(self) -> List[Rule]:
        return [
            self._boolean,
            self._json_string,
            self._uuid,
            self._array,
            self._json,
        ]

    def _boolean(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        # SQLite has no boolean storage class; infer from a true/false default
        if field_type == "integer" and isinstance(context.default, bool):
            return "boolean"
        return None

    def _json_string(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if field_type != "string":
            return None
        if isinstance(context.default, dict):
            return "map"
        if isinstance(context.default, list) and not context.default:
            return ArrayType(of="any")
        return None

    def _uuid(self, field_type: FieldType, context: TypeContext) -> Optional[MappedType]:
        if field_type == "uuid":
            return "binary_id"
        return None


__all__ = [
    "MappedType",
    "KNOWN_TYPES",
    "TypeContext",
    "split_mapped",
    "register_type_mapper",
    "get_type_mapper",
    "TypeMapper",
    "PostgresTypeMapper",
    "SqliteTypeMapper",
]
