# ============================================================================
# RELATION SCHEMA
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Compiled, cacheable schema model
# PURPOSE: Field, PrimaryKey, ForeignKey, Index, Schema plus merge/projection
# CREATED: 14 OCT 2026
# EXPORTS: Field, FieldMeta, PrimaryKey, ForeignKey, Index, Schema, merge, project
# DEPENDENCIES: pydantic
# ============================================================================
"""
Relation Schema

The normalized description of a table produced by the schema compiler,
optionally merged with a hand-authored schema, and stored in the cache.

All models are frozen. merge() and project() build new schemas.

Merge rules:
- Sources must match (SourceMismatchError otherwise)
- Primary key: right wins entirely when present
- Fields: union by name; shared names use Field.merge (right's non-null
  metadata overrides, left fills gaps, right's type wins)
- Foreign keys: keyed by local field name, right wins on conflict
- Indices: concatenated, duplicates kept

Merged keys and indices are rebuilt against the merged fields so they
never hold a stale definition.

Projection keeps fields in the requested order, keeps keys unchanged and
drops every index that references a field outside the selection. A
projection that selects nothing keeps the source and keys with no fields.
"""

from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, Field as PydanticField

from core.errors import FieldMismatchError, SourceMismatchError
from core.types import FieldType


# ============================================================================
# FIELDS
# ============================================================================

class FieldMeta(BaseModel):
    """
    Field metadata.

    None means "unknown" so that merge can tell a missing attribute
    from an explicit one.
    """
    nullable: Optional[bool] = None
    default: Any = None
    check_constraints: Optional[List[str]] = None
    primary_key: Optional[bool] = None
    foreign_key: Optional[bool] = None
    association: Optional[bool] = None
    function_default: Optional[bool] = None

    # Embedded schemas
    embed: Optional[bool] = None
    embed_cardinality: Optional[str] = None  # "one" | "many"
    embed_related: Optional[str] = None
    embed_on_replace: Optional[str] = None

    # Raw database type before mapping
    type: Optional[FieldType] = None

    model_config = {"frozen": True, "extra": "allow"}

    def merge(self, other: "FieldMeta") -> "FieldMeta":
        """Right-biased merge: other's non-null values win."""
        merged = self.model_dump()
        merged.update({k: v for k, v in other.model_dump().items() if v is not None})
        return FieldMeta(**merged)


class Field(BaseModel):
    """A schema field."""
    name: str = PydanticField(..., description="Field name")
    type: FieldType = PydanticField(..., description="Normalized type")
    source: Optional[str] = PydanticField(
        default=None, description="Column name when it differs from the field name"
    )
    meta: FieldMeta = PydanticField(default_factory=FieldMeta)

    model_config = {"frozen": True}

    @property
    def source_name(self) -> str:
        return self.source or self.name

    @property
    def is_primary_key(self) -> bool:
        return bool(self.meta.primary_key)

    @property
    def is_foreign_key(self) -> bool:
        return bool(self.meta.foreign_key)

    @property
    def is_association(self) -> bool:
        return bool(self.meta.association)

    @property
    def is_embed(self) -> bool:
        return bool(self.meta.embed)

    def merge(self, other: "Field") -> "Field":
        """
        Merge another definition of the same field.

        Raises:
            FieldMismatchError: Names differ
        """
        if self.name != other.name:
            raise FieldMismatchError(self.name, other.name)

        return Field(
            name=other.name,
            type=other.type,
            source=other.source if other.source is not None else self.source,
            meta=self.meta.merge(other.meta),
        )


# ============================================================================
# KEYS AND INDICES
# ============================================================================

class PrimaryKey(BaseModel):
    """Primary key fields in key order."""
    fields: List[Field] = PydanticField(default_factory=list)

    model_config = {"frozen": True}

    @property
    def is_composite(self) -> bool:
        return len(self.fields) > 1

    @property
    def meta(self) -> Dict[str, Any]:
        return {"composite": self.is_composite}

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]


class ForeignKey(BaseModel):
    """Single-column foreign key."""
    field: str = PydanticField(..., description="Local field name")
    references_table: str
    references_field: Optional[str] = None
    association_name: Optional[str] = None

    model_config = {"frozen": True}


class Index(BaseModel):
    """Index over schema fields."""
    name: str
    fields: List[Field] = PydanticField(default_factory=list)
    unique: bool = False
    type: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def is_composite(self) -> bool:
        return len(self.fields) > 1


# ============================================================================
# SCHEMA
# ============================================================================

class Schema(BaseModel):
    """Normalized table schema."""
    source: str = PydanticField(..., description="Source table name")
    fields: List[Field] = PydanticField(default_factory=list)
    primary_key: Optional[PrimaryKey] = None
    foreign_keys: List[ForeignKey] = PydanticField(default_factory=list)
    indices: List[Index] = PydanticField(default_factory=list)

    model_config = {"frozen": True}

    @classmethod
    def empty(cls, source: str) -> "Schema":
        """Schema without fields, keys or indices."""
        return cls(source=source)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    @property
    def is_empty(self) -> bool:
        return not self.fields

    @property
    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    @property
    def foreign_key_field_names(self) -> List[str]:
        return [fk.field for fk in self.foreign_keys]

    @property
    def is_composite_primary_key(self) -> bool:
        return self.primary_key is not None and self.primary_key.is_composite

    def find_field(self, name: str) -> Optional[Field]:
        for field in self.fields:
            if field.name == name:
                return field
        return None

    def is_primary_key_field(self, name: str) -> bool:
        return self.primary_key is not None and name in self.primary_key.field_names

    def is_foreign_key_field(self, name: str) -> bool:
        return name in self.foreign_key_field_names

    def get_foreign_key(self, name: str) -> Optional[ForeignKey]:
        for fk in self.foreign_keys:
            if fk.field == name:
                return fk
        return None

    # =========================================================================
    # MERGE AND PROJECTION
    # =========================================================================

    def merge(self, other: "Schema") -> "Schema":
        """
        Merge another schema into this one, other taking precedence.

        Raises:
            SourceMismatchError: Sources differ
        """
        if self.source != other.source:
            raise SourceMismatchError(self.source, other.source)

        primary_key = other.primary_key if other.primary_key is not None else self.primary_key

        fields: Dict[str, Field] = {f.name: f for f in self.fields}
        for field in other.fields:
            existing = fields.get(field.name)
            fields[field.name] = existing.merge(field) if existing is not None else field

        foreign_keys: Dict[str, ForeignKey] = {fk.field: fk for fk in self.foreign_keys}
        for fk in other.foreign_keys:
            foreign_keys[fk.field] = fk

        # Keys and indices point at the merged field definitions
        if primary_key is not None:
            primary_key = PrimaryKey(fields=_resolve(primary_key.fields, fields))
        indices = [
            index.model_copy(update={"fields": _resolve(index.fields, fields)})
            for index in list(self.indices) + list(other.indices)
        ]

        return Schema(
            source=self.source,
            fields=list(fields.values()),
            primary_key=primary_key,
            foreign_keys=list(foreign_keys.values()),
            indices=indices,
        )

    def project(self, names: Iterable[str]) -> "Schema":
        """
        Narrow the schema to the named fields, in the given order.

        Unknown names are ignored. Keys are kept unchanged; indices that
        reference any excluded field are dropped.
        """
        if self.is_empty:
            return self._without_fields()

        selected: List[Field] = []
        for name in names:
            field = self.find_field(str(name))
            if field is not None and field not in selected:
                selected.append(field)

        if not selected:
            return self._without_fields()

        by_name = {f.name: f for f in selected}
        indices = [
            index.model_copy(update={"fields": _resolve(index.fields, by_name)})
            for index in self.indices
            if set(index.field_names).issubset(by_name)
        ]

        return Schema(
            source=self.source,
            fields=selected,
            primary_key=self.primary_key,
            foreign_keys=list(self.foreign_keys),
            indices=indices,
        )

    def _without_fields(self) -> "Schema":
        """Same source and keys, no fields or indices."""
        return Schema(
            source=self.source,
            primary_key=self.primary_key,
            foreign_keys=list(self.foreign_keys),
        )


def _resolve(fields: List[Field], by_name: Dict[str, Field]) -> List[Field]:
    """Swap each field for the definition of the same name in by_name."""
    return [by_name.get(f.name, f) for f in fields]


def merge(left: Schema, right: Schema) -> Schema:
    """Merge two schemas, right taking precedence."""
    return left.merge(right)


def project(schema: Schema, names: Iterable[str]) -> Schema:
    """Narrow a schema to a field subset."""
    return schema.project(names)


__all__ = [
    "FieldMeta",
    "Field",
    "PrimaryKey",
    "ForeignKey",
    "Index",
    "Schema",
    "merge",
    "project",
]
