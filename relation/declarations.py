# ============================================================================
# DECLARATION GENERATOR
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Schema to field/attribute declarations
# PURPOSE: Decide which fields are declared and with which options
# CREATED: 15 OCT 2026
# ============================================================================
"""
Declaration Generator

Turns a final Schema into declarations for the code-assembly step:

    {
        attributes: {primary_key: [...], foreign_key_type: [...], other: [...]},
        fields: [...],
    }

Field suppression, in order:
1. inserted_at / updated_at (emitted as one timestamps block)
2. association fields, unless embedded (then embeds_one / embeds_many)
3. primary key fields, unless the key is composite (then declared with
   a primary_key marker)

Primary key attribute:
- conventional single integer key -> no attribute
- other single key                -> (name, type, autogenerate=True)
- composite key                   -> primary_key = False

The foreign key type attribute is global: emitted once when any foreign
key field has a binary-id type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from core.types import BINARY_ID, BINARY_ID_TYPES, INTEGER_TYPES, EnumType, FieldType, SqlDefault
from core.visitor import Context, Visitor, visits
from relation.schema import Field, PrimaryKey, Schema

TIMESTAMP_FIELDS = ("inserted_at", "updated_at")


# ============================================================================
# DECLARATION TYPES
# ============================================================================

@dataclass
class PrimaryKeySpec:
    """Explicit single primary key."""
    name: str
    type: FieldType
    autogenerate: bool = True


@dataclass
class AttributeDeclaration:
    """Module-level attribute, e.g. primary_key = False."""
    name: str
    value: Any


@dataclass
class FieldDeclaration:
    """A field or embed declaration."""
    kind: str  # field | embeds_one | embeds_many
    name: str
    type: Any
    options: Dict[str, Any] = field(default_factory=dict)
    nullable: bool = True


@dataclass
class Declarations:
    """Generator output."""
    attributes: Dict[str, List[AttributeDeclaration]] = field(default_factory=lambda: {
        "primary_key": [],
        "foreign_key_type": [],
        "other": [],
    })
    fields: List[FieldDeclaration] = field(default_factory=list)
    timestamps: bool = False

    @property
    def primary_key(self) -> List[AttributeDeclaration]:
        return self.attributes["primary_key"]

    @property
    def foreign_key_type(self) -> List[AttributeDeclaration]:
        return self.attributes["foreign_key_type"]

    def field_names(self) -> List[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> Optional[FieldDeclaration]:
        for declaration in self.fields:
            if declaration.name == name:
                return declaration
        return None


# ============================================================================
# GENERATOR
# ============================================================================

class DeclarationGenerator(Visitor):
    """Visits a Schema and collects declarations."""

    def generate(self, schema: Schema) -> Declarations:
        context = {"schema": schema}
        declarations = Declarations()
        declarations.attributes["primary_key"] = self.visit(("primary_key", schema.primary_key), context)
        declarations.attributes["foreign_key_type"] = self.visit(("foreign_key_type", schema.fields), context)
        declarations.fields = self.visit(("fields", schema.fields), context)
        declarations.timestamps = all(schema.find_field(n) is not None for n in TIMESTAMP_FIELDS)
        return declarations

    @visits("primary_key")
    def visit_primary_key(self, primary_key: Optional[PrimaryKey], context: Context) -> List[AttributeDeclaration]:
        if primary_key is None or not primary_key.fields:
            return []
        if primary_key.is_composite:
            return [AttributeDeclaration("primary_key", False)]

        key = primary_key.fields[0]
        if key.type in BINARY_ID_TYPES or key.type not in INTEGER_TYPES:
            return [AttributeDeclaration("primary_key", PrimaryKeySpec(key.name, key.type))]
        return []

    @visits("foreign_key_type")
    def visit_foreign_key_type(self, fields: List[Field], context: Context) -> List[AttributeDeclaration]:
        if any(f.is_foreign_key and f.type in BINARY_ID_TYPES for f in fields):
            return [AttributeDeclaration("foreign_key_type", BINARY_ID)]
        return []

    @visits("fields")
    def visit_fields(self, fields: List[Field], context: Context) -> List[FieldDeclaration]:
        declarations = [self.visit(("field", f), context) for f in fields]
        return [d for d in declarations if d is not None]

    @visits("field")
    def visit_field(self, field: Field, context: Context) -> Optional[FieldDeclaration]:
        schema: Schema = context["schema"]

        if field.name in TIMESTAMP_FIELDS:
            return None

        if field.is_embed:
            return self.visit(("embed", field), context)

        if field.is_association:
            return None

        if schema.is_primary_key_field(field.name):
            if not schema.is_composite_primary_key:
                return None
            return self._declare(field, primary_key=True)

        return self._declare(field)

    @visits("embed")
    def visit_embed(self, field: Field, context: Context) -> FieldDeclaration:
        kind = "embeds_many" if field.meta.embed_cardinality == "many" else "embeds_one"
        options: Dict[str, Any] = {}
        if field.meta.embed_on_replace:
            options["on_replace"] = field.meta.embed_on_replace
        if field.source and field.source != field.name:
            options["source"] = field.source
        return FieldDeclaration(
            kind=kind,
            name=field.name,
            type=field.meta.embed_related or field.type,
            options=options,
        )

    def _declare(self, field: Field, primary_key: bool = False) -> FieldDeclaration:
        options: Dict[str, Any] = {}

        if isinstance(field.type, EnumType):
            options["values"] = list(field.type.values)
        if primary_key:
            options["primary_key"] = True
        if field.source and field.source != field.name:
            options["source"] = field.source

        default = field.meta.default
        if default is not None and default != SqlDefault.AUTO_INCREMENT:
            options["default"] = default
        if field.meta.function_default:
            options["read_after_writes"] = True

        return FieldDeclaration(
            kind="field",
            name=field.name,
            type=field.type,
            options=options,
            nullable=field.meta.nullable is not False,
        )


def generate(schema: Schema) -> Declarations:
    """Generate declarations for a schema."""
    return DeclarationGenerator().generate(schema)


__all__ = [
    "TIMESTAMP_FIELDS",
    "PrimaryKeySpec",
    "AttributeDeclaration",
    "FieldDeclaration",
    "Declarations",
    "DeclarationGenerator",
    "generate",
]
