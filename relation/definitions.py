# ============================================================================
# CUSTOM SCHEMA DEFINITIONS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Hand-authored schemas
# PURPOSE: Build a Schema from a mapping or YAML file for merging
# CREATED: 15 OCT 2026
# ============================================================================
"""
Custom Schema Definitions

Hand-authored schemas override parts of an inferred schema. Only the
attributes written in the definition are set; everything else stays
None so Schema.merge keeps the inferred value.

    source: users
    primary_key: [uuid]
    fields:
      - {name: uuid, type: binary_id}
      - {name: email, type: string, source: email_address, nullable: false}
      - {name: tags, type: {array: string}}
      - {name: status, type: {enum: [draft, published]}, default: draft}
      - {name: profile, embed: one, related: Profile, on_replace: update}
      - {name: posts, association: true}
    foreign_keys:
      - {field: org_id, references_table: orgs, references_field: id}
    indices:
      - {name: users_email_index, fields: [email], unique: true}
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from core.errors import SchemaDefinitionError
from core.types import ArrayType, EnumType, FieldType
from relation.schema import Field, FieldMeta, ForeignKey, Index, PrimaryKey, Schema

logger = logging.getLogger(__name__)

EMBED_CARDINALITIES = ("one", "many")

_META_KEYS = ("nullable", "default", "check_constraints", "function_default")


def parse_type(spec: Any, source: str = "") -> FieldType:
    """
    Parse a type spec.

    "string" | {"array": <spec>} | {"enum": [values]}
    """
    if isinstance(spec, str):
        return spec
    if isinstance(spec, dict) and len(spec) == 1:
        (kind, value), = spec.items()
        if kind == "array":
            return ArrayType(of=parse_type(value, source))
        if kind == "enum" and isinstance(value, list):
            return EnumType(values=[str(v) for v in value])
    raise SchemaDefinitionError(source, f"unsupported type spec {spec!r}")


def _field(definition: Dict[str, Any], source: str, pk_names: List[str]) -> Field:
    name = definition.get("name")
    if not name:
        raise SchemaDefinitionError(source, f"field without a name: {definition!r}")

    meta: Dict[str, Any] = {k: definition[k] for k in _META_KEYS if k in definition}

    embed = definition.get("embed")
    if embed is not None:
        if embed not in EMBED_CARDINALITIES:
            raise SchemaDefinitionError(source, f"field {name}: embed must be one of {EMBED_CARDINALITIES}")
        meta.update(
            embed=True,
            association=True,
            embed_cardinality=embed,
            embed_related=definition.get("related"),
            embed_on_replace=definition.get("on_replace"),
        )
        default_type: FieldType = "map" if embed == "one" else ArrayType(of="map")
    elif definition.get("association"):
        meta["association"] = True
        default_type = "any"
    else:
        default_type = "string"

    if name in pk_names:
        meta["primary_key"] = True

    spec = definition.get("type")
    field_type = parse_type(spec, source) if spec is not None else default_type

    return Field(
        name=name,
        type=field_type,
        source=definition.get("source"),
        meta=FieldMeta(**meta),
    )


def schema_from_definition(definition: Dict[str, Any], source: Optional[str] = None) -> Schema:
    """
    Build a Schema from a definition mapping.

    Raises:
        SchemaDefinitionError: Malformed definition
    """
    source = source or definition.get("source")
    if not source:
        raise SchemaDefinitionError("<unknown>", "definition has no source table")

    pk_spec = definition.get("primary_key")
    pk_names = [pk_spec] if isinstance(pk_spec, str) else list(pk_spec or [])

    fields = [_field(d, source, pk_names) for d in definition.get("fields") or []]
    by_name = {f.name: f for f in fields}
    if len(by_name) != len(fields):
        raise SchemaDefinitionError(source, "duplicate field names")

    primary_key = None
    if pk_names:
        missing = [n for n in pk_names if n not in by_name]
        if missing:
            raise SchemaDefinitionError(source, f"primary key names unknown fields: {missing}")
        primary_key = PrimaryKey(fields=[by_name[n] for n in pk_names])

    foreign_keys = [ForeignKey(**fk) for fk in definition.get("foreign_keys") or []]

    indices = []
    for index in definition.get("indices") or []:
        names = index.get("fields") or []
        missing = [n for n in names if n not in by_name]
        if missing:
            raise SchemaDefinitionError(source, f"index {index.get('name')} names unknown fields: {missing}")
        indices.append(Index(
            name=index["name"],
            fields=[by_name[n] for n in names],
            unique=bool(index.get("unique", False)),
            type=index.get("type"),
        ))

    return Schema(
        source=source,
        fields=fields,
        primary_key=primary_key,
        foreign_keys=foreign_keys,
        indices=indices,
    )


def load_definitions(path: Union[str, Path]) -> Dict[str, Schema]:
    """
    Load custom schemas from a YAML file.

    The file holds either one definition or a list of definitions.
    Returns a dict keyed by source table.
    """
    with open(path, "r") as f:
        data = yaml.safe_load(f) or []

    definitions = data if isinstance(data, list) else [data]
    schemas = {}
    for definition in definitions:
        schema = schema_from_definition(definition)
        schemas[schema.source] = schema

    logger.info(f"Loaded {len(schemas)} custom schema definitions from {path}")
    return schemas


__all__ = [
    "parse_type",
    "schema_from_definition",
    "load_definitions",
]
