# ============================================================================
# MODEL RENDERER
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Declarations to Python source
# PURPOSE: Render a pydantic model module from a Schema and its declarations
# CREATED: 15 OCT 2026
# EXPORTS: render_model, python_type
# DEPENDENCIES: jinja2
# ============================================================================
"""
Model Renderer

Renders declarations as a pydantic model carrying the __sql_*__ ClassVar
metadata used by the DDL generator:

    class Users(BaseModel):
        __sql_table__: ClassVar[str] = "users"
        __sql_primary_key__: ClassVar[List[str]] = ["id"]

        id: Optional[int] = None
        email: str = Field(..., alias="email_address")

The conventional integer key is rendered as a plain optional "id" field;
timestamps are rendered as one fixed block at the end.
"""

import logging
from typing import Any, Dict, List, Optional

from jinja2 import BaseLoader, Environment, StrictUndefined

from core.types import ArrayType, EnumType, SqlDefault
from relation.declarations import (
    Declarations,
    FieldDeclaration,
    PrimaryKeySpec,
    generate,
)
from relation.schema import Schema

logger = logging.getLogger(__name__)


PYTHON_TYPES: Dict[str, str] = {
    "id": "int",
    "integer": "int",
    "float": "float",
    "decimal": "Decimal",
    "string": "str",
    "boolean": "bool",
    "binary": "bytes",
    "binary_id": "UUID",
    "uuid": "UUID",
    "map": "Dict[str, Any]",
    "json": "Any",
    "jsonb": "Any",
    "any": "Any",
    "date": "date",
    "time": "time",
    "naive_datetime": "datetime",
    "utc_datetime": "datetime",
}


SERVER_DEFAULTS = frozenset(d.value for d in SqlDefault)


def python_type(field_type: Any) -> str:
    """Python annotation for a normalized type."""
    if isinstance(field_type, ArrayType):
        return f"List[{python_type(field_type.of)}]"
    if isinstance(field_type, EnumType):
        return "Literal[" + ", ".join(repr(v) for v in field_type.values) + "]"
    return PYTHON_TYPES.get(field_type, "Any")


def class_name(source: str) -> str:
    """users_roles -> UsersRoles"""
    return "".join(part[:1].upper() + part[1:] for part in source.split("_") if part)


# ============================================================================
# FIELD LINES
# ============================================================================

def _field_line(declaration: FieldDeclaration) -> str:
    options = dict(declaration.options)
    extra: Dict[str, Any] = {}
    args: List[str] = []

    if declaration.kind == "field":
        annotation = python_type(declaration.type)
    elif declaration.kind == "embeds_many":
        annotation = "List[Dict[str, Any]]"
        extra["embed"] = "many"
        extra["related"] = declaration.type
    else:
        annotation = "Dict[str, Any]"
        extra["embed"] = "one"
        extra["related"] = declaration.type

    default = options.pop("default", None)
    required = not declaration.nullable and default is None and declaration.kind == "field"

    # Cached schemas hold SqlDefault values as plain strings
    value = default.value if isinstance(default, SqlDefault) else default
    if isinstance(value, str) and value in SERVER_DEFAULTS:
        extra["server_default"] = value
        default = None

    if required:
        args.append("...")
    elif isinstance(default, (dict, list)):
        args.append(f"default_factory=lambda: {default!r}")
    else:
        args.append(f"default={default!r}")
        annotation = f"Optional[{annotation}]"

    source = options.pop("source", None)
    if source:
        args.append(f"alias={source!r}")

    options.pop("values", None)
    extra.update(options)
    if extra:
        args.append(f"json_schema_extra={extra!r}")

    if args == ["default=None"]:
        return f"{declaration.name}: {annotation} = None"
    return f"{declaration.name}: {annotation} = Field({', '.join(args)})"


def _key_lines(schema: Schema, declarations: Declarations) -> List[str]:
    """Lines for a single primary key, which declarations leave implicit."""
    if schema.primary_key is None or schema.primary_key.is_composite:
        return []

    attributes = declarations.primary_key
    if attributes and isinstance(attributes[0].value, PrimaryKeySpec):
        spec = attributes[0].value
        extra = {"primary_key": True, "autogenerate": spec.autogenerate}
        return [
            f"{spec.name}: Optional[{python_type(spec.type)}] = "
            f"Field(default=None, json_schema_extra={extra!r})"
        ]

    key = schema.primary_key.fields[0]
    return [f"{key.name}: Optional[int] = None"]


# ============================================================================
# TEMPLATE
# ============================================================================

MODULE_TEMPLATE = '''"""
{{ class_name }} model generated from table "{{ source }}".
"""

from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, ClassVar, Dict, List, Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class {{ class_name }}(BaseModel):
    __sql_table__: ClassVar[str] = {{ source | tojson }}
{% if primary_key is not none %}
    __sql_primary_key__: ClassVar[List[str]] = {{ primary_key | tojson }}
{% endif %}
{% if foreign_key_type %}
    __sql_foreign_key_type__: ClassVar[str] = {{ foreign_key_type | tojson }}
{% endif %}
{% if foreign_keys %}
    __sql_foreign_keys__: ClassVar[Dict[str, str]] = {
{% for name, target in foreign_keys %}
        {{ name | tojson }}: {{ target | tojson }},
{% endfor %}
    }
{% endif %}
{% if indexes %}
    __sql_indexes__: ClassVar[List[tuple]] = [
{% for index in indexes %}
        {{ index }},
{% endfor %}
    ]
{% endif %}

    model_config = {"populate_by_name": True}

{% for line in lines %}
    {{ line }}
{% endfor %}
{% if timestamps %}

    # Timestamps
    inserted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
{% endif %}
'''

_env = Environment(
    loader=BaseLoader(),
    autoescape=False,
    undefined=StrictUndefined,
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
)
_template = _env.from_string(MODULE_TEMPLATE)


def render_model(schema: Schema, declarations: Optional[Declarations] = None) -> str:
    """
    Render a pydantic model module for a schema.

    Args:
        schema: Final schema (after any merge)
        declarations: Precomputed declarations; generated when omitted

    Returns:
        Python source text
    """
    declarations = declarations or generate(schema)

    lines = _key_lines(schema, declarations) + [_field_line(d) for d in declarations.fields]

    foreign_keys = []
    for fk in schema.foreign_keys:
        target = fk.references_table
        if fk.references_field:
            target += f"({fk.references_field})"
        foreign_keys.append((fk.field, target))

    indexes = []
    for index in schema.indices:
        parts = [repr(index.name), repr(index.field_names)]
        if index.unique:
            parts.append("True")
        indexes.append(f"({', '.join(parts)})")

    foreign_key_type = None
    if declarations.foreign_key_type:
        foreign_key_type = declarations.foreign_key_type[0].value

    source = _template.render(
        class_name=class_name(schema.source),
        source=schema.source,
        primary_key=schema.primary_key.field_names if schema.primary_key else None,
        foreign_key_type=foreign_key_type,
        foreign_keys=foreign_keys,
        indexes=indexes,
        lines=lines,
        timestamps=declarations.timestamps,
    )
    logger.debug(f"Rendered model {class_name(schema.source)} ({len(lines)} fields)")
    return source


__all__ = [
    "PYTHON_TYPES",
    "python_type",
    "class_name",
    "render_model",
]
