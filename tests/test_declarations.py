# ============================================================================
# DECLARATION GENERATOR TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Tests - Schema to declarations
# PURPOSE: Verify field suppression, key attributes and field options
# CREATED: 16 OCT 2026
# ============================================================================
"""
Declaration Generator Tests

Covers:
1. Conventional integer key emits no attribute and no field
2. UUID foreign key emits one global foreign key type attribute
3. Composite keys emit primary_key = False plus marked fields
4. Timestamps, associations and embeds
5. Field option order and default handling

Run with:
    pytest tests/test_declarations.py -v
"""

import pytest

from core.types import EnumType, SqlDefault
from relation.declarations import (
    AttributeDeclaration,
    PrimaryKeySpec,
    generate,
)
from relation.schema import Field, FieldMeta, ForeignKey, PrimaryKey, Schema


# ============================================================================
# FIXTURES
# ============================================================================

def _field(name, type_="string", source=None, **meta):
    return Field(name=name, type=type_, source=source, meta=FieldMeta(**meta))


def _schema(fields, pk_names=None, source="things", **kwargs):
    by_name = {f.name: f for f in fields}
    primary_key = PrimaryKey(fields=[by_name[n] for n in pk_names]) if pk_names else None
    return Schema(source=source, fields=fields, primary_key=primary_key, **kwargs)


@pytest.fixture
def posts():
    fields = [
        _field("id", "id", primary_key=True, default=SqlDefault.AUTO_INCREMENT),
        _field("title", nullable=False),
        _field("author_id", "binary_id", foreign_key=True),
        _field("author", "any", association=True),
        _field("inserted_at", "naive_datetime"),
        _field("updated_at", "naive_datetime"),
    ]
    return _schema(
        fields,
        pk_names=["id"],
        source="posts",
        foreign_keys=[ForeignKey(field="author_id", references_table="users", references_field="id")],
    )


# ============================================================================
# PRIMARY KEY ATTRIBUTE
# ============================================================================

class TestPrimaryKey:

    def test_integer_key_emits_nothing(self, posts):
        declarations = generate(posts)

        assert declarations.primary_key == []
        assert "id" not in declarations.field_names()

    def test_binary_id_key(self):
        schema = _schema([_field("uuid", "binary_id", primary_key=True)], pk_names=["uuid"])
        declarations = generate(schema)

        assert declarations.primary_key == [
            AttributeDeclaration("primary_key", PrimaryKeySpec("uuid", "binary_id", autogenerate=True)),
        ]
        assert declarations.field_names() == []

    def test_non_standard_key_type(self):
        schema = _schema([_field("code", "string", primary_key=True)], pk_names=["code"])
        spec = generate(schema).primary_key[0].value

        assert spec.name == "code"
        assert spec.type == "string"
        assert spec.autogenerate is True

    def test_composite_key(self):
        schema = _schema(
            [
                _field("user_id", "id", primary_key=True, foreign_key=True),
                _field("role_id", "id", primary_key=True, foreign_key=True),
                _field("granted_by"),
            ],
            pk_names=["user_id", "role_id"],
        )
        declarations = generate(schema)

        assert declarations.primary_key == [AttributeDeclaration("primary_key", False)]
        assert declarations.field_names() == ["user_id", "role_id", "granted_by"]
        assert declarations.get_field("user_id").options["primary_key"] is True
        assert declarations.get_field("role_id").options["primary_key"] is True
        assert "primary_key" not in declarations.get_field("granted_by").options

    def test_no_key(self):
        declarations = generate(_schema([_field("payload", "map")]))
        assert declarations.primary_key == []
        assert declarations.field_names() == ["payload"]


# ============================================================================
# FOREIGN KEY TYPE ATTRIBUTE
# ============================================================================

class TestForeignKeyType:

    def test_binary_id_foreign_key(self, posts):
        assert generate(posts).foreign_key_type == [
            AttributeDeclaration("foreign_key_type", "binary_id"),
        ]

    def test_emitted_once(self):
        schema = _schema([
            _field("org_id", "binary_id", foreign_key=True),
            _field("team_id", "uuid", foreign_key=True),
        ])
        assert len(generate(schema).foreign_key_type) == 1

    def test_integer_foreign_key(self):
        schema = _schema([_field("org_id", "id", foreign_key=True)])
        assert generate(schema).foreign_key_type == []


# ============================================================================
# FIELDS
# ============================================================================

class TestFields:

    def test_suppression(self, posts):
        declarations = generate(posts)
        assert declarations.field_names() == ["title", "author_id"]

    def test_timestamps_flag(self, posts):
        assert generate(posts).timestamps is True

        only_inserted = _schema([_field("inserted_at", "naive_datetime")])
        declarations = generate(only_inserted)
        assert declarations.timestamps is False
        assert declarations.field_names() == []

    def test_option_order(self):
        schema = _schema([
            _field(
                "state",
                EnumType(values=["on", "off"]),
                source="state_code",
                default="on",
                function_default=True,
            ),
        ])
        options = generate(schema).get_field("state").options

        assert list(options) == ["values", "source", "default", "read_after_writes"]
        assert options["values"] == ["on", "off"]
        assert options["source"] == "state_code"

    def test_defaults(self):
        schema = _schema([
            _field("counter", "integer", default=SqlDefault.AUTO_INCREMENT),
            _field("created_on", "date", default=SqlDefault.CURRENT_DATE),
            _field("note"),
        ])
        declarations = generate(schema)

        assert "default" not in declarations.get_field("counter").options
        assert declarations.get_field("created_on").options["default"] == SqlDefault.CURRENT_DATE
        assert declarations.get_field("note").options == {}

    def test_nullable(self, posts):
        declarations = generate(posts)
        assert declarations.get_field("title").nullable is False
        assert declarations.get_field("author_id").nullable is True

    def test_same_source_not_repeated(self):
        schema = _schema([_field("name", source="name")])
        assert "source" not in generate(schema).get_field("name").options


# ============================================================================
# EMBEDS
# ============================================================================

class TestEmbeds:

    def test_embeds_one(self):
        schema = _schema([
            _field(
                "profile", "map",
                embed=True, association=True,
                embed_cardinality="one", embed_related="Profile", embed_on_replace="update",
            ),
        ])
        declaration = generate(schema).get_field("profile")

        assert declaration.kind == "embeds_one"
        assert declaration.type == "Profile"
        assert declaration.options == {"on_replace": "update"}

    def test_embeds_many(self):
        schema = _schema([
            _field("addresses", "map", embed=True, association=True,
                   embed_cardinality="many", embed_related="Address"),
        ])
        declaration = generate(schema).get_field("addresses")

        assert declaration.kind == "embeds_many"
        assert declaration.type == "Address"
