# ============================================================================
# RELATION SCHEMA COMPILER TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Tests - Table to Schema
# PURPOSE: Verify type mapping per column and key/index resolution to fields
# CREATED: 16 OCT 2026
# ============================================================================
"""
Relation Schema Compiler Tests

Covers:
1. Column types run through the dialect type mapper
2. Field metadata carries column flags, parsed default and raw type
3. Primary keys and indices resolve to already-built fields
4. Composite foreign keys keep the first column pair

Run with:
    pytest tests/test_schema_compiler.py -v
"""

import pytest

from core.config import InferenceDefaults, RelationConfig
from core.types import ArrayType, Dialect, EnumType, SqlDefault
from relation.compiler import COMPONENTS, SchemaCompiler, compile_table
from relation.type_mappers import get_type_mapper
from sql.introspection import build_table
from sql.models import Column, ColumnMeta, ForeignKey, Index, IndexMeta, PrimaryKey, Table


# ============================================================================
# FIXTURES
# ============================================================================

def _column(name, type_, **meta):
    return ("column", [("identifier", name), ("type", type_), ("meta", meta)])


@pytest.fixture
def users_table():
    tree = ("table", [
        ("identifier", "users"),
        [
            _column("id", "integer", nullable=False, primary_key=True,
                    default="nextval('users_id_seq'::regclass)"),
            _column("email", "character varying(255)", nullable=False,
                    check_constraints=["email <> ''"]),
            _column("org_id", "uuid"),
            _column("settings", "jsonb", default="'{}'::jsonb"),
            _column("status", ("enum", ["active", "banned"]), default="'active'::user_status"),
            _column("nicknames", "text[]"),
        ],
        [
            ("foreign_key", [
                ("identifier", "users_org_id_fkey"),
                [("identifier", "org_id")],
                ("identifier", "orgs"),
                [("identifier", "id")],
                ("meta", {"on_delete": "CASCADE"}),
            ]),
        ],
        [
            ("index", [
                ("identifier", "users_email_org_index"),
                [("identifier", "org_id"), ("identifier", "email")],
                ("meta", {"unique": True}),
            ]),
        ],
    ])
    return build_table(tree, Dialect.POSTGRES)


@pytest.fixture
def schema(users_table):
    return compile_table(users_table)


# ============================================================================
# FIELDS
# ============================================================================

class TestFields:

    def test_source_and_field_order(self, schema):
        assert schema.source == "users"
        assert schema.field_names == ["id", "email", "org_id", "settings", "status", "nicknames"]

    def test_mapped_types(self, schema):
        assert schema.find_field("id").type == "id"
        assert schema.find_field("email").type == "string"
        assert schema.find_field("org_id").type == "binary_id"
        assert schema.find_field("settings").type == "map"
        assert schema.find_field("status").type == EnumType(values=["active", "banned"])
        assert schema.find_field("nicknames").type == ArrayType(of="string")

    def test_metadata_from_column(self, schema):
        meta = schema.find_field("email").meta
        assert meta.nullable is False
        assert meta.check_constraints == ["email <> ''"]
        assert meta.primary_key is False
        assert meta.foreign_key is False
        assert meta.type == "string"

    def test_key_flags(self, schema):
        assert schema.find_field("id").is_primary_key
        assert schema.find_field("id").meta.default == SqlDefault.AUTO_INCREMENT
        assert schema.find_field("org_id").is_foreign_key

    def test_raw_type_recorded(self, schema):
        assert schema.find_field("org_id").meta.type == "uuid"
        assert schema.find_field("id").meta.type == "integer"

    def test_enum_default_from_type_mapper(self, schema):
        assert schema.find_field("status").meta.default == "active"


# ============================================================================
# KEYS AND INDICES
# ============================================================================

class TestKeysAndIndices:

    def test_primary_key_resolves_fields(self, schema):
        assert schema.primary_key is not None
        assert schema.primary_key.field_names == ["id"]
        assert schema.primary_key.fields[0] == schema.find_field("id")

    def test_foreign_key(self, schema):
        assert len(schema.foreign_keys) == 1
        fk = schema.foreign_keys[0]
        assert fk.field == "org_id"
        assert fk.references_table == "orgs"
        assert fk.references_field == "id"
        assert schema.get_foreign_key("org_id") == fk

    def test_index_keeps_column_order(self, schema):
        index = schema.indices[0]
        assert index.name == "users_email_org_index"
        assert index.field_names == ["org_id", "email"]
        assert index.unique is True
        assert index.fields[0].type == "binary_id"

    def test_no_primary_key(self):
        table = Table(
            name="events",
            dialect=Dialect.POSTGRES,
            columns=[Column(name="payload", type="jsonb")],
        )
        schema = compile_table(table)

        assert schema.primary_key is None
        assert schema.find_field("payload").type == "map"

    def test_composite_foreign_key_keeps_first_pair(self):
        columns = [
            Column(name="user_id", type="integer", meta=ColumnMeta(foreign_key=True)),
            Column(name="role_id", type="integer", meta=ColumnMeta(foreign_key=True)),
        ]
        table = Table(
            name="grants",
            dialect=Dialect.POSTGRES,
            columns=columns,
            primary_key=PrimaryKey(),
            foreign_keys=[ForeignKey(
                name="grants_membership_fkey",
                columns=["user_id", "role_id"],
                referenced_table="memberships",
                referenced_columns=["user_id", "role_id"],
            )],
            indices=[Index(name="grants_role_index", columns=["role_id"], meta=IndexMeta())],
        )
        schema = compile_table(table)

        assert len(schema.foreign_keys) == 1
        assert schema.foreign_keys[0].field == "user_id"
        assert schema.foreign_keys[0].references_field == "user_id"
        assert schema.find_field("role_id").type == "id"


# ============================================================================
# COMPILER
# ============================================================================

class TestCompiler:

    def test_component_order(self):
        assert [source for source, _ in COMPONENTS] == [
            "name", "columns", "primary_key", "foreign_keys", "indices",
        ]

    def test_config_reaches_type_mapper(self):
        table = Table(
            name="events",
            dialect=Dialect.POSTGRES,
            columns=[Column(name="payload", type="jsonb")],
        )
        config = RelationConfig(inference=InferenceDefaults(json_nil_default_type=None))

        schema = compile_table(table, config)
        assert schema.find_field("payload").type == "jsonb"

    def test_sqlite_table(self):
        table = Table(
            name="flags",
            dialect=Dialect.SQLITE,
            columns=[
                Column(name="id", type="integer", meta=ColumnMeta(primary_key=True)),
                Column(name="enabled", type="integer", meta=ColumnMeta(default=True)),
            ],
        )
        schema = SchemaCompiler(get_type_mapper(Dialect.SQLITE)).compile(table)

        # primary key comes from the Table, not from column flags
        assert schema.primary_key is None
        assert schema.find_field("id").type == "integer"
        assert schema.find_field("enabled").type == "boolean"
