# ============================================================================
# INTROSPECTION TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Tests - Snapshot introspector and table loading
# PURPOSE: Verify snapshot trees, error reporting and dialect dispatch
# CREATED: 16 OCT 2026
# ============================================================================
"""
Introspection Tests

Covers:
1. YAML snapshot loading and failure modes
2. Tagged trees produced for columns, keys and indices
3. load_table: introspect + build for the snapshot dialect
4. Any object with table()/dialect works as an introspector

Run with:
    pytest tests/test_introspection.py -v
"""

from unittest.mock import MagicMock

import pytest

from core.errors import IntrospectionError
from core.types import ArrayType, Dialect, EnumType, SqlDefault
from sql.introspection import SnapshotIntrospector, load_table
from sql.models import ForeignKeyAction


# ============================================================================
# FIXTURES
# ============================================================================

SNAPSHOT = """
dialect: postgres
tables:
  users:
    columns:
      - {name: id, type: integer, nullable: false, primary_key: true,
         default: "nextval('users_id_seq'::regclass)"}
      - {name: email, type: "character varying(255)", nullable: false}
      - {name: status, type: {enum: [active, banned]}, default: "'active'::user_status"}
      - {name: tags, type: {array: text}}
      - {name: org_id, type: uuid}
    foreign_keys:
      - {name: users_org_id_fkey, columns: [org_id], references_table: orgs,
         references_columns: [id], on_delete: SET NULL}
    indices:
      - {name: users_email_index, columns: [email], unique: true, type: btree}
  orgs:
    columns:
      - {name: id, type: uuid, primary_key: true}
"""


@pytest.fixture
def snapshot_path(tmp_path):
    path = tmp_path / "snapshot.yaml"
    path.write_text(SNAPSHOT)
    return path


@pytest.fixture
def introspector(snapshot_path):
    return SnapshotIntrospector.from_yaml(snapshot_path)


# ============================================================================
# SNAPSHOT LOADING
# ============================================================================

class TestSnapshotLoading:

    def test_dialect_and_tables(self, introspector):
        assert introspector.dialect == Dialect.POSTGRES
        assert introspector.table_names() == ["users", "orgs"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(IntrospectionError):
            SnapshotIntrospector.from_yaml(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("tables: [unclosed")
        with pytest.raises(IntrospectionError):
            SnapshotIntrospector.from_yaml(path)

    def test_missing_dialect(self, tmp_path):
        path = tmp_path / "nodialect.yaml"
        path.write_text("tables: {}\n")
        with pytest.raises(IntrospectionError) as exc_info:
            SnapshotIntrospector.from_yaml(path)
        assert "dialect" in str(exc_info.value)

    def test_unknown_table(self, introspector):
        with pytest.raises(IntrospectionError) as exc_info:
            introspector.table("ghosts", "MyApp.Repo")
        assert exc_info.value.table == "ghosts"


# ============================================================================
# TREES
# ============================================================================

class TestTrees:

    def test_table_tree_shape(self, introspector):
        tag, payload = introspector.table("orgs")

        assert tag == "table"
        assert payload[0] == ("identifier", "orgs")
        assert payload[1][0][0] == "column"
        assert payload[2] == []
        assert payload[3] == []

    def test_parameterized_types_tagged(self, introspector):
        columns = introspector.table("users")[1][1]
        types = {c[1][0][1]: c[1][1][1] for c in columns}

        assert types["status"] == ("enum", ["active", "banned"])
        assert types["tags"] == ("array", "text")
        assert types["id"] == "integer"


# ============================================================================
# LOADING TABLES
# ============================================================================

class TestLoadTable:

    def test_users(self, introspector):
        table = load_table(introspector, "users", "MyApp.Repo")

        assert table.dialect == Dialect.POSTGRES
        assert table.primary_key_column_names == ["id"]
        assert table.get_column("id").meta.default == SqlDefault.AUTO_INCREMENT
        assert table.get_column("status").type == EnumType(values=["active", "banned"])
        assert table.get_column("tags").type == ArrayType(of="string")
        assert table.get_column("org_id").meta.foreign_key is True

    def test_foreign_key_and_index(self, introspector):
        table = load_table(introspector, "users", "MyApp.Repo")

        fk = table.foreign_keys[0]
        assert fk.columns == ["org_id"]
        assert fk.on_delete == ForeignKeyAction.SET_NULL
        assert fk.on_update is None

        index = table.indices[0]
        assert index.is_unique
        assert index.meta.type == "btree"

    def test_custom_introspector(self):
        introspector = MagicMock()
        introspector.dialect = Dialect.SQLITE
        introspector.table.return_value = ("table", [
            ("identifier", "notes"),
            [("column", [("identifier", "body"), ("type", "TEXT"), ("meta", {})])],
            [],
            [],
        ])

        table = load_table(introspector, "notes", "MyApp.Repo")

        introspector.table.assert_called_once_with("notes", "MyApp.Repo")
        assert table.get_column("body").type == "string"

    def test_introspection_error_propagates(self):
        introspector = MagicMock()
        introspector.dialect = Dialect.POSTGRES
        introspector.table.side_effect = IntrospectionError("users", "connection refused")

        with pytest.raises(IntrospectionError) as exc_info:
            load_table(introspector, "users", "MyApp.Repo")
        assert "connection refused" in str(exc_info.value)
