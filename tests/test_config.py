# ============================================================================
# CONFIGURATION TESTS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Tests - Defaults, environment and YAML overrides
# PURPOSE: Verify cache layout, migration discovery and inference settings
# CREATED: 16 OCT 2026
# ============================================================================
"""
Configuration Tests

Covers:
1. Repository names used on disk
2. Cache root layout and per-repo migrations directories
3. Environment variable overrides
4. YAML overrides layered on a base config
5. Process-wide defaults

Run with:
    pytest tests/test_config.py -v
"""

from pathlib import Path

import pytest

from core.config import (
    CACHE_NAMESPACE,
    CacheDefaults,
    InferenceDefaults,
    RelationConfig,
    get_defaults,
    repo_name,
    reset_defaults,
)


# ============================================================================
# FIXTURES
# ============================================================================

ENV_VARS = [
    "RELATION_SCHEMA_CACHE_ENABLED",
    "RELATION_SCHEMA_ENV",
    "APP_ENV",
    "RELATION_SCHEMA_CACHE_ROOT",
    "RELATION_SCHEMA_MIGRATIONS_DIR",
    "RELATION_SCHEMA_MIGRATION_EXT",
    "RELATION_SCHEMA_JSON_NIL_DEFAULT",
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    reset_defaults()
    yield monkeypatch
    reset_defaults()


# ============================================================================
# REPOSITORY NAMES
# ============================================================================

class TestRepoName:

    def test_last_segment_lowercased(self):
        assert repo_name("MyApp.Repo") == "repo"
        assert repo_name("Analytics") == "analytics"

    def test_object_with_name(self):
        class Repo:
            name = "Billing.Repo"

        assert repo_name(Repo()) == "repo"

    def test_object_without_name(self):
        class ReadReplica:
            pass

        assert repo_name(ReadReplica()) == "readreplica"


# ============================================================================
# CACHE DEFAULTS
# ============================================================================

class TestCacheDefaults:

    def test_defaults(self):
        defaults = CacheDefaults()
        assert defaults.enabled is True
        assert defaults.environment == "dev"
        assert defaults.migration_extension == ".py"

    def test_cache_root_layout(self, tmp_path):
        defaults = CacheDefaults(root_dir=str(tmp_path), environment="test")
        assert defaults.cache_root == tmp_path / "tmp" / "cache" / "test" / CACHE_NAMESPACE

    def test_cache_root_defaults_to_cwd(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert CacheDefaults().cache_root == tmp_path / "tmp" / "cache" / "dev" / "drops_relation_schema"

    def test_migrations_path(self, tmp_path):
        defaults = CacheDefaults(
            root_dir=str(tmp_path),
            migrations_dirs={"MyApp.Replica": "replica/migrations", "archive": "archive/migrations"},
        )
        assert defaults.migrations_path("MyApp.Repo") == tmp_path / "migrations"
        assert defaults.migrations_path("MyApp.Replica") == tmp_path / "replica" / "migrations"
        assert defaults.migrations_path("Legacy.Archive") == tmp_path / "archive" / "migrations"

    def test_frozen(self):
        with pytest.raises(Exception):
            CacheDefaults().enabled = False


# ============================================================================
# ENVIRONMENT
# ============================================================================

class TestFromEnv:

    def test_unset_environment(self, clean_env):
        config = RelationConfig.from_env()
        assert config.cache == CacheDefaults()
        assert config.inference == InferenceDefaults()
        assert config.cache.migrations_dir == "migrations"
        assert config.cache.migration_extension == ".py"

    def test_overrides(self, clean_env, tmp_path):
        clean_env.setenv("RELATION_SCHEMA_CACHE_ENABLED", "false")
        clean_env.setenv("RELATION_SCHEMA_ENV", "ci")
        clean_env.setenv("RELATION_SCHEMA_CACHE_ROOT", str(tmp_path))
        clean_env.setenv("RELATION_SCHEMA_MIGRATIONS_DIR", "db/migrate")
        clean_env.setenv("RELATION_SCHEMA_MIGRATION_EXT", ".sql")
        clean_env.setenv("RELATION_SCHEMA_JSON_NIL_DEFAULT", "none")

        config = RelationConfig.from_env()

        assert config.cache.enabled is False
        assert config.cache.environment == "ci"
        assert config.cache.root_dir == str(tmp_path)
        assert config.cache.migrations_dir == "db/migrate"
        assert config.cache.migration_extension == ".sql"
        assert config.inference.json_nil_default_type is None

    def test_app_env_fallback(self, clean_env):
        clean_env.setenv("APP_ENV", "prod")
        assert RelationConfig.from_env().cache.environment == "prod"

        clean_env.setenv("RELATION_SCHEMA_ENV", "test")
        assert RelationConfig.from_env().cache.environment == "test"

    def test_get_defaults_cached(self, clean_env):
        first = get_defaults()
        clean_env.setenv("RELATION_SCHEMA_ENV", "other")
        assert get_defaults() is first

        reset_defaults()
        assert get_defaults().cache.environment == "other"


# ============================================================================
# YAML
# ============================================================================

class TestFromYaml:

    def test_overrides_layered_on_base(self, tmp_path):
        path = tmp_path / "relation.yaml"
        path.write_text(
            "cache:\n"
            "  environment: test\n"
            "  migrations_dirs:\n"
            "    MyApp.Repo: db/migrations\n"
            "inference:\n"
            "  json_nil_default_type: any\n"
        )
        base = RelationConfig(cache=CacheDefaults(root_dir=str(tmp_path)))

        config = RelationConfig.from_yaml(str(path), base=base)

        assert config.cache.environment == "test"
        assert config.cache.root_dir == str(tmp_path)
        assert config.cache.migrations_path("MyApp.Repo") == Path(tmp_path) / "db" / "migrations"
        assert config.inference.json_nil_default_type == "any"

    def test_empty_file(self, tmp_path, clean_env):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert RelationConfig.from_yaml(str(path)) == RelationConfig.from_env()
