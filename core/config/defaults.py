# ============================================================================
# CONFIGURATION DEFAULTS
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Core - Default configuration values
# PURPOSE: Cache location, migration discovery and inference heuristics
# CREATED: 14 OCT 2026
# ============================================================================
"""
Configuration Defaults

Settings for schema inference and the schema cache. A RelationConfig
value is passed explicitly through the pipeline; get_defaults() only
provides the process-wide starting point built from the environment.

Design:
- Immutable dataclasses for defaults
- Environment variable overrides
- Optional YAML file overrides
"""

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml


CACHE_NAMESPACE = "drops_relation_schema"


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def repo_name(repo: Any) -> str:
    """
    Directory-safe repository name.

    Takes the last dotted segment of the repository identifier and
    lower-cases it: "MyApp.Repo" -> "repo".
    """
    if not isinstance(repo, str):
        repo = getattr(repo, "name", None) or type(repo).__name__
    return repo.rsplit(".", 1)[-1].lower()


@dataclass(frozen=True)
class CacheDefaults:
    """
    Defaults for the persistent schema cache.

    Cache root: <root_dir>/tmp/cache/<environment>/drops_relation_schema/
    """
    enabled: bool = True
    environment: str = "dev"
    root_dir: Optional[str] = None  # cwd when unset

    # Migration discovery
    migrations_dir: str = "migrations"
    migration_extension: str = ".py"
    migrations_dirs: Dict[str, str] = field(default_factory=dict)  # repo -> dir

    @property
    def cache_root(self) -> Path:
        """Directory holding digest markers and per-repo entries."""
        base = Path(self.root_dir) if self.root_dir else Path.cwd()
        return base / "tmp" / "cache" / self.environment / CACHE_NAMESPACE

    def migrations_path(self, repo: Any) -> Path:
        """Migrations directory for a repository."""
        base = Path(self.root_dir) if self.root_dir else Path.cwd()
        directory = (
            self.migrations_dirs.get(repo if isinstance(repo, str) else "")
            or self.migrations_dirs.get(repo_name(repo))
            or self.migrations_dir
        )
        return base / directory

    @classmethod
    def from_env(cls) -> "CacheDefaults":
        """Create from environment variables."""
        return cls(
            enabled=_env_bool("RELATION_SCHEMA_CACHE_ENABLED", True),
            environment=os.getenv("RELATION_SCHEMA_ENV", os.getenv("APP_ENV", "dev")),
            root_dir=os.getenv("RELATION_SCHEMA_CACHE_ROOT") or None,
            migrations_dir=os.getenv("RELATION_SCHEMA_MIGRATIONS_DIR", "migrations"),
            migration_extension=os.getenv("RELATION_SCHEMA_MIGRATION_EXT", ".py"),
        )


@dataclass(frozen=True)
class InferenceDefaults:
    """
    Defaults for type inference heuristics.

    json_nil_default_type decides what a json/jsonb column without a
    default becomes. None keeps the raw json token.
    """
    json_nil_default_type: Optional[str] = "map"

    @classmethod
    def from_env(cls) -> "InferenceDefaults":
        """Create from environment variables."""
        value = os.getenv("RELATION_SCHEMA_JSON_NIL_DEFAULT", "map")
        return cls(json_nil_default_type=value if value.lower() != "none" else None)


# ============================================================================
# COMBINED CONFIGURATION
# ============================================================================

@dataclass(frozen=True)
class RelationConfig:
    """Container for all configuration passed through the pipeline."""
    cache: CacheDefaults = field(default_factory=CacheDefaults)
    inference: InferenceDefaults = field(default_factory=InferenceDefaults)

    @classmethod
    def from_env(cls) -> "RelationConfig":
        """Create all defaults from environment variables."""
        return cls(
            cache=CacheDefaults.from_env(),
            inference=InferenceDefaults.from_env(),
        )

    @classmethod
    def from_yaml(cls, path: str, base: Optional["RelationConfig"] = None) -> "RelationConfig":
        """
        Load overrides from a YAML file.

        Expected shape:
            cache:
              environment: test
              migrations_dir: db/migrations
            inference:
              json_nil_default_type: map
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        base = base or cls.from_env()
        return cls(
            cache=replace(base.cache, **(data.get("cache") or {})),
            inference=replace(base.inference, **(data.get("inference") or {})),
        )


_defaults: Optional[RelationConfig] = None


def get_defaults() -> RelationConfig:
    """Get global defaults instance."""
    global _defaults
    if _defaults is None:
        _defaults = RelationConfig.from_env()
    return _defaults


def reset_defaults() -> None:
    """Reset defaults (for testing)."""
    global _defaults
    _defaults = None


# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "CACHE_NAMESPACE",
    "repo_name",
    "CacheDefaults",
    "InferenceDefaults",
    "RelationConfig",
    "get_defaults",
    "reset_defaults",
]
