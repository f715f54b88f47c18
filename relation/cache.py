# ============================================================================
# SCHEMA CACHE
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Relation layer - Persistent schema cache
# PURPOSE: Store compiled schemas per (repo, table), invalidated by migrations
# CREATED: 15 OCT 2026
# ============================================================================
"""
Schema Cache

JSON files under <cwd>/tmp/cache/<env>/drops_relation_schema/:

    <repo>_migrations_digest.txt     last seen migrations digest
    <repo>/<table>.json              {"schema": {...}, "digest": "..."}

Lookup runs two checks:
1. Repository sweep: when the current migrations digest differs from
   the stored marker, the whole <repo>/ directory is removed and the
   marker rewritten.
2. Entry check: the digest recorded inside the entry must equal the
   current digest, otherwise that entry is deleted and reported missing.

Any change to any migration file therefore invalidates every cached
table of the repository.

Reads fail open: unreadable, half-written or undecodable entries are a
cache miss. Write failures are logged and ignored.

Usage:
    cache = SchemaCache(config)
    schema = cache.get_or_infer("MyApp.Repo", "users", introspector)
"""

import hashlib
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from core.config import RelationConfig, get_defaults, repo_name
from core.errors import CacheIOError, DigestComputationError
from core.logging import log_context
from relation.compiler import compile_table
from relation.schema import Schema
from sql.introspection import Introspector, load_table

logger = logging.getLogger(__name__)

EMPTY_DIGEST = "empty"


# ============================================================================
# MIGRATION DIGEST
# ============================================================================

def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest().upper()


def migration_files(directory: Path, extension: str) -> List[Path]:
    """Migration files in the directory, sorted by file name."""
    return sorted(
        (p for p in directory.iterdir() if p.is_file() and p.name.endswith(extension)),
        key=lambda p: p.name,
    )


def calculate_digest(directory: Path, extension: str) -> str:
    """
    Digest of a migrations directory.

    SHA-256 over the compact JSON encoding of the ordered
    [file name, SHA-256 of content] pairs, upper-case hex.

    Raises:
        DigestComputationError: Directory or a file cannot be read
    """
    try:
        pairs: List[Tuple[str, str]] = [
            (path.name, _sha256_hex(path.read_bytes()))
            for path in migration_files(directory, extension)
        ]
    except OSError as e:
        raise DigestComputationError(directory, e) from e

    encoded = json.dumps(pairs, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
    return _sha256_hex(encoded)


def migrations_digest(directory: Path, extension: str) -> str:
    """Digest of a migrations directory, "empty" when it is missing or unreadable."""
    if not directory.is_dir():
        return EMPTY_DIGEST
    try:
        return calculate_digest(directory, extension)
    except DigestComputationError as e:
        logger.warning(f"{e}; using '{EMPTY_DIGEST}' digest")
        return EMPTY_DIGEST


# ============================================================================
# CACHE
# ============================================================================

class SchemaCache:
    """File-backed schema cache keyed by (repository, table)."""

    def __init__(self, config: Optional[RelationConfig] = None):
        self.config = config or get_defaults()

    @property
    def enabled(self) -> bool:
        return self.config.cache.enabled

    @property
    def cache_root(self) -> Path:
        return self.config.cache.cache_root

    # =========================================================================
    # PATHS
    # =========================================================================

    def repo_cache_dir(self, repo: Any) -> Path:
        return self.cache_root / repo_name(repo)

    def get_cache_file_path(self, repo: Any, table_name: str) -> Path:
        return self.repo_cache_dir(repo) / f"{table_name}.json"

    def get_digest_file_path(self, repo: Any) -> Path:
        return self.cache_root / f"{repo_name(repo)}_migrations_digest.txt"

    # =========================================================================
    # DIGEST
    # =========================================================================

    def migration_digest(self, repo: Any) -> str:
        """Current digest of the repository's migrations."""
        return migrations_digest(
            self.config.cache.migrations_path(repo),
            self.config.cache.migration_extension,
        )

    def read_stored_digest(self, repo: Any) -> Optional[str]:
        try:
            return self.get_digest_file_path(repo).read_text().strip()
        except OSError:
            return None

    def _current_digest(self, repo: Any) -> str:
        """Current digest, sweeping the repository cache when it changed."""
        digest = self.migration_digest(repo)
        stored = self.read_stored_digest(repo)

        if stored != digest:
            if stored is not None:
                logger.info(f"Migrations changed for {repo} ({stored} -> {digest}); invalidating cache")
            self.clear_repo_cache(repo)
            self._write_safely(self.get_digest_file_path(repo), digest)

        return digest

    # =========================================================================
    # READ
    # =========================================================================

    def get_cached_schema(self, repo: Any, table_name: str) -> Optional[Schema]:
        """Cached schema, or None on a miss."""
        if not self.enabled:
            return None

        return self._lookup(repo, table_name, self._current_digest(repo))

    def _lookup(self, repo: Any, table_name: str, current: str) -> Optional[Schema]:
        """Cached schema checked against an already computed digest."""
        path = self.get_cache_file_path(repo, table_name)

        try:
            entry = self._read_entry(path)
        except CacheIOError as e:
            logger.debug(f"Schema cache miss for {repo}.{table_name} ({e.reason})")
            return None

        stored = entry.get("digest")
        if stored != current:
            logger.debug(
                f"Schema cache miss for {repo}.{table_name} "
                f"(digest mismatch: current={current}, stored={stored})"
            )
            self._remove(path)
            return None

        try:
            schema = Schema.model_validate(entry.get("schema"))
        except ValidationError as e:
            logger.warning(f"Discarding undecodable cache entry {path}: {e.error_count()} errors")
            self._remove(path)
            return None

        logger.debug(f"Schema cache hit for {repo}.{table_name}")
        return schema

    def maybe_get_cached_schema(self, repo: Any, table_name: str) -> Schema:
        """Cached schema, or an empty schema on a miss."""
        return self.get_cached_schema(repo, table_name) or Schema.empty(table_name)

    def _read_entry(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                entry = json.load(f)
        except FileNotFoundError as e:
            raise CacheIOError(path, "not cached") from e
        except (OSError, ValueError) as e:
            raise CacheIOError(path, e) from e

        if not isinstance(entry, dict):
            raise CacheIOError(path, "entry is not an object")
        return entry

    # =========================================================================
    # WRITE
    # =========================================================================

    def cache_schema(self, repo: Any, table_name: str, schema: Schema, digest: Optional[str] = None) -> None:
        """Store a schema with the given (or current) migrations digest."""
        if not self.enabled:
            return

        digest = digest or self.migration_digest(repo)
        path = self.get_cache_file_path(repo, table_name)
        entry = {"schema": schema.model_dump(mode="json"), "digest": digest}

        logger.debug(f"Caching schema for {repo}.{table_name} with digest {digest} to {path}")
        self._write_safely(path, json.dumps(entry, indent=2))
        self._write_safely(self.get_digest_file_path(repo), digest)

    def _write_safely(self, path: Path, content: str) -> None:
        try:
            _atomic_write(path, content)
        except CacheIOError as e:
            logger.warning(str(e))

    def _remove(self, path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Cannot remove cache entry {path}: {e}")

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    def clear_repo_cache(self, repo: Any) -> None:
        """Remove every cached schema of a repository."""
        directory = self.repo_cache_dir(repo)
        if directory.exists():
            shutil.rmtree(directory, ignore_errors=True)
            logger.info(f"Cleared schema cache for repository: {repo}")

    def clear_all(self) -> None:
        """Remove the whole cache, markers included."""
        if self.cache_root.exists():
            shutil.rmtree(self.cache_root, ignore_errors=True)
            logger.info("Cleared entire schema cache")

    # =========================================================================
    # INFERENCE
    # =========================================================================

    def infer(self, repo: Any, table_name: str, introspector: Introspector) -> Schema:
        """
        Introspect and compile a table without touching the cache.

        Raises:
            IntrospectionError: The table cannot be introspected
            UnsupportedDialectError: No compiler or type mapper for the dialect
        """
        with log_context(repo=str(repo), table=table_name, dialect=introspector.dialect.value):
            table = load_table(introspector, table_name, repo)
            return compile_table(table, self.config)

    def warm_up(self, repo: Any, table_names: Iterable[str], introspector: Introspector) -> List[Schema]:
        """Ensure every named table is cached; returns their schemas."""
        digest = self._current_digest(repo) if self.enabled else None
        schemas = [
            self._get_or_infer(repo, table_name, introspector, digest)
            for table_name in table_names
        ]

        logger.info(f"Warmed up {len(schemas)} schemas for {repo}")
        return schemas

    def get_or_infer(self, repo: Any, table_name: str, introspector: Introspector) -> Schema:
        """Cached schema, inferring and caching it on a miss."""
        digest = self._current_digest(repo) if self.enabled else None
        return self._get_or_infer(repo, table_name, introspector, digest)

    def _get_or_infer(
        self,
        repo: Any,
        table_name: str,
        introspector: Introspector,
        digest: Optional[str],
    ) -> Schema:
        schema = self._lookup(repo, table_name, digest) if digest is not None else None
        if schema is None:
            schema = self.infer(repo, table_name, introspector)
            self.cache_schema(repo, table_name, schema, digest)
        return schema

    def refresh(
        self,
        repo: Any,
        table_names: Optional[Iterable[str]] = None,
        introspector: Optional[Introspector] = None,
    ) -> List[Schema]:
        """Clear the repository cache, then warm up the named tables."""
        self.clear_repo_cache(repo)
        if table_names is None:
            return []
        if introspector is None:
            raise ValueError("refresh with table names requires an introspector")
        return self.warm_up(repo, table_names, introspector)


def _atomic_write(path: Path, content: str) -> None:
    """Write through a temp file so readers never see a partial file."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(content)
            os.replace(tmp_name, path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise
    except OSError as e:
        raise CacheIOError(path, e) from e


__all__ = [
    "EMPTY_DIGEST",
    "migration_files",
    "calculate_digest",
    "migrations_digest",
    "SchemaCache",
]
