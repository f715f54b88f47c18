#!/usr/bin/env python
# ============================================================================
# SCHEMA CACHE REFRESH SCRIPT
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# PURPOSE: Infer schemas from an introspection snapshot and refresh the cache
# USAGE:
#   python scripts/refresh_cache.py --repo MyApp.Repo --snapshot db.yaml
#   python scripts/refresh_cache.py --repo MyApp.Repo --snapshot db.yaml --tables users posts
#   python scripts/refresh_cache.py --repo MyApp.Repo --clear
# ============================================================================

import sys
import os
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.config import RelationConfig
from core.errors import RelationSchemaError
from core.logging import ComponentType, configure_logging, get_logger, log_context
from relation.cache import SchemaCache
from relation.renderer import render_model
from sql.introspection import SnapshotIntrospector

logger = get_logger(__name__, ComponentType.CLI)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Infer relation schemas and refresh the schema cache",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/refresh_cache.py --repo MyApp.Repo --snapshot db.yaml
  python scripts/refresh_cache.py --repo MyApp.Repo --snapshot db.yaml --render
  python scripts/refresh_cache.py --repo MyApp.Repo --clear

Environment Variables:
  RELATION_SCHEMA_CACHE_ENABLED     Enable the cache (default: true)
  RELATION_SCHEMA_ENV               Cache environment (default: APP_ENV or dev)
  RELATION_SCHEMA_CACHE_ROOT        Directory holding tmp/cache (default: cwd)
  RELATION_SCHEMA_MIGRATIONS_DIR    Migrations directory (default: migrations)
  RELATION_SCHEMA_MIGRATION_EXT     Migration file extension (default: .py)
        """
    )
    parser.add_argument(
        "--repo",
        type=str,
        required=True,
        help="Repository identifier, e.g. MyApp.Repo"
    )
    parser.add_argument(
        "--snapshot",
        type=str,
        help="YAML introspection snapshot"
    )
    parser.add_argument(
        "--tables",
        nargs="+",
        help="Tables to refresh (default: every table in the snapshot)"
    )
    parser.add_argument(
        "--config",
        type=str,
        help="YAML configuration overrides"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Only clear the repository cache"
    )
    parser.add_argument(
        "--render",
        action="store_true",
        help="Print the generated model source for each table"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )
    args = parser.parse_args(argv)

    configure_logging("DEBUG" if args.verbose else "INFO")

    config = RelationConfig.from_yaml(args.config) if args.config else RelationConfig.from_env()
    cache = SchemaCache(config)

    print("=" * 70)
    print("RELATION SCHEMA - Cache Refresh")
    print("=" * 70)
    print(f"Repository: {args.repo}")
    print(f"Cache root: {cache.cache_root}")
    print(f"Migrations: {config.cache.migrations_path(args.repo)}")
    print(f"Digest: {cache.migration_digest(args.repo)}")
    print("=" * 70)

    if args.clear:
        cache.clear_repo_cache(args.repo)
        print("\nRepository cache cleared")
        return 0

    if not args.snapshot:
        parser.error("--snapshot is required unless --clear is given")

    try:
        introspector = SnapshotIntrospector.from_yaml(args.snapshot)
        tables = args.tables or introspector.table_names()
        with log_context(repo=args.repo, operation="refresh"):
            schemas = cache.refresh(args.repo, tables, introspector)
    except RelationSchemaError as e:
        logger.error(f"Cache refresh failed: {e}")
        print(f"\nError: {e}")
        return 1

    print(f"\n[RESULTS] ({len(schemas)} tables)\n")
    for schema in schemas:
        pk = schema.primary_key.field_names if schema.primary_key else []
        print(f"  - {schema.source}: {len(schema.fields)} fields, primary key {pk}")
        if args.verbose:
            for field in schema.fields:
                print(f"      {field.name}: {field.type}")

    if args.render:
        for schema in schemas:
            print("\n" + "-" * 70)
            print(render_model(schema))

    print("\n" + "=" * 70)
    return 0


if __name__ == "__main__":
    sys.exit(main())
