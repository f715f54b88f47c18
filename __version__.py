# ============================================================================
# VERSION - RELATION SCHEMA
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# ============================================================================
"""
Version information for the relation schema toolkit.

This is the single source of truth for the package version.
Updated manually for each release.
"""
# Version format: major.minor.patch
__version__ = "0.1.0"
__version_info__ = tuple(int(x) for x in __version__.split("."))

# Build metadata
BUILD_DATE = "2026-10-16"

EPOCH = 1
CODENAME = "Schema Inference"
