# ============================================================================
# CONFIGURATION MODULE
# ============================================================================
# EPOCH: 1 - SCHEMA INFERENCE
# STATUS: Core - Configuration and defaults
# PURPOSE: Centralized configuration management
# CREATED: 14 OCT 2026
# ============================================================================
"""
Configuration Module

Provides configuration for schema inference and caching.
"""

from core.config.defaults import (
    CACHE_NAMESPACE,
    repo_name,
    CacheDefaults,
    InferenceDefaults,
    RelationConfig,
    get_defaults,
    reset_defaults,
)

__all__ = [
    "CACHE_NAMESPACE",
    "repo_name",
    "CacheDefaults",
    "InferenceDefaults",
    "RelationConfig",
    "get_defaults",
    "reset_defaults",
]
