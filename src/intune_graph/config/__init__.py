"""Application configuration helpers."""

from __future__ import annotations

from .env import int_env_var, optional_env_var, require_env_vars
from .errors import (
    AuthenticationError,
    ConfigurationError,
    InvalidConfigurationError,
    MissingConfigurationError,
)
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .intune import GRAPH_BASE_URL, IntuneConfig, get_intune_config, graph_resilience
from .logging import configure_logging
from .storage import DatabaseConfig, StorageConfig, get_database_config, get_storage_config

__all__ = [
    "GRAPH_BASE_URL",
    "AuthenticationError",
    "CacheConfig",
    "ConfigurationError",
    "DatabaseConfig",
    "IntuneConfig",
    "InvalidConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "StorageConfig",
    "configure_logging",
    "get_database_config",
    "get_intune_config",
    "get_storage_config",
    "graph_resilience",
    "int_env_var",
    "optional_env_var",
    "require_env_vars",
]
