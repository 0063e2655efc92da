"""Application configuration helpers."""

from __future__ import annotations

from .env import optional_env_var, positive_float_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .shopify import DEFAULT_SHOPIFY_API_VERSION, ShopifyConfig, get_shopify_config
from .storage import StorageConfig, get_database_uri, get_storage_config
from .sync import SyncConfig, get_sync_config

__all__ = [
    "DEFAULT_SHOPIFY_API_VERSION",
    "CacheConfig",
    "ConfigurationError",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "ShopifyConfig",
    "StorageConfig",
    "SyncConfig",
    "configure_logging",
    "get_database_uri",
    "get_shopify_config",
    "get_storage_config",
    "get_sync_config",
    "optional_env_var",
    "positive_float_env_var",
    "require_env_vars",
]
