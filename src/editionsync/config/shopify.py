"""Shopify Admin API configuration values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from .env import optional_env_var, positive_float_env_var, require_env_vars
from .errors import ConfigurationError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, ShouldCacheHook

DEFAULT_SHOPIFY_API_VERSION = "2024-01"
SHOPIFY_TIMEOUT_SECONDS = 30.0
DEFAULT_CATALOG_CACHE_TTL_SECONDS = 300.0


@dataclass(frozen=True, slots=True)
class ShopifyConfig:
    """Holds Shopify Admin API configuration values."""

    shop: str
    access_token: str
    api_version: str
    resilience: ResilienceConfig

    @property
    def admin_base_url(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/"


def _normalize_shop(value: str) -> str:
    shop = value.strip().removeprefix("https://").removeprefix("http://")
    return shop.rstrip("/")


def _catalog_cache(predicate: ShouldCacheHook | None) -> CacheConfig | None:
    """Cache settings from ``EDITIONSYNC_HTTP_CACHE`` (memory, sqlite or off)."""

    mode = optional_env_var("EDITIONSYNC_HTTP_CACHE", "memory").lower()
    if mode == "off":
        return None
    if mode not in {"memory", "sqlite"}:
        raise ConfigurationError(
            f"EDITIONSYNC_HTTP_CACHE must be memory, sqlite or off, got {mode!r}"
        )
    backend: Literal["sqlite", "memory"] = "sqlite" if mode == "sqlite" else "memory"
    # edition sizes live in metafields that merchants edit; keep the TTL short
    ttl = positive_float_env_var(
        "EDITIONSYNC_HTTP_CACHE_TTL_SECONDS", DEFAULT_CATALOG_CACHE_TTL_SECONDS
    )
    return CacheConfig(backend=backend, default_ttl_seconds=ttl, should_cache=predicate)


def get_shopify_config(
    *,
    resilience: ResilienceConfig | None = None,
    cache_predicate: ShouldCacheHook | None = None,
) -> ShopifyConfig:
    values = require_env_vars(("SHOPIFY_SHOP", "SHOPIFY_ACCESS_TOKEN"))
    shop = _normalize_shop(values["SHOPIFY_SHOP"])
    api_version = optional_env_var("SHOPIFY_API_VERSION", DEFAULT_SHOPIFY_API_VERSION)
    base_url = f"https://{shop}/admin/api/{api_version}/"
    return ShopifyConfig(
        shop=shop,
        access_token=values["SHOPIFY_ACCESS_TOKEN"],
        api_version=api_version,
        resilience=resilience
        or ResilienceConfig(
            name="shopify",
            base_url=base_url,
            timeout_seconds=SHOPIFY_TIMEOUT_SECONDS,
            # REST Admin API bucket leaks at 2 requests per second on standard plans
            ratelimit=RateLimit(max_calls=2, per_seconds=1.0),
            cache=_catalog_cache(cache_predicate),
            default_headers={
                "X-Shopify-Access-Token": values["SHOPIFY_ACCESS_TOKEN"],
                "Content-Type": "application/json",
            },
        ),
    )
