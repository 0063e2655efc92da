"""Errors raised while reading ``EDITIONSYNC_*`` and ``SHOPIFY_*`` settings."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A setting is present but cannot be used, e.g. a non-numeric timeout."""


class MissingConfigurationError(ConfigurationError):
    """Required settings such as the shop domain or access token are unset."""
