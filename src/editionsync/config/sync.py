"""Edition synchronization defaults."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import optional_env_var, positive_float_env_var

DEFAULT_DUPLICATE_BUCKET_SECONDS = 60.0
DEFAULT_ORDER_SOURCE_TIMEOUT_SECONDS = 120.0


@dataclass(frozen=True, slots=True)
class SyncConfig:
    """Tunables for the edition sync pipeline.

    ``duplicate_bucket`` is the width of the ``created_at`` window used to group
    redelivered line items. One minute is a heuristic; tune it to the
    redelivery latency of the order source.
    """

    duplicate_bucket: timedelta = timedelta(seconds=DEFAULT_DUPLICATE_BUCKET_SECONDS)
    order_source_timeout_seconds: float = DEFAULT_ORDER_SOURCE_TIMEOUT_SECONDS
    certificate_base_url: str = ""


def get_sync_config() -> SyncConfig:
    bucket_seconds = positive_float_env_var(
        "EDITIONSYNC_DUPLICATE_BUCKET_SECONDS", DEFAULT_DUPLICATE_BUCKET_SECONDS
    )
    timeout_seconds = positive_float_env_var(
        "EDITIONSYNC_ORDER_SOURCE_TIMEOUT_SECONDS", DEFAULT_ORDER_SOURCE_TIMEOUT_SECONDS
    )
    base_url = optional_env_var("CUSTOMER_APP_URL", optional_env_var("APP_URL", ""))
    return SyncConfig(
        duplicate_bucket=timedelta(seconds=bucket_seconds),
        order_source_timeout_seconds=timeout_seconds,
        certificate_base_url=base_url.rstrip("/"),
    )
