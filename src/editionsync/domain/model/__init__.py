"""Domain model of the edition ledger."""

from __future__ import annotations

from .audit import SyncRunRecord
from .enums import LineItemStatus, RemovalReason
from .line_items import (
    Certificate,
    LineItemKey,
    LineItemRemovedError,
    OrderLineItem,
)

__all__ = [
    "Certificate",
    "LineItemKey",
    "LineItemRemovedError",
    "LineItemStatus",
    "OrderLineItem",
    "RemovalReason",
    "SyncRunRecord",
]
