"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class LineItemStatus(StrEnum):
    ACTIVE = "active"
    REMOVED = "removed"


class RemovalReason(StrEnum):
    """Why a duplicate line item was retired, in detection priority order."""

    NULL_PRODUCT_ID = "Duplicate with null product_id"
    MISSING_SKU = "Duplicate with missing SKU"
    INCORRECT_PRODUCT_ID = "Duplicate with incorrect product_id"
    LOWER_LINE_ITEM_ID = "Duplicate line item (lower ID)"
