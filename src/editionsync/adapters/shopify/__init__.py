"""Public interface for the Shopify order source adapter."""

from __future__ import annotations

from .client import ShopifyAPIError, ShopifyOrderSource
from .schema import OrderPayload, OrdersResponse, ProductResponse
from .translator import line_items_for_product, parse_edition_total, parse_product_info

__all__ = [
    "OrderPayload",
    "OrdersResponse",
    "ProductResponse",
    "ShopifyAPIError",
    "ShopifyOrderSource",
    "line_items_for_product",
    "parse_edition_total",
    "parse_product_info",
]
