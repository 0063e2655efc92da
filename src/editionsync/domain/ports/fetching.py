"""Ports for reading orders and catalog data from the commerce platform."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence
    from datetime import datetime


class OrderSourceError(RuntimeError):
    """Raised when the order source is unreachable or returns an unusable payload."""


class OrderSourceTimeoutError(OrderSourceError):
    """Raised when an order source call exceeds its time budget."""


@dataclass(slots=True, frozen=True)
class ProductInfo:
    """Catalog metadata needed to number a product."""

    title: str
    variant_ids: tuple[str, ...] = ()
    edition_total: int | None = None


@dataclass(slots=True, frozen=True)
class OrderLineItemPayload:
    """A line item as delivered by the order source, before persistence."""

    order_id: str
    line_item_id: str
    created_at: datetime
    order_name: str | None = None
    product_id: str | None = None
    variant_id: str | None = None
    vendor_name: str | None = None


@dataclass(slots=True, frozen=True)
class LineItemDetails:
    """Per-line-item metadata used to judge duplicate candidates."""

    sku: str = ""


@runtime_checkable
class OrderSource(Protocol):
    """Read-only access to the authoritative order feed."""

    def get_product_info(self, product_id: str) -> ProductInfo: ...

    def fetch_all_orders_with_product(
        self,
        product_id: str,
        variant_ids: Sequence[str],
    ) -> list[OrderLineItemPayload]: ...

    def fetch_line_item_details(
        self,
        line_items: Sequence[LineItemReference],
    ) -> dict[str, LineItemDetails]: ...


class LineItemReference(Protocol):
    """Anything that identifies a line item within its order."""

    @property
    def order_id(self) -> str: ...

    @property
    def line_item_id(self) -> str: ...


__all__ = [
    "LineItemDetails",
    "LineItemReference",
    "OrderLineItemPayload",
    "OrderSource",
    "OrderSourceError",
    "OrderSourceTimeoutError",
    "ProductInfo",
]
