"""Translate Shopify payloads into order source port types."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING, Final

from editionsync.domain.ports import LineItemDetails, OrderLineItemPayload, ProductInfo

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable

    from .schema import MetafieldPayload, OrderPayload, ProductPayload

log = getLogger(__name__)

EDITION_SIZE_KEYS: Final[frozenset[str]] = frozenset(
    {"edition_size", "edition size", "limited_edition_size", "total_edition"}
)


def parse_edition_total(metafields: Iterable[MetafieldPayload]) -> int | None:
    """Return the first positive integer found under a known edition size key."""

    for metafield in metafields:
        if metafield.key.strip().lower() not in EDITION_SIZE_KEYS:
            continue
        if metafield.value is None:
            continue
        try:
            size = int(metafield.value.strip())
        except ValueError:
            log.debug("Ignoring non-numeric edition size %r", metafield.value)
            continue
        if size > 0:
            return size
    return None


def parse_product_info(
    product: ProductPayload, metafields: Iterable[MetafieldPayload]
) -> ProductInfo:
    return ProductInfo(
        title=product.title,
        variant_ids=tuple(variant.id for variant in product.variants),
        edition_total=parse_edition_total(metafields),
    )


def line_items_for_product(
    order: OrderPayload,
    product_id: str,
    variant_ids: Collection[str],
) -> list[OrderLineItemPayload]:
    """Line items of ``order`` sold as ``product_id`` or one of its variants."""

    return [
        OrderLineItemPayload(
            order_id=order.id,
            line_item_id=line_item.id,
            created_at=order.created_at,
            order_name=order.name,
            product_id=line_item.product_id,
            variant_id=line_item.variant_id,
            vendor_name=line_item.vendor,
        )
        for line_item in order.line_items
        if line_item.product_id == product_id or line_item.variant_id in variant_ids
    ]


def line_item_details(
    order: OrderPayload, line_item_ids: Collection[str]
) -> dict[str, LineItemDetails]:
    return {
        line_item.id: LineItemDetails(sku=(line_item.sku or "").strip())
        for line_item in order.line_items
        if line_item.id in line_item_ids
    }
