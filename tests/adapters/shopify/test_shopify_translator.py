from __future__ import annotations

from datetime import UTC, datetime

import pytest

from editionsync.adapters.shopify.schema import (
    MetafieldPayload,
    OrderPayload,
    ProductPayload,
)
from editionsync.adapters.shopify.translator import (
    line_item_details,
    line_items_for_product,
    parse_edition_total,
    parse_product_info,
)


def _metafield(key: str, value: object) -> MetafieldPayload:
    return MetafieldPayload.model_validate({"namespace": "custom", "key": key, "value": value})


@pytest.mark.parametrize(
    ("metafields", "expected"),
    [
        ([_metafield("edition_size", "25")], 25),
        ([_metafield("Edition Size", 12)], 12),
        ([_metafield("limited_edition_size", "abc"), _metafield("total_edition", "7")], 7),
        ([_metafield("edition_size", "0")], None),
        ([_metafield("artist", "40")], None),
        ([], None),
    ],
)
def test_parse_edition_total(metafields: list[MetafieldPayload], expected: int | None) -> None:
    assert parse_edition_total(metafields) == expected


def test_parse_product_info_collects_variant_ids() -> None:
    product = ProductPayload.model_validate(
        {"id": 8001, "title": "Mural Print", "variants": [{"id": 91}, {"id": "92"}]}
    )

    info = parse_product_info(product, [_metafield("edition_size", "100")])

    assert info.title == "Mural Print"
    assert info.variant_ids == ("91", "92")
    assert info.edition_total == 100


def test_line_items_for_product_matches_product_or_variant() -> None:
    order = OrderPayload.model_validate(
        {
            "id": 555,
            "name": "#1001",
            "created_at": "2024-03-01T12:00:00Z",
            "line_items": [
                {"id": 1, "product_id": 8001, "variant_id": 91, "vendor": "Vendor"},
                {"id": 2, "product_id": None, "variant_id": 92},
                {"id": 3, "product_id": 7000, "variant_id": 70},
            ],
        }
    )

    line_items = line_items_for_product(order, "8001", {"91", "92"})

    assert [item.line_item_id for item in line_items] == ["1", "2"]
    first = line_items[0]
    assert first.order_id == "555"
    assert first.order_name == "#1001"
    assert first.created_at == datetime(2024, 3, 1, 12, 0, tzinfo=UTC)
    assert first.vendor_name == "Vendor"
    assert line_items[1].product_id is None


def test_line_item_details_strips_skus() -> None:
    order = OrderPayload.model_validate(
        {
            "id": 555,
            "created_at": "2024-03-01T12:00:00Z",
            "line_items": [
                {"id": 1, "sku": "  PRINT-1 "},
                {"id": 2, "sku": None},
                {"id": 3, "sku": "OTHER"},
            ],
        }
    )

    details = line_item_details(order, {"1", "2"})

    assert {key: value.sku for key, value in details.items()} == {"1": "PRINT-1", "2": ""}
