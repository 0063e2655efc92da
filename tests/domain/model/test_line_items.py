from __future__ import annotations

from datetime import timedelta

import pytest

from editionsync.domain.model import (
    Certificate,
    LineItemKey,
    LineItemRemovedError,
    LineItemStatus,
    RemovalReason,
)
from tests.helpers.editions import T0, make_line_item


def test_new_line_item_is_active_and_unnumbered() -> None:
    item = make_line_item("1")

    assert item.is_active
    assert not item.is_removed
    assert item.edition_number is None
    assert item.key == LineItemKey(order_id="order-1", line_item_id="1")


def test_assign_edition_sets_number_and_touches() -> None:
    item = make_line_item("1")
    later = T0 + timedelta(hours=1)

    item.assign_edition(3, at=later)

    assert item.edition_number == 3
    assert item.updated_at == later


def test_assign_edition_rejects_removed_rows() -> None:
    item = make_line_item("1", edition_number=2)
    item.mark_removed(RemovalReason.MISSING_SKU, at=T0)

    with pytest.raises(LineItemRemovedError) as excinfo:
        item.assign_edition(1, at=T0)

    assert excinfo.value.key == item.key
    assert item.edition_number is None


def test_assign_edition_rejects_non_positive_numbers() -> None:
    item = make_line_item("1")

    with pytest.raises(ValueError, match="start at 1"):
        item.assign_edition(0, at=T0)


def test_mark_removed_clears_number_and_records_reason() -> None:
    item = make_line_item("1", edition_number=4)

    item.mark_removed(RemovalReason.LOWER_LINE_ITEM_ID, at=T0)

    assert item.status is LineItemStatus.REMOVED
    assert item.removed_reason == "Duplicate line item (lower ID)"
    assert item.edition_number is None
    assert item.updated_at == T0


def test_mark_removed_is_terminal() -> None:
    item = make_line_item("1")
    item.mark_removed(RemovalReason.NULL_PRODUCT_ID, at=T0)

    item.mark_removed(RemovalReason.MISSING_SKU, at=T0 + timedelta(days=1))

    assert item.removed_reason == RemovalReason.NULL_PRODUCT_ID
    assert item.updated_at == T0


def test_merge_vendor_name_never_erases() -> None:
    item = make_line_item("1", vendor_name="Original")

    item.merge_vendor_name(None)
    item.merge_vendor_name("   ")
    assert item.vendor_name == "Original"

    item.merge_vendor_name("Updated")
    assert item.vendor_name == "Updated"


def test_attach_certificate_copies_reference() -> None:
    item = make_line_item("1")

    certificate = Certificate(
        url="https://example.test/certificate/1", token="t", generated_at=T0
    )
    item.attach_certificate(certificate)

    assert item.has_certificate
    assert item.certificate_url == "https://example.test/certificate/1"
    assert item.certificate_token == "t"
    assert item.certificate_generated_at == T0
