from __future__ import annotations

import logging

import pytest

from editionsync.domain.editions import assign_edition_numbers
from tests.helpers.editions import at, make_payload


def test_assigns_numbers_in_purchase_order() -> None:
    line_items = [
        make_payload("30", created_at=at(300)),
        make_payload("10", created_at=at(100)),
        make_payload("20", created_at=at(200)),
    ]

    assignments = assign_edition_numbers(line_items)

    assert [(a.line_item_id, a.edition_number) for a in assignments] == [
        ("10", 1),
        ("20", 2),
        ("30", 3),
    ]


def test_equal_timestamps_keep_feed_order() -> None:
    line_items = [
        make_payload("b", created_at=at(0)),
        make_payload("a", created_at=at(0)),
        make_payload("c", created_at=at(-10)),
    ]

    assignments = assign_edition_numbers(line_items)

    assert [a.line_item_id for a in assignments] == ["c", "b", "a"]


def test_empty_feed_yields_no_assignments() -> None:
    assert assign_edition_numbers([]) == []


def test_assignment_carries_feed_fields() -> None:
    payload = make_payload("1", order_id="o-9", variant_id="v-1", vendor_name="Artist")

    (assignment,) = assign_edition_numbers([payload])

    assert assignment.order_id == "o-9"
    assert assignment.order_name == "#o-9"
    assert assignment.variant_id == "v-1"
    assert assignment.vendor_name == "Artist"
    assert assignment.created_at == payload.created_at


def test_oversold_product_is_numbered_past_the_cap(caplog: pytest.LogCaptureFixture) -> None:
    line_items = [make_payload(str(n), created_at=at(n)) for n in range(1, 4)]

    with caplog.at_level(logging.WARNING):
        assignments = assign_edition_numbers(line_items, edition_total=2)

    assert [a.edition_number for a in assignments] == [1, 2, 3]
    assert "Edition cap exceeded" in caplog.text
