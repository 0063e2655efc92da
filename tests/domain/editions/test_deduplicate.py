from __future__ import annotations

from datetime import timedelta

import pytest

from editionsync.domain.editions import (
    DuplicateCandidate,
    group_duplicates,
    remove_duplicate_line_items,
    removal_reason,
    select_survivor,
)
from editionsync.domain.model import LineItemStatus, RemovalReason
from editionsync.domain.ports import OrderSourceError
from tests.helpers.editions import (
    PRODUCT_ID,
    FakeEditionUnitOfWork,
    FakeOrderSource,
    InMemoryLineItemRepository,
    at,
    make_line_item,
)


def _removed(repo: InMemoryLineItemRepository) -> dict[str, str | None]:
    return {item.line_item_id: item.removed_reason for item in repo.items if item.is_removed}


def test_lower_line_item_id_loses_between_clean_duplicates() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("101", order_id="A", created_at=at(1), edition_number=1),
            make_line_item("102", order_id="A", created_at=at(5), edition_number=2),
        ]
    )
    source = FakeOrderSource(skus={"101": "SKU-1", "102": "SKU-1"})

    result = remove_duplicate_line_items(
        FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source
    )

    assert _removed(repo) == {"101": RemovalReason.LOWER_LINE_ITEM_ID}
    assert result.removed_count == 1
    assert result.removals[0].survivor.line_item_id == "102"
    assert repo.by_line_item_id("102").edition_number == 1
    assert result.resequenced is not None


def test_orphan_without_product_is_removed_even_with_higher_id() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("500", order_id="A", created_at=at(1), edition_number=1),
            make_line_item("900", order_id="A", created_at=at(2), product_id=None),
        ]
    )
    source = FakeOrderSource(skus={"500": "SKU-1", "900": "SKU-1"})

    remove_duplicate_line_items(FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source)

    assert _removed(repo) == {"900": RemovalReason.NULL_PRODUCT_ID}
    assert repo.by_line_item_id("500").is_active


def test_row_without_sku_loses_to_row_with_sku() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("7", order_id="A", created_at=at(1)),
            make_line_item("8", order_id="A", created_at=at(1)),
        ]
    )
    source = FakeOrderSource(skus={"7": "SKU-7", "8": "  "})

    remove_duplicate_line_items(FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source)

    assert _removed(repo) == {"8": RemovalReason.MISSING_SKU}


def test_sku_lookup_failure_falls_back_to_highest_id() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("1", order_id="A", created_at=at(1)),
            make_line_item("2", order_id="A", created_at=at(2)),
            make_line_item("3", order_id="A", created_at=at(3)),
        ]
    )
    source = FakeOrderSource(details_error=OrderSourceError("shop unavailable"))

    result = remove_duplicate_line_items(
        FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source
    )

    assert result.sku_lookup_error == "shop unavailable"
    assert _removed(repo) == {
        "1": RemovalReason.MISSING_SKU,
        "2": RemovalReason.MISSING_SKU,
    }
    assert repo.by_line_item_id("3").is_active


def test_rows_in_different_orders_or_buckets_are_not_duplicates() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("1", order_id="A", created_at=at(0)),
            make_line_item("2", order_id="B", created_at=at(0)),
            make_line_item("3", order_id="A", created_at=at(61)),
        ]
    )
    source = FakeOrderSource()

    result = remove_duplicate_line_items(
        FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source
    )

    assert result.groups == 0
    assert result.removed_count == 0
    assert source.calls_named("fetch_line_item_details") == []


def test_bucket_width_is_configurable() -> None:
    rows = [
        make_line_item("1", order_id="A", created_at=at(0)),
        make_line_item("2", order_id="A", created_at=at(61)),
    ]

    assert group_duplicates(rows, bucket=timedelta(seconds=60)) == []
    assert len(group_duplicates(rows, bucket=timedelta(minutes=5))) == 1


def test_skus_are_only_requested_for_grouped_rows() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("1", order_id="A", created_at=at(0)),
            make_line_item("2", order_id="A", created_at=at(10)),
            make_line_item("3", order_id="C", created_at=at(0)),
        ]
    )
    source = FakeOrderSource(skus={"1": "S", "2": "S", "3": "S"})

    remove_duplicate_line_items(FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source)

    (requested,) = source.calls_named("fetch_line_item_details")
    assert sorted(requested) == ["1", "2"]


def test_second_run_removes_nothing_new() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("1", order_id="A", created_at=at(0)),
            make_line_item("2", order_id="A", created_at=at(1)),
            make_line_item("3", order_id="A", created_at=at(2)),
        ]
    )
    source = FakeOrderSource(skus={"1": "S", "2": "S", "3": "S"})
    uow = FakeEditionUnitOfWork(repo)

    first = remove_duplicate_line_items(uow, PRODUCT_ID, order_source=source)
    second = remove_duplicate_line_items(uow, PRODUCT_ID, order_source=source)

    assert first.removed_count == 2
    assert second.removed_count == 0
    assert second.resequenced is None
    assert len(_removed(repo)) == 2


def test_write_failure_leaves_row_active() -> None:
    repo = InMemoryLineItemRepository(
        [
            make_line_item("1", order_id="A", created_at=at(0), edition_number=1),
            make_line_item("2", order_id="A", created_at=at(1), edition_number=2),
            make_line_item("3", order_id="A", created_at=at(2), edition_number=3),
        ],
        fail_writes={"1"},
    )
    source = FakeOrderSource(skus={"1": "S", "2": "S", "3": "S"})

    result = remove_duplicate_line_items(
        FakeEditionUnitOfWork(repo), PRODUCT_ID, order_source=source
    )

    assert [key.line_item_id for key in result.failed] == ["1"]
    assert _removed(repo) == {"2": RemovalReason.LOWER_LINE_ITEM_ID}
    assert repo.by_line_item_id("1").status is LineItemStatus.ACTIVE
    assert repo.by_line_item_id("1").edition_number == 1
    assert repo.by_line_item_id("3").edition_number == 2


def test_select_survivor_falls_back_to_all_candidates() -> None:
    candidates = [
        DuplicateCandidate(make_line_item("10", product_id=None)),
        DuplicateCandidate(make_line_item("12", product_id=None)),
        DuplicateCandidate(make_line_item("9", product_id=None)),
    ]

    survivor = select_survivor(candidates, product_id=PRODUCT_ID)

    assert survivor.item.line_item_id == "12"


def test_select_survivor_requires_candidates() -> None:
    with pytest.raises(ValueError, match="empty"):
        select_survivor([], product_id=PRODUCT_ID)


@pytest.mark.parametrize(
    ("product_id", "sku", "expected"),
    [
        (None, "", RemovalReason.NULL_PRODUCT_ID),
        (None, "SKU", RemovalReason.NULL_PRODUCT_ID),
        (PRODUCT_ID, "", RemovalReason.MISSING_SKU),
        ("other", "SKU", RemovalReason.INCORRECT_PRODUCT_ID),
        (PRODUCT_ID, "SKU", RemovalReason.LOWER_LINE_ITEM_ID),
    ],
)
def test_removal_reason_precedence(
    product_id: str | None, sku: str, expected: RemovalReason
) -> None:
    candidate = DuplicateCandidate(make_line_item("1", product_id=product_id), sku=sku)

    assert removal_reason(candidate, product_id=PRODUCT_ID) is expected
