"""Duplicate removal for line items recorded more than once for one purchase.

A buggy upstream can emit the same purchase as several line items of one order
within moments of each other. Such rows are grouped by order and creation-time
bucket; one survivor per group is kept and the rest are marked removed with a
reason describing why they lost.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING, Protocol

from editionsync.domain.clock import ensure_utc, utcnow
from editionsync.domain.model import RemovalReason
from editionsync.domain.ports import OrderSourceError, PersistenceError

from .resequence import line_item_id_sort_key, resequence_editions

if TYPE_CHECKING:
    from editionsync.domain.clock import Clock
    from editionsync.domain.model import LineItemKey, OrderLineItem
    from editionsync.domain.ports import EditionUnitOfWork, LineItemDetails, OrderSource

    from .resequence import ResequenceResult

log = getLogger(__name__)

DEFAULT_DUPLICATE_BUCKET = timedelta(minutes=1)


@dataclass(slots=True, frozen=True)
class DuplicateCandidate:
    item: OrderLineItem
    sku: str = ""

    @property
    def has_sku(self) -> bool:
        return bool(self.sku.strip())

    @property
    def product_id(self) -> str | None:
        return self.item.product_id


class SurvivorRule(Protocol):
    """Narrow a duplicate group towards its survivor.

    Returning an empty list means the rule does not apply and the candidates are
    left as they were.
    """

    def __call__(
        self,
        candidates: Sequence[DuplicateCandidate],
        *,
        product_id: str,
    ) -> list[DuplicateCandidate]: ...


@dataclass(slots=True, frozen=True)
class PreferValidProductAndSku:
    """Keep candidates that reference the synced product and carry a SKU."""

    def __call__(
        self,
        candidates: Sequence[DuplicateCandidate],
        *,
        product_id: str,
    ) -> list[DuplicateCandidate]:
        return [c for c in candidates if c.product_id == product_id and c.has_sku]


@dataclass(slots=True, frozen=True)
class PreferHighestLineItemId:
    def __call__(
        self,
        candidates: Sequence[DuplicateCandidate],
        *,
        product_id: str,
    ) -> list[DuplicateCandidate]:
        _ = product_id
        if not candidates:
            return []
        return [max(candidates, key=lambda c: line_item_id_sort_key(c.item.line_item_id))]


DEFAULT_SURVIVOR_RULES: tuple[SurvivorRule, ...] = (
    PreferValidProductAndSku(),
    PreferHighestLineItemId(),
)


def select_survivor(
    candidates: Sequence[DuplicateCandidate],
    *,
    product_id: str,
    rules: Sequence[SurvivorRule] = DEFAULT_SURVIVOR_RULES,
) -> DuplicateCandidate:
    """Apply ``rules`` in order, each narrowing the remaining candidates."""

    if not candidates:
        raise ValueError("Cannot select a survivor from an empty duplicate group")
    remaining = list(candidates)
    for rule in rules:
        narrowed = rule(remaining, product_id=product_id)
        if narrowed:
            remaining = narrowed
    return remaining[0]


def _has_null_product(candidate: DuplicateCandidate, product_id: str) -> bool:
    _ = product_id
    return candidate.product_id is None


def _has_missing_sku(candidate: DuplicateCandidate, product_id: str) -> bool:
    _ = product_id
    return not candidate.has_sku


def _has_other_product(candidate: DuplicateCandidate, product_id: str) -> bool:
    return candidate.product_id != product_id


type RemovalPredicate = Callable[[DuplicateCandidate, str], bool]

REMOVAL_REASON_RULES: tuple[tuple[RemovalPredicate, RemovalReason], ...] = (
    (_has_null_product, RemovalReason.NULL_PRODUCT_ID),
    (_has_missing_sku, RemovalReason.MISSING_SKU),
    (_has_other_product, RemovalReason.INCORRECT_PRODUCT_ID),
)


def removal_reason(candidate: DuplicateCandidate, *, product_id: str) -> RemovalReason:
    """First matching reason wins; a clean loser simply had the lower id."""

    for predicate, reason in REMOVAL_REASON_RULES:
        if predicate(candidate, product_id):
            return reason
    return RemovalReason.LOWER_LINE_ITEM_ID


@dataclass(slots=True, frozen=True)
class SkuLookup:
    """Outcome of a best-effort SKU enrichment; unknown line items have no SKU."""

    details: Mapping[str, LineItemDetails] = field(default_factory=dict)
    error: str | None = None

    def sku_for(self, line_item_id: str) -> str:
        details = self.details.get(line_item_id)
        return details.sku if details is not None else ""


def lookup_skus(order_source: OrderSource, line_items: Sequence[OrderLineItem]) -> SkuLookup:
    if not line_items:
        return SkuLookup()
    try:
        details = order_source.fetch_line_item_details(line_items)
    except OrderSourceError as exc:
        log.warning("SKU lookup failed, treating all SKUs as missing: %s", exc)
        return SkuLookup(error=str(exc))
    return SkuLookup(details=details)


def duplicate_group_key(item: OrderLineItem, bucket: timedelta) -> tuple[str, int]:
    """Group by order and by the ``bucket``-wide UTC window the row was created in."""

    width = bucket.total_seconds()
    if width <= 0:
        raise ValueError("Duplicate bucket width must be positive")
    return item.order_id, math.floor(ensure_utc(item.created_at).timestamp() / width)


def group_duplicates(
    line_items: Sequence[OrderLineItem],
    *,
    bucket: timedelta = DEFAULT_DUPLICATE_BUCKET,
) -> list[list[OrderLineItem]]:
    """Return every group of two or more active rows sharing a group key."""

    groups: dict[tuple[str, int], list[OrderLineItem]] = defaultdict(list)
    for item in line_items:
        if item.is_removed:
            continue
        groups[duplicate_group_key(item, bucket)].append(item)
    return [group for group in groups.values() if len(group) > 1]


@dataclass(slots=True, frozen=True)
class DuplicateRemoval:
    key: LineItemKey
    reason: RemovalReason
    survivor: LineItemKey


@dataclass(slots=True)
class DeduplicationResult:
    product_id: str
    groups: int = 0
    removals: list[DuplicateRemoval] = field(default_factory=list)
    failed: list[LineItemKey] = field(default_factory=list)
    sku_lookup_error: str | None = None
    resequenced: ResequenceResult | None = None

    @property
    def removed_count(self) -> int:
        return len(self.removals)


def remove_duplicate_line_items(
    uow: EditionUnitOfWork,
    product_id: str,
    *,
    order_source: OrderSource,
    bucket: timedelta = DEFAULT_DUPLICATE_BUCKET,
    rules: Sequence[SurvivorRule] = DEFAULT_SURVIVOR_RULES,
    clock: Clock = utcnow,
) -> DeduplicationResult:
    """Mark duplicate rows of ``product_id`` (and orphaned rows) as removed.

    SKUs are only looked up for rows that are part of a duplicate group. Rows that
    are already removed never join a group, so repeated runs remove nothing new.
    The product is resequenced when at least one row was removed.
    """

    result = DeduplicationResult(product_id=product_id)
    try:
        candidates = uow.repositories.line_items.list_dedup_candidates(product_id)
    except PersistenceError:
        log.exception("Could not load duplicate candidates of product %s", product_id)
        return result

    groups = group_duplicates(candidates, bucket=bucket)
    result.groups = len(groups)
    if not groups:
        return result

    skus = lookup_skus(order_source, [item for group in groups for item in group])
    result.sku_lookup_error = skus.error

    now = clock()
    for group in groups:
        members = [DuplicateCandidate(item, skus.sku_for(item.line_item_id)) for item in group]
        survivor = select_survivor(members, product_id=product_id, rules=rules)
        for candidate in members:
            if candidate is survivor:
                continue
            reason = removal_reason(candidate, product_id=product_id)
            try:
                with uow.savepoint():
                    candidate.item.mark_removed(reason, at=now)
            except PersistenceError:
                log.exception(
                    "Could not remove duplicate line item %s", candidate.item.line_item_id
                )
                result.failed.append(candidate.item.key)
                continue
            result.removals.append(
                DuplicateRemoval(key=candidate.item.key, reason=reason, survivor=survivor.item.key)
            )

    uow.commit()
    if result.removals:
        log.info(
            "Removed %s duplicate line items of product %s", result.removed_count, product_id
        )
        result.resequenced = resequence_editions(uow, product_id, clock=clock)
    return result
