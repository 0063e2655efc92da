"""Ports for persisting the edition ledger."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from editionsync.domain.model import OrderLineItem, SyncRunRecord

if TYPE_CHECKING:
    from collections.abc import Sequence

    from editionsync.domain.model import LineItemKey


class PersistenceError(RuntimeError):
    """Raised when a single row cannot be read or written."""


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class OrderLineItemRepository(Repository[OrderLineItem], Protocol):
    """Persistence contract for order line items.

    Rows are written by mutating loaded entities (or ``add``-ing new ones)
    inside ``UnitOfWork.savepoint`` so each row succeeds or fails on its own.
    """

    def get(self, key: LineItemKey) -> OrderLineItem | None: ...

    def list_for_product(self, product_id: str) -> Sequence[OrderLineItem]:
        """Rows of ``product_id`` ordered by edition number (unnumbered last)."""
        ...

    def list_active(self, product_id: str) -> Sequence[OrderLineItem]:
        """Active rows of ``product_id`` ordered by ``created_at``."""
        ...

    def list_dedup_candidates(self, product_id: str) -> Sequence[OrderLineItem]:
        """Rows of ``product_id`` plus orphaned rows without a product reference."""
        ...


@runtime_checkable
class SyncRunRepository(Repository[SyncRunRecord], Protocol):
    """Append-only store of sync batch audit records."""

    def latest(self, limit: int = 20) -> Sequence[SyncRunRecord]: ...
