"""Domain port definitions for adapters."""

from __future__ import annotations

from .fetching import (
    LineItemDetails,
    LineItemReference,
    OrderLineItemPayload,
    OrderSource,
    OrderSourceError,
    OrderSourceTimeoutError,
    ProductInfo,
)
from .persistence import (
    OrderLineItemRepository,
    PersistenceError,
    Repository,
    SyncRunRepository,
)
from .unit_of_work import (
    EditionRepositories,
    EditionUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "EditionRepositories",
    "EditionUnitOfWork",
    "LineItemDetails",
    "LineItemReference",
    "OrderLineItemPayload",
    "OrderLineItemRepository",
    "OrderSource",
    "OrderSourceError",
    "OrderSourceTimeoutError",
    "PersistenceError",
    "ProductInfo",
    "Repository",
    "RepositoryCollection",
    "SyncRunRepository",
    "UnitOfWork",
]
