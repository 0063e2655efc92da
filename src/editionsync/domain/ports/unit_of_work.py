"""Unit-of-work abstractions for coordinating repositories."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from contextlib import AbstractContextManager
    from types import TracebackType

    from editionsync.domain.ports.persistence import (
        OrderLineItemRepository,
        SyncRunRepository,
    )


@runtime_checkable
class RepositoryCollection(Protocol):
    """Marker protocol for groups of repositories managed together."""


@runtime_checkable
class UnitOfWork[TRepositories: RepositoryCollection](Protocol):
    """Generic unit-of-work boundary around a repository collection."""

    @property
    def repositories(self) -> TRepositories: ...

    def __enter__(self) -> UnitOfWork[TRepositories]: ...

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool: ...

    def savepoint(self) -> AbstractContextManager[None]:
        """Scope a single-row write; a failure rolls back only that row."""
        ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...


@dataclass(slots=True)
class EditionRepositories(RepositoryCollection):
    """Repositories required to maintain the edition ledger."""

    line_items: OrderLineItemRepository
    sync_runs: SyncRunRepository


type EditionUnitOfWork = UnitOfWork[EditionRepositories]
