"""Audit trail of sync batches."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from editionsync.domain.clock import utcnow
from editionsync.domain.model import SyncRunRecord

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping, Sequence

    from editionsync.domain.clock import Clock
    from editionsync.domain.ports import EditionUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RecordOutcome:
    recorded: bool
    error: str | None = None


def record_sync_run(
    unit_of_work_factory: Callable[[], EditionUnitOfWork],
    *,
    total_products: int,
    successful_products: int,
    sync_results: Sequence[Mapping[str, object]],
    clock: Clock = utcnow,
) -> RecordOutcome:
    """Append one audit record for a finished batch.

    Runs in its own unit of work. A failure is logged and reported in the outcome
    but never raised, so an audit outage cannot fail a finished sync.
    """

    record = SyncRunRecord(
        total_products=total_products,
        successful_products=successful_products,
        sync_results=[dict(entry) for entry in sync_results],
        created_at=clock(),
    )
    try:
        with unit_of_work_factory() as uow:
            uow.repositories.sync_runs.add(record)
            uow.commit()
    except Exception as exc:  # noqa: BLE001
        log.exception("Failed to record sync run of %s products", total_products)
        return RecordOutcome(recorded=False, error=str(exc) or type(exc).__name__)
    return RecordOutcome(recorded=True)
