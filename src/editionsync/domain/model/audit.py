"""Audit records for completed sync batches."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4


@dataclass(eq=False, kw_only=True)
class SyncRunRecord:
    """Append-only record of one orchestrator invocation."""

    total_products: int
    successful_products: int
    sync_results: list[dict[str, object]] = field(default_factory=list[dict[str, object]])
    created_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))
    id: UUID = field(default_factory=uuid4)
