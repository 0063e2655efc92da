"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import or_, select
from sqlalchemy.exc import SQLAlchemyError

from editionsync.adapters.sqlalchemy.mappings import order_line_item_table, sync_run_table
from editionsync.domain.model import LineItemStatus, OrderLineItem, SyncRunRecord
from editionsync.domain.ports import PersistenceError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import Select
    from sqlalchemy.orm import Session

    from editionsync.domain.model import LineItemKey


class SqlAlchemyOrderLineItemRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: OrderLineItem) -> None:
        self.session.add(entity)

    def get(self, key: LineItemKey) -> OrderLineItem | None:
        stmt = (
            select(OrderLineItem)
            .where(order_line_item_table.c.order_id == key.order_id)
            .where(order_line_item_table.c.line_item_id == key.line_item_id)
        )
        try:
            return self.session.execute(stmt).scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not load line item {key.line_item_id} of order {key.order_id}"
            ) from exc

    def list_for_product(self, product_id: str) -> Sequence[OrderLineItem]:
        columns = order_line_item_table.c
        stmt = (
            select(OrderLineItem)
            .where(columns.product_id == product_id)
            .order_by(
                columns.edition_number.is_(None),
                columns.edition_number,
                columns.created_at,
                columns.line_item_id,
            )
        )
        return self._all(stmt)

    def list_active(self, product_id: str) -> Sequence[OrderLineItem]:
        columns = order_line_item_table.c
        stmt = (
            select(OrderLineItem)
            .where(columns.product_id == product_id)
            .where(columns.status == LineItemStatus.ACTIVE)
            .order_by(columns.created_at, columns.line_item_id)
        )
        return self._all(stmt)

    def list_dedup_candidates(self, product_id: str) -> Sequence[OrderLineItem]:
        columns = order_line_item_table.c
        stmt = (
            select(OrderLineItem)
            .where(or_(columns.product_id == product_id, columns.product_id.is_(None)))
            .order_by(columns.order_id, columns.created_at, columns.line_item_id)
        )
        return self._all(stmt)

    def _all(self, stmt: Select[tuple[OrderLineItem]]) -> Sequence[OrderLineItem]:
        try:
            return self.session.execute(stmt).scalars().all()
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not query order line items") from exc


class SqlAlchemySyncRunRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: SyncRunRecord) -> None:
        self.session.add(entity)

    def latest(self, limit: int = 20) -> Sequence[SyncRunRecord]:
        stmt = (
            select(SyncRunRecord).order_by(sync_run_table.c.created_at.desc()).limit(limit)
        )
        return self.session.execute(stmt).scalars().all()
