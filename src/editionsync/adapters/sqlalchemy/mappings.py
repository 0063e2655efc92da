"""SQLAlchemy mapping metadata for the edition ledger."""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    Dialect,
    Enum,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
    orm,
)
from sqlalchemy.orm import configure_mappers

from editionsync.domain.model import LineItemStatus, OrderLineItem, SyncRunRecord

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)

UUIDColumnType = Uuid[uuid.UUID]


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


def _enum_values(enum_cls: type[LineItemStatus]) -> list[str]:
    return [member.value for member in enum_cls]


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

order_line_item_table = Table(
    "order_line_items",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("order_id", String(64), nullable=False),
    Column("line_item_id", String(64), nullable=False),
    Column("order_name", String(255)),
    Column("product_id", String(64)),
    Column("variant_id", String(64)),
    Column("vendor_name", String(255)),
    # not unique: a failed resequence may leave a collision until the next run
    Column("edition_number", Integer),
    Column(
        "status",
        Enum(
            LineItemStatus,
            native_enum=False,
            length=16,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=LineItemStatus.ACTIVE,
    ),
    Column("removed_reason", String(255)),
    Column("created_at", UTCDateTime(), nullable=False),
    Column("updated_at", UTCDateTime()),
    Column("certificate_url", String(512)),
    Column("certificate_token", String(64)),
    Column("certificate_generated_at", UTCDateTime()),
    UniqueConstraint("order_id", "line_item_id"),
    Index("ix_order_line_items_product_status", "product_id", "status"),
    Index("ix_order_line_items_order_id", "order_id"),
)

sync_run_table = Table(
    "sync_runs",
    mapper_registry.metadata,
    Column("id", UUIDColumnType, primary_key=True),
    Column("total_products", Integer, nullable=False),
    Column("successful_products", Integer, nullable=False),
    Column("sync_results", JSON, nullable=False),
    Column("created_at", UTCDateTime(), nullable=False),
    Index("ix_sync_runs_created_at", "created_at"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(OrderLineItem, order_line_item_table)
    mapper_registry.map_imperatively(SyncRunRecord, sync_run_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)
