"""Create the order line item ledger and the sync run audit table.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 10:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "order_line_items",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("order_id", sa.String(length=64), nullable=False),
        sa.Column("line_item_id", sa.String(length=64), nullable=False),
        sa.Column("order_name", sa.String(length=255), nullable=True),
        sa.Column("product_id", sa.String(length=64), nullable=True),
        sa.Column("variant_id", sa.String(length=64), nullable=True),
        sa.Column("vendor_name", sa.String(length=255), nullable=True),
        sa.Column("edition_number", sa.Integer(), nullable=True),
        sa.Column(
            "status",
            sa.Enum("active", "removed", name="lineitemstatus", native_enum=False, length=16),
            nullable=False,
        ),
        sa.Column("removed_reason", sa.String(length=255), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("certificate_url", sa.String(length=512), nullable=True),
        sa.Column("certificate_token", sa.String(length=64), nullable=True),
        sa.Column("certificate_generated_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_order_line_items")),
        sa.UniqueConstraint(
            "order_id", "line_item_id", name=op.f("uq_order_line_items_order_id")
        ),
    )
    op.create_index(
        "ix_order_line_items_product_status",
        "order_line_items",
        ["product_id", "status"],
    )
    op.create_index("ix_order_line_items_order_id", "order_line_items", ["order_id"])

    op.create_table(
        "sync_runs",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("total_products", sa.Integer(), nullable=False),
        sa.Column("successful_products", sa.Integer(), nullable=False),
        sa.Column("sync_results", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_sync_runs")),
    )
    op.create_index("ix_sync_runs_created_at", "sync_runs", ["created_at"])


def downgrade() -> None:
    op.drop_index("ix_sync_runs_created_at", table_name="sync_runs")
    op.drop_table("sync_runs")
    op.drop_index("ix_order_line_items_order_id", table_name="order_line_items")
    op.drop_index("ix_order_line_items_product_status", table_name="order_line_items")
    op.drop_table("order_line_items")
