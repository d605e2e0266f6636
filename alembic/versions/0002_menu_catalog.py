"""menu catalog (categories, menu items, add-ons) and order settings snapshot

Revision ID: 0002_menu_catalog
Revises: 0001_billing_orders_coupons
Create Date: 2026-10-17 15:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0002_menu_catalog"
down_revision = "0001_billing_orders_coupons"
branch_labels = None
depends_on = None


def _timestamp(name: str) -> sa.Column:
    return sa.Column(
        name,
        sa.DateTime(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=True,
    )


def upgrade() -> None:
    op.create_table(
        "categories",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("icon", sa.String(length=50), nullable=True, server_default="utensils"),
        sa.Column("color", sa.String(length=30), nullable=True, server_default="gray"),
        sa.Column("display_order", sa.Integer(), nullable=True, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=True, server_default=sa.true()),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "menu_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("image_url", sa.Text(), nullable=True),
        sa.Column("category_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("food_type", sa.String(length=20), nullable=True, server_default="veg"),
        sa.Column("available", sa.Boolean(), nullable=True, server_default=sa.true()),
        sa.Column("gst_rate", sa.Numeric(5, 2), nullable=True),
        sa.Column("is_tax_included", sa.Boolean(), nullable=True, server_default=sa.false()),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["category_id"], ["categories.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_menu_items_category_id"), "menu_items", ["category_id"], unique=False)

    op.create_table(
        "add_ons",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("menu_item_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.ForeignKeyConstraint(["menu_item_id"], ["menu_items.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_add_ons_menu_item_id"), "add_ons", ["menu_item_id"], unique=False)

    op.add_column("order_items", sa.Column("menu_item_id", postgresql.UUID(as_uuid=True), nullable=True))
    op.create_index(op.f("ix_order_items_menu_item_id"), "order_items", ["menu_item_id"], unique=False)
    op.create_foreign_key(
        "fk_order_items_menu_item_id", "order_items", "menu_items",
        ["menu_item_id"], ["id"], ondelete="SET NULL",
    )

    op.add_column("orders", sa.Column("billing_settings", postgresql.JSONB(), nullable=True))


def downgrade() -> None:
    op.drop_column("orders", "billing_settings")
    op.drop_constraint("fk_order_items_menu_item_id", "order_items", type_="foreignkey")
    op.drop_index(op.f("ix_order_items_menu_item_id"), table_name="order_items")
    op.drop_column("order_items", "menu_item_id")
    op.drop_index(op.f("ix_add_ons_menu_item_id"), table_name="add_ons")
    op.drop_table("add_ons")
    op.drop_index(op.f("ix_menu_items_category_id"), table_name="menu_items")
    op.drop_table("menu_items")
    op.drop_table("categories")
