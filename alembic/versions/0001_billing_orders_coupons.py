"""create settings, orders, coupons tables

Revision ID: 0001_billing_orders_coupons
Revises:
Create Date: 2026-10-17 12:00:00.000000

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = "0001_billing_orders_coupons"
down_revision = None
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
        "global_settings",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("setting_key", sa.String(length=100), nullable=False),
        sa.Column("setting_value", sa.Text(), nullable=False),
        sa.Column("setting_type", sa.String(length=20), nullable=False, server_default="string"),
        _timestamp("updated_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_global_settings_setting_key"), "global_settings", ["setting_key"], unique=True)

    op.create_table(
        "coupons",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("coupon_type", sa.String(length=30), nullable=True, server_default="CAMPAIGN"),
        sa.Column("customer_phone", sa.String(length=20), nullable=True),
        sa.Column("discount_type", sa.String(length=20), nullable=False),
        sa.Column("discount_value", sa.Numeric(10, 2), nullable=False),
        sa.Column("minimum_order_amount", sa.Numeric(10, 2), nullable=True, server_default="0"),
        sa.Column("maximum_discount_amount", sa.Numeric(10, 2), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("used_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("used_in_order_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("generated_by", sa.String(length=50), nullable=True, server_default="admin"),
        sa.Column("whatsapp_sent", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("whatsapp_sent_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_coupons_code"), "coupons", ["code"], unique=True)
    op.create_index(op.f("ix_coupons_customer_phone"), "coupons", ["customer_phone"], unique=False)

    op.create_table(
        "orders",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("table_number", sa.Integer(), nullable=True),
        sa.Column("customer_name", sa.String(length=120), nullable=True),
        sa.Column("customer_phone", sa.String(length=20), nullable=True),
        sa.Column("status", sa.String(length=20), nullable=True, server_default="pending"),
        sa.Column("ready_to_pay", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("original_total", sa.Numeric(12, 2), nullable=False),
        sa.Column("discount_amount", sa.Numeric(12, 2), nullable=True, server_default="0"),
        sa.Column("total", sa.Numeric(12, 2), nullable=False),
        sa.Column("coupon_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("coupon_code", sa.String(length=20), nullable=True),
        sa.Column("subtotal", sa.Numeric(12, 2), nullable=True),
        sa.Column("cgst_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("sgst_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("service_charge_amount", sa.Numeric(12, 2), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_orders_table_number"), "orders", ["table_number"], unique=False)
    op.create_index(op.f("ix_orders_customer_phone"), "orders", ["customer_phone"], unique=False)

    op.create_table(
        "order_items",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("order_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("item_name", sa.String(length=200), nullable=True),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("item_price", sa.Numeric(10, 2), nullable=False),
        sa.Column("gst_rate", sa.Numeric(5, 2), nullable=False),
        sa.Column("is_tax_included", sa.Boolean(), nullable=True, server_default=sa.false()),
        sa.Column("selected_add_ons", postgresql.JSONB(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_order_items_order_id"), "order_items", ["order_id"], unique=False)

    op.create_table(
        "coupon_usage_history",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("coupon_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("order_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("customer_phone", sa.String(length=20), nullable=True),
        sa.Column("discount_applied", sa.Numeric(10, 2), nullable=True),
        sa.Column("original_total", sa.Numeric(12, 2), nullable=True),
        sa.Column("final_total", sa.Numeric(12, 2), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(["coupon_id"], ["coupons.id"]),
        sa.ForeignKeyConstraint(["order_id"], ["orders.id"]),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_coupon_usage_history_coupon_id"), "coupon_usage_history", ["coupon_id"], unique=False)


def downgrade() -> None:
    op.drop_index(op.f("ix_coupon_usage_history_coupon_id"), table_name="coupon_usage_history")
    op.drop_table("coupon_usage_history")
    op.drop_index(op.f("ix_order_items_order_id"), table_name="order_items")
    op.drop_table("order_items")
    op.drop_index(op.f("ix_orders_customer_phone"), table_name="orders")
    op.drop_index(op.f("ix_orders_table_number"), table_name="orders")
    op.drop_table("orders")
    op.drop_index(op.f("ix_coupons_customer_phone"), table_name="coupons")
    op.drop_index(op.f("ix_coupons_code"), table_name="coupons")
    op.drop_table("coupons")
    op.drop_index(op.f("ix_global_settings_setting_key"), table_name="global_settings")
    op.drop_table("global_settings")
