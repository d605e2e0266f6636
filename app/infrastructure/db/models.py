import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from app.infrastructure.db.base import Base


class GlobalSetting(Base):
    __tablename__ = "global_settings"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    setting_key = Column(String(100), unique=True, nullable=False, index=True)
    setting_value = Column(Text, nullable=False)
    setting_type = Column(String(20), nullable=False, default="string")  # string | number | boolean
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class Category(Base):
    __tablename__ = "categories"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text)
    icon = Column(String(50), default="utensils")
    color = Column(String(30), default="gray")
    display_order = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    items = relationship("MenuItem", back_populates="category")


class MenuItem(Base):
    __tablename__ = "menu_items"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    description = Column(Text)
    price = Column(Numeric(10, 2), nullable=False)
    image_url = Column(Text)
    category_id = Column(UUID(as_uuid=True), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True, index=True)
    food_type = Column(String(20), default="veg")  # veg | non-veg | egg
    available = Column(Boolean, default=True)
    gst_rate = Column(Numeric(5, 2), nullable=True)  # NULL -> restaurant default_gst_rate
    is_tax_included = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    category = relationship("Category", back_populates="items")
    add_ons = relationship("MenuAddOn", back_populates="menu_item", cascade="all, delete-orphan")


class MenuAddOn(Base):
    __tablename__ = "add_ons"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    menu_item_id = Column(UUID(as_uuid=True), ForeignKey("menu_items.id", ondelete="CASCADE"), index=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)

    menu_item = relationship("MenuItem", back_populates="add_ons")


class Order(Base):
    __tablename__ = "orders"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    table_number = Column(Integer, index=True)
    customer_name = Column(String(120))
    customer_phone = Column(String(20), index=True)
    status = Column(String(20), default="pending")  # pending | paid | cancelled
    ready_to_pay = Column(Boolean, default=False)

    original_total = Column(Numeric(12, 2), nullable=False)
    discount_amount = Column(Numeric(12, 2), default=0)
    total = Column(Numeric(12, 2), nullable=False)
    coupon_id = Column(UUID(as_uuid=True), ForeignKey("coupons.id"), nullable=True)
    coupon_code = Column(String(20), nullable=True)
    # Settings the bill was computed with; pay-bill recomputes against these
    billing_settings = Column(JSONB, nullable=True)

    # Filled when the bill is paid
    subtotal = Column(Numeric(12, 2))
    cgst_amount = Column(Numeric(12, 2))
    sgst_amount = Column(Numeric(12, 2))
    service_charge_amount = Column(Numeric(12, 2))
    paid_at = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
    updated_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id", ondelete="CASCADE"), index=True)
    menu_item_id = Column(UUID(as_uuid=True), ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True, index=True)
    item_name = Column(String(200))
    quantity = Column(Integer, nullable=False)
    item_price = Column(Numeric(10, 2), nullable=False)
    gst_rate = Column(Numeric(5, 2), nullable=False)
    is_tax_included = Column(Boolean, default=False)
    selected_add_ons = Column(JSONB, default=list)  # [{"name": str, "price": str}]
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))

    order = relationship("Order", back_populates="items")


class Coupon(Base):
    __tablename__ = "coupons"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    code = Column(String(20), unique=True, nullable=False, index=True)
    coupon_type = Column(String(30), default="CAMPAIGN")
    customer_phone = Column(String(20), index=True)
    discount_type = Column(String(20), nullable=False)  # percentage | fixed
    discount_value = Column(Numeric(10, 2), nullable=False)
    minimum_order_amount = Column(Numeric(10, 2), default=0)
    maximum_discount_amount = Column(Numeric(10, 2), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)

    is_used = Column(Boolean, default=False)
    used_at = Column(DateTime(timezone=True))
    used_in_order_id = Column(UUID(as_uuid=True), nullable=True)

    generated_by = Column(String(50), default="admin")
    whatsapp_sent = Column(Boolean, default=False)
    whatsapp_sent_at = Column(DateTime(timezone=True))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))


class CouponUsageHistory(Base):
    __tablename__ = "coupon_usage_history"
    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    coupon_id = Column(UUID(as_uuid=True), ForeignKey("coupons.id"), index=True)
    order_id = Column(UUID(as_uuid=True), ForeignKey("orders.id"))
    customer_phone = Column(String(20))
    discount_applied = Column(Numeric(10, 2))
    original_total = Column(Numeric(12, 2))
    final_total = Column(Numeric(12, 2))
    created_at = Column(DateTime(timezone=True), server_default=text("CURRENT_TIMESTAMP"))
