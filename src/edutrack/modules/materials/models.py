"""
Material Shop Models

School supply categories and materials sold to parents, plus each parent's
cart per school.
"""

from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel, TenantMixin


class MaterialCategory(TenantMixin, BaseModel):
    __tablename__ = "material_categories"
    __table_args__ = (
        UniqueConstraint("school_id", "name", name="uq_material_categories_school_name"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)


class Material(TenantMixin, BaseModel):
    __tablename__ = "materials"
    __table_args__ = (
        CheckConstraint("price > 0", name="ck_materials_price_positive"),
        CheckConstraint("stock_quantity >= 0", name="ck_materials_stock_non_negative"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    min_order_qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    max_order_qty: Mapped[int | None] = mapped_column(Integer, nullable=True)
    category_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("material_categories.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    brand: Mapped[str | None] = mapped_column(String(100), nullable=True)
    model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    specifications: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)
    image_urls: Mapped[list[str]] = mapped_column(ARRAY(String(500)), nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Cart(TenantMixin, BaseModel):
    """One cart per parent per school."""

    __tablename__ = "carts"
    __table_args__ = (UniqueConstraint("parent_id", "school_id", name="uq_carts_parent_school"),)

    parent_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("parents.id", ondelete="CASCADE"),
        nullable=False,
    )

    items: Mapped[list["CartItem"]] = relationship(
        "CartItem",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="CartItem.created_at",
    )


class CartItem(BaseModel):
    __tablename__ = "cart_items"
    __table_args__ = (
        UniqueConstraint("cart_id", "material_id", name="uq_cart_items_cart_material"),
    )

    cart_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("carts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    material_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("materials.id", ondelete="CASCADE"),
        nullable=False,
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    material: Mapped[Material] = relationship(Material, lazy="selectin")
