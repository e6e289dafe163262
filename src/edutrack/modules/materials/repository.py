"""
Material Shop Repository
"""

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.materials.models import Cart, CartItem, Material, MaterialCategory


def category_list_query(scope_clause: ColumnElement[bool], school_id: str | None = None) -> Select:
    query = select(MaterialCategory).where(scope_clause)
    if school_id:
        query = query.where(MaterialCategory.school_id == school_id)
    return query.order_by(MaterialCategory.name)


async def category_name_taken(
    db: AsyncSession, school_id: str, name: str, exclude_id: str | None = None
) -> bool:
    query = select(func.count(MaterialCategory.id)).where(
        MaterialCategory.school_id == school_id,
        func.lower(MaterialCategory.name) == name.lower(),
    )
    if exclude_id:
        query = query.where(MaterialCategory.id != exclude_id)
    return bool(await db.scalar(query))


def material_list_query(
    scope_clause: ColumnElement[bool],
    school_id: str | None = None,
    category_id: str | None = None,
    search: str | None = None,
    available_only: bool = False,
) -> Select:
    """Materials in scope; ``available_only`` keeps active, in-stock rows."""
    query = select(Material).where(scope_clause)
    if school_id:
        query = query.where(Material.school_id == school_id)
    if category_id:
        query = query.where(Material.category_id == category_id)
    if search:
        query = query.where(Material.name.ilike(f"%{search}%"))
    if available_only:
        query = query.where(Material.is_active.is_(True), Material.stock_quantity > 0)
    return query.order_by(Material.name)


async def get_cart(db: AsyncSession, parent_id: str, school_id: str) -> Cart | None:
    result = await db.execute(
        select(Cart).where(Cart.parent_id == parent_id, Cart.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def get_cart_item(db: AsyncSession, item_id: str, parent_id: str) -> CartItem | None:
    """A cart item, only if it sits in one of the parent's carts."""
    result = await db.execute(
        select(CartItem)
        .join(Cart, Cart.id == CartItem.cart_id)
        .where(CartItem.id == item_id, Cart.parent_id == parent_id)
    )
    return result.scalar_one_or_none()


async def get_cart_by_id(db: AsyncSession, cart_id: str) -> Cart | None:
    result = await db.execute(select(Cart).where(Cart.id == cart_id))
    return result.scalar_one_or_none()

