"""
Material Shop Service Layer

Managers maintain categories and materials for their school. Parents shop from
the schools their children attend: they get one cart per school, and checkout
turns that cart into an order (see the orders module).
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import (
    BusinessRuleError,
    ConflictError,
    DependentRecordsError,
    NotFoundError,
)
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import COMMERCE_MANAGERS, SHOPPERS, ensure_role, has_role
from edutrack.core.tenancy import parent_school_ids, resolve_school_id, resolve_scope, tenant_clause
from edutrack.modules.materials import repository
from edutrack.modules.materials.models import Cart, CartItem, Material, MaterialCategory
from edutrack.modules.materials.schemas import (
    CartItemAdd,
    CategoryCreate,
    CategoryUpdate,
    MaterialCreate,
    MaterialUpdate,
)
from edutrack.modules.orders.models import OrderItem
from edutrack.modules.shared import repository as shared_repository

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor, model: type[Material] | type[MaterialCategory]):
    return tenant_clause(
        resolve_scope(actor),
        school_column=model.school_id,
        parent=lambda parent_id: model.school_id.in_(parent_school_ids(parent_id)),
    )


# ============================================
# Categories
# ============================================


async def _get_category(db: AsyncSession, actor: Actor, category_id: str) -> MaterialCategory:
    category = await shared_repository.get_scoped(
        db, MaterialCategory, category_id, _scope_clause(actor, MaterialCategory)
    )
    if category is None:
        logger.warning(f"Material category {category_id} not found for {actor}")
        raise NotFoundError("Category")
    return category


async def create_category(db: AsyncSession, actor: Actor, data: CategoryCreate) -> MaterialCategory:
    ensure_role(actor, COMMERCE_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    if await repository.category_name_taken(db, school_id, data.name):
        raise ConflictError("Category with this name already exists")

    category = await shared_repository.add(
        db, MaterialCategory(school_id=school_id, **data.model_dump(exclude={"school_id"}))
    )
    logger.info(f"{actor} created material category {category.id} in school {school_id}")
    return category


async def list_categories(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    school_id: str | None = None,
) -> tuple[list[MaterialCategory], int]:
    query = repository.category_list_query(_scope_clause(actor, MaterialCategory), school_id)
    return await paginate(db, query, params)


async def update_category(
    db: AsyncSession, actor: Actor, category_id: str, data: CategoryUpdate
) -> MaterialCategory:
    ensure_role(actor, COMMERCE_MANAGERS)
    category = await _get_category(db, actor, category_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("name") and await repository.category_name_taken(
        db, category.school_id, changes["name"], exclude_id=category.id
    ):
        raise ConflictError("Category with this name already exists")

    fields = shared_repository.apply_changes(category, changes)
    await db.flush()

    logger.info(f"{actor} updated material category {category.id}: {fields}")
    return category


async def delete_category(db: AsyncSession, actor: Actor, category_id: str) -> None:
    ensure_role(actor, COMMERCE_MANAGERS)
    category = await _get_category(db, actor, category_id)

    if await shared_repository.exists_where(db, Material, Material.category_id == category.id):
        raise DependentRecordsError("Cannot delete category with existing materials")

    await shared_repository.remove(db, category)
    logger.info(f"{actor} deleted material category {category_id}")


# ============================================
# Materials
# ============================================


async def _get_material(db: AsyncSession, actor: Actor, material_id: str) -> Material:
    material = await shared_repository.get_scoped(
        db, Material, material_id, _scope_clause(actor, Material)
    )
    if material is None:
        logger.warning(f"Material {material_id} not found for {actor}")
        raise NotFoundError("Material")
    return material


async def create_material(db: AsyncSession, actor: Actor, data: MaterialCreate) -> Material:
    ensure_role(actor, COMMERCE_MANAGERS)
    school_id = resolve_school_id(actor, data.school_id)

    category = await shared_repository.get_in_school(
        db, MaterialCategory, data.category_id, school_id
    )
    if category is None:
        raise NotFoundError("Category")

    material = await shared_repository.add(
        db, Material(school_id=school_id, **data.model_dump(exclude={"school_id"}))
    )
    logger.info(f"{actor} created material {material.id} in school {school_id}")
    return material


async def list_materials(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    school_id: str | None = None,
    category_id: str | None = None,
    search: str | None = None,
) -> tuple[list[Material], int]:
    """Managers see the whole catalogue; everyone else only what can be bought."""
    query = repository.material_list_query(
        _scope_clause(actor, Material),
        school_id=school_id,
        category_id=category_id,
        search=search,
        available_only=not has_role(actor, COMMERCE_MANAGERS),
    )
    return await paginate(db, query, params)


async def get_material(db: AsyncSession, actor: Actor, material_id: str) -> Material:
    return await _get_material(db, actor, material_id)


async def update_material(
    db: AsyncSession, actor: Actor, material_id: str, data: MaterialUpdate
) -> Material:
    ensure_role(actor, COMMERCE_MANAGERS)
    material = await _get_material(db, actor, material_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("category_id") and await shared_repository.get_in_school(
        db, MaterialCategory, changes["category_id"], material.school_id
    ) is None:
        raise NotFoundError("Category")

    min_qty = changes.get("min_order_qty", material.min_order_qty)
    max_qty = changes.get("max_order_qty", material.max_order_qty)
    if max_qty is not None and max_qty < min_qty:
        raise BusinessRuleError(
            "max_order_qty must not be less than min_order_qty", error_code="INVALID_ORDER_LIMITS"
        )

    fields = shared_repository.apply_changes(material, changes)
    await db.flush()

    logger.info(f"{actor} updated material {material.id}: {fields}")
    return material


async def delete_material(db: AsyncSession, actor: Actor, material_id: str) -> None:
    ensure_role(actor, COMMERCE_MANAGERS)
    material = await _get_material(db, actor, material_id)

    if await shared_repository.exists_where(db, OrderItem, OrderItem.material_id == material.id):
        raise DependentRecordsError("Cannot delete material with existing orders")

    await shared_repository.remove(db, material)
    logger.info(f"{actor} deleted material {material_id}")


# ============================================
# Cart
# ============================================


def check_quantity(material: Material, quantity: int) -> None:
    """
    Validate a cart quantity against the material's order limits and stock.

    Raises:
        BusinessRuleError: Outside min..max, or more than is in stock
    """
    minimum, maximum = material.min_order_qty, material.max_order_qty
    if maximum is None and quantity < minimum:
        raise BusinessRuleError(
            f"Quantity must be at least {minimum}", error_code="INVALID_QUANTITY"
        )
    if maximum is not None and not minimum <= quantity <= maximum:
        raise BusinessRuleError(
            f"Quantity must be between {minimum} and {maximum}", error_code="INVALID_QUANTITY"
        )
    if quantity > material.stock_quantity:
        raise BusinessRuleError("Insufficient stock", error_code="INSUFFICIENT_STOCK")


def cart_view(cart: Cart | None, parent_id: str, school_id: str) -> dict[str, Any]:
    """Cart with line totals and subtotal; an absent cart reads as empty."""
    items = []
    subtotal = Decimal("0.00")
    for item in cart.items if cart else []:
        line_total = item.material.price * item.quantity
        subtotal += line_total
        items.append(
            {
                "id": item.id,
                "material_id": item.material_id,
                "material_name": item.material.name,
                "unit_price": item.material.price,
                "quantity": item.quantity,
                "line_total": line_total,
            }
        )
    return {
        "id": cart.id if cart else None,
        "school_id": school_id,
        "parent_id": parent_id,
        "items": items,
        "item_count": sum(item["quantity"] for item in items),
        "subtotal": subtotal,
    }


async def get_cart(db: AsyncSession, actor: Actor, school_id: str) -> dict[str, Any]:
    ensure_role(actor, SHOPPERS)
    cart = await repository.get_cart(db, actor.id, school_id)
    return cart_view(cart, actor.id, school_id)


async def add_to_cart(db: AsyncSession, actor: Actor, data: CartItemAdd) -> dict[str, Any]:
    """
    Add a material to the parent's cart for the material's school.

    Adding a material already in the cart increases its quantity; the combined
    quantity must still satisfy the order limits and the stock.
    """
    ensure_role(actor, SHOPPERS)
    material = await _get_material(db, actor, data.material_id)
    if not material.is_active:
        raise NotFoundError("Material")

    cart = await repository.get_cart(db, actor.id, material.school_id)
    if cart is None:
        cart = Cart(parent_id=actor.id, school_id=material.school_id, items=[])
        db.add(cart)
        await db.flush()

    existing = next((item for item in cart.items if item.material_id == material.id), None)
    quantity = data.quantity + (existing.quantity if existing else 0)
    check_quantity(material, quantity)

    if existing:
        existing.quantity = quantity
    else:
        cart.items.append(CartItem(material_id=material.id, material=material, quantity=quantity))
    await db.flush()

    logger.info(f"{actor} added {data.quantity} x material {material.id} to cart {cart.id}")
    return cart_view(cart, actor.id, material.school_id)


async def _get_cart_for_item(db: AsyncSession, actor: Actor, item_id: str) -> tuple[Cart, CartItem]:
    item = await repository.get_cart_item(db, item_id, actor.id)
    if item is None:
        raise NotFoundError("Cart item")
    cart = await repository.get_cart_by_id(db, item.cart_id)
    return cart, item


async def update_cart_item(
    db: AsyncSession, actor: Actor, item_id: str, quantity: int
) -> dict[str, Any]:
    ensure_role(actor, SHOPPERS)
    cart, item = await _get_cart_for_item(db, actor, item_id)

    check_quantity(item.material, quantity)
    item.quantity = quantity
    await db.flush()

    logger.info(f"{actor} set cart item {item.id} quantity to {quantity}")
    return cart_view(cart, actor.id, cart.school_id)


async def remove_cart_item(db: AsyncSession, actor: Actor, item_id: str) -> dict[str, Any]:
    ensure_role(actor, SHOPPERS)
    cart, item = await _get_cart_for_item(db, actor, item_id)

    cart.items.remove(item)
    await db.flush()

    logger.info(f"{actor} removed item {item_id} from cart {cart.id}")
    return cart_view(cart, actor.id, cart.school_id)


async def clear_cart(db: AsyncSession, actor: Actor, school_id: str) -> None:
    ensure_role(actor, SHOPPERS)
    cart = await repository.get_cart(db, actor.id, school_id)
    if cart is None or not cart.items:
        return

    cart.items.clear()
    await db.flush()
    logger.info(f"{actor} cleared cart {cart.id}")
