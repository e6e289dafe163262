"""
Material Shop Router

Endpoints:
- POST/GET /materials/categories - Create or list categories
- PUT/DELETE /materials/categories/{id} - Update or delete a category
- POST/GET /materials - Create or list materials
- GET/PUT/DELETE /materials/{id} - Read, update or delete a material

Cart (parents):
- GET /cart?school_id= - The cart for one school
- POST /cart/items - Add a material
- PUT /cart/items/{id} - Change an item's quantity
- DELETE /cart/items/{id} - Remove an item
- DELETE /cart?school_id= - Empty the cart
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta
from edutrack.modules.materials import service
from edutrack.modules.materials.schemas import (
    CartItemAdd,
    CartItemUpdate,
    CartResponse,
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MaterialCreate,
    MaterialResponse,
    MaterialUpdate,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()
cart_router = APIRouter()


# Categories


@router.post(
    "/categories",
    response_model=ItemResponse[CategoryResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_category(
    body: CategoryCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    category = await service.create_category(db, actor, body)
    return {"message": "Category created successfully", "item": category}


@router.get("/categories", response_model=ListResponse[CategoryResponse])
async def list_categories(
    school_id: str | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_categories(db, actor, params, school_id=school_id)
    return {
        "message": "Categories retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.put("/categories/{category_id}", response_model=ItemResponse[CategoryResponse])
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    category = await service.update_category(db, actor, category_id, body)
    return {"message": "Category updated successfully", "item": category}


@router.delete("/categories/{category_id}", response_model=MessageResponse)
async def delete_category(
    category_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_category(db, actor, category_id)
    return {"message": "Category deleted successfully"}


# Materials


@router.post("", response_model=ItemResponse[MaterialResponse], status_code=status.HTTP_201_CREATED)
async def create_material(
    body: MaterialCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    material = await service.create_material(db, actor, body)
    return {"message": "Material created successfully", "item": material}


@router.get("", response_model=ListResponse[MaterialResponse])
async def list_materials(
    school_id: str | None = Query(None),
    category_id: str | None = Query(None),
    search: str | None = Query(None, max_length=100),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_materials(
        db, actor, params, school_id=school_id, category_id=category_id, search=search
    )
    return {
        "message": "Materials retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/{material_id}", response_model=ItemResponse[MaterialResponse])
async def get_material(
    material_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    material = await service.get_material(db, actor, material_id)
    return {"message": "Material retrieved successfully", "item": material}


@router.put("/{material_id}", response_model=ItemResponse[MaterialResponse])
async def update_material(
    material_id: str,
    body: MaterialUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    material = await service.update_material(db, actor, material_id, body)
    return {"message": "Material updated successfully", "item": material}


@router.delete("/{material_id}", response_model=MessageResponse)
async def delete_material(
    material_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_material(db, actor, material_id)
    return {"message": "Material deleted successfully"}


# Cart


@cart_router.get("", response_model=CartResponse)
async def get_cart(
    school_id: str = Query(...),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await service.get_cart(db, actor, school_id)
    return {"message": "Cart retrieved successfully", "item": cart}


@cart_router.post("/items", response_model=CartResponse)
async def add_to_cart(
    body: CartItemAdd,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await service.add_to_cart(db, actor, body)
    return {"message": "Item added to cart successfully", "item": cart}


@cart_router.put("/items/{item_id}", response_model=CartResponse)
async def update_cart_item(
    item_id: str,
    body: CartItemUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await service.update_cart_item(db, actor, item_id, body.quantity)
    return {"message": "Cart updated successfully", "item": cart}


@cart_router.delete("/items/{item_id}", response_model=CartResponse)
async def remove_cart_item(
    item_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    cart = await service.remove_cart_item(db, actor, item_id)
    return {"message": "Item removed from cart successfully", "item": cart}


@cart_router.delete("", response_model=MessageResponse)
async def clear_cart(
    school_id: str = Query(...),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.clear_cart(db, actor, school_id)
    return {"message": "Cart cleared successfully"}
