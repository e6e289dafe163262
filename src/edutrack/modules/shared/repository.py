"""
Shared Repository Helpers

Small query helpers reused by the domain repositories.
"""

from typing import Any, TypeVar

from sqlalchemy import ColumnElement, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.modules.shared.models import BaseModel

ModelT = TypeVar("ModelT", bound=BaseModel)


async def get_scoped(
    db: AsyncSession,
    model: type[ModelT],
    entity_id: str,
    scope_clause: ColumnElement[bool],
    for_update: bool = False,
) -> ModelT | None:
    """Fetch one row by id, restricted to the caller's tenant scope."""
    query = select(model).where(model.id == str(entity_id), scope_clause)
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_in_school(
    db: AsyncSession,
    model: type[ModelT],
    entity_id: str,
    school_id: str,
) -> ModelT | None:
    """Fetch a row only if it belongs to ``school_id``."""
    result = await db.execute(
        select(model).where(model.id == str(entity_id), model.school_id == school_id)
    )
    return result.scalar_one_or_none()


async def count_where(db: AsyncSession, model: type[BaseModel], *criteria: Any) -> int:
    result = await db.scalar(select(func.count(model.id)).where(*criteria))
    return result or 0


async def exists_where(db: AsyncSession, model: type[BaseModel], *criteria: Any) -> bool:
    return await count_where(db, model, *criteria) > 0


async def add(db: AsyncSession, entity: ModelT) -> ModelT:
    db.add(entity)
    await db.flush()
    await db.refresh(entity)
    return entity


async def remove(db: AsyncSession, entity: BaseModel) -> None:
    await db.delete(entity)
    await db.flush()


def apply_changes(entity: BaseModel, changes: dict[str, Any]) -> list[str]:
    """Copy a partial-update payload onto a row; returns the changed field names."""
    for field, value in changes.items():
        setattr(entity, field, value)
    return sorted(changes)
