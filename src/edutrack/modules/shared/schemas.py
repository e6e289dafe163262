"""
Shared Schemas

Response envelopes used by every router:

- single item: ``{"message": ..., "item": {...}}``
- list: ``{"message": ..., "items": [...], "pagination": {...}}``
- delete/acknowledge: ``{"message": ...}``
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class ORMModel(BaseModel):
    """Base for read schemas built from ORM rows."""

    model_config = ConfigDict(from_attributes=True)


class PaginationMeta(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class MessageResponse(BaseModel):
    message: str


class ItemResponse(BaseModel, Generic[T]):
    message: str
    item: T


class ListResponse(BaseModel, Generic[T]):
    message: str
    items: list[T]
    pagination: PaginationMeta


def reject_null(value: Any) -> Any:
    """
    Refuse an explicit ``null`` in a partial update.

    Update schemas type every field as optional so it can be omitted, but a
    field backed by a NOT NULL column may not be cleared.
    """
    if value is None:
        raise ValueError("Field cannot be null")
    return value
