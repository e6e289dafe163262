"""
Shared module - Base model and common response schemas.
"""

from edutrack.modules.shared.models import BaseModel, TenantMixin
from edutrack.modules.shared.schemas import (
    ItemResponse,
    ListResponse,
    MessageResponse,
    PaginationMeta,
)

__all__ = [
    "BaseModel",
    "TenantMixin",
    "ItemResponse",
    "ListResponse",
    "MessageResponse",
    "PaginationMeta",
]
