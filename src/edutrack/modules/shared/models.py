"""
Shared Models

Abstract base classes for ORM models.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, declared_attr, mapped_column

from edutrack.core.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class BaseModel(Base):
    """
    Abstract base with a UUID primary key and audit timestamps.

    IDs are stored as native PostgreSQL UUIDs and exposed as strings.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        primary_key=True,
        default=_new_id,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class TenantMixin:
    """
    Adds the tenant (school) reference to a model.

    ON DELETE CASCADE: tenant data is removed with its school. The service
    layer refuses to delete schools that still own classes or students.
    """

    @declared_attr
    def school_id(cls) -> Mapped[str]:
        return mapped_column(
            UUID(as_uuid=False),
            ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        )
