"""
User Models
"""

from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from edutrack.modules.shared import BaseModel

if TYPE_CHECKING:
    from edutrack.modules.schools.models import School


class UserRole(str, Enum):
    SUPER_ADMIN = "super_admin"
    SCHOOL_ADMIN = "school_admin"
    PRINCIPAL = "principal"
    TEACHER = "teacher"
    PARENT = "parent"


class Sex(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


# Roles whose accounts belong to exactly one school
SCHOOL_STAFF_ROLES = frozenset({UserRole.SCHOOL_ADMIN, UserRole.PRINCIPAL, UserRole.TEACHER})


class User(BaseModel):
    """
    Login identity for every role.

    Teacher and parent profiles reuse the user's id as their primary key.
    ``school_id`` is set for school staff only: the super admin works across
    schools and a parent's schools follow from their children.
    """

    __tablename__ = "users"

    # ON DELETE SET NULL: staff outlive their school record
    school_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("schools.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    password_hash: Mapped[str] = mapped_column(Text, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        ENUM(UserRole, name="user_role", create_type=True),
        nullable=False,
        default=UserRole.PARENT,
    )

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    # Set for accounts created with a generated password
    must_change_password: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    school: Mapped["School | None"] = relationship("School", back_populates="users", lazy="selectin")

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role.value})>"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
