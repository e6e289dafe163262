"""
Room Models
"""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.dialects.postgresql import ARRAY, ENUM
from sqlalchemy.orm import Mapped, mapped_column

from edutrack.modules.shared import BaseModel, TenantMixin


class RoomType(str, Enum):
    CLASSROOM = "CLASSROOM"
    LABORATORY = "LABORATORY"
    LIBRARY = "LIBRARY"
    AUDITORIUM = "AUDITORIUM"
    GYMNASIUM = "GYMNASIUM"
    COMPUTER_LAB = "COMPUTER_LAB"
    ART_ROOM = "ART_ROOM"
    MUSIC_ROOM = "MUSIC_ROOM"
    CAFETERIA = "CAFETERIA"
    OFFICE = "OFFICE"
    STORAGE = "STORAGE"
    OTHER = "OTHER"


class Room(TenantMixin, BaseModel):
    __tablename__ = "rooms"
    # NULL codes never collide
    __table_args__ = (
        UniqueConstraint("school_id", "code", name="uq_rooms_school_code"),
        CheckConstraint("capacity >= 1", name="ck_rooms_capacity_positive"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    room_type: Mapped[RoomType] = mapped_column(
        ENUM(RoomType, name="room_type", create_type=True),
        nullable=False,
        default=RoomType.CLASSROOM,
    )
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    floor: Mapped[int | None] = mapped_column(Integer, nullable=True)
    building: Mapped[str | None] = mapped_column(String(100), nullable=True)
    facilities: Mapped[list[str]] = mapped_column(ARRAY(String(100)), nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Room(id={self.id}, name={self.name}, type={self.room_type.value})>"
