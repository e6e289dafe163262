"""
Tests for room availability and utilization.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import BusinessRuleError, PermissionDeniedError
from edutrack.modules.events.models import Event
from edutrack.modules.rooms.models import Room, RoomType
from edutrack.modules.rooms.service import check_availability, get_utilization
from edutrack.modules.timetables.models import DayOfWeek, TimetableSlot

SERVICE = "edutrack.modules.rooms.service"
SCHOOL_ID = "11111111-1111-1111-1111-111111111111"
MONDAY = date(2026, 3, 2)


def _room(room_id):
    room = MagicMock(spec=Room)
    room.id = room_id
    room.school_id = SCHOOL_ID
    room.name = f"Room {room_id}"
    room.code = room_id.upper()
    room.room_type = RoomType.CLASSROOM
    room.capacity = 40
    room.floor = 1
    room.building = "Main"
    room.facilities = None
    room.is_active = True
    room.created_at = datetime(2026, 1, 1, tzinfo=UTC)
    return room


def _slot(room_id, start, end):
    slot = MagicMock(spec=TimetableSlot)
    slot.room_id = room_id
    slot.start_time = start
    slot.end_time = end
    return slot


def _event(room_id, start, end):
    event = MagicMock(spec=Event)
    event.room_id = room_id
    event.start_time = start
    event.end_time = end
    return event


class TestCheckAvailability:
    """Rooms are busy when a slot or an event overlaps the window."""

    @pytest.mark.asyncio
    async def test_flags_each_room(self, mock_db, principal):
        """Flag each room busy or free for the window."""
        rooms = [_room("r1"), _room("r2"), _room("r3")]

        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.timetable_repository") as mock_timetables,
        ):
            mock_repo.candidate_rooms = AsyncMock(return_value=rooms)
            mock_timetables.active_slots_for_rooms = AsyncMock(
                return_value=[_slot("r1", "09:30", "10:30"), _slot("r3", "08:00", "09:00")]
            )
            mock_repo.events_on = AsyncMock(
                return_value=[
                    _event(
                        "r2",
                        datetime(2026, 3, 2, 8, 0, tzinfo=UTC),
                        datetime(2026, 3, 3, 12, 0, tzinfo=UTC),
                    )
                ]
            )

            result = await check_availability(mock_db, principal, MONDAY, "09:00", "10:00")

            availability = {item["id"]: item["is_available"] for item in result}
            assert availability == {"r1": False, "r2": False, "r3": True}
            assert result[0]["facilities"] == []
            mock_timetables.active_slots_for_rooms.assert_awaited_once_with(
                mock_db, ["r1", "r2", "r3"], DayOfWeek.MONDAY
            )

    @pytest.mark.asyncio
    async def test_invalid_time(self, mock_db, principal):
        """Reject a malformed time."""
        with pytest.raises(BusinessRuleError) as exc_info:
            await check_availability(mock_db, principal, MONDAY, "9:00", "10:00")

        assert exc_info.value.error_code == "INVALID_TIME"

    @pytest.mark.asyncio
    async def test_inverted_window(self, mock_db, principal):
        """Reject a window that ends before it starts."""
        with pytest.raises(BusinessRuleError) as exc_info:
            await check_availability(mock_db, principal, MONDAY, "10:00", "09:00")

        assert exc_info.value.error_code == "INVALID_TIME_RANGE"


@pytest.mark.asyncio
async def test_utilization_sums_slots(mock_db, school_admin):
    """Sum booked minutes per room over the week."""
    rooms = [_room("r1"), _room("r2")]

    with (
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.timetable_repository") as mock_timetables,
    ):
        mock_repo.school_rooms = AsyncMock(return_value=rooms)
        mock_timetables.active_slots_for_rooms = AsyncMock(
            return_value=[_slot("r1", "08:00", "09:00"), _slot("r1", "10:00", "10:45")]
        )

        result = await get_utilization(mock_db, school_admin)

        assert result[0]["slot_count"] == 2
        assert result[0]["scheduled_minutes"] == 105
        assert result[0]["scheduled_hours"] == 1.75
        assert result[1]["slot_count"] == 0


@pytest.mark.asyncio
async def test_teacher_cannot_view_utilization(mock_db, teacher):
    """Only school managers see utilization."""
    with pytest.raises(PermissionDeniedError):
        await get_utilization(mock_db, teacher)
