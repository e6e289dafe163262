"""
Tests for the events service.

Covers:
- Only principals create events
- Recipients of the creation notification
- Only the creator may change an event
- RSVP recording and summaries
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from edutrack.core.errors import BusinessRuleError, NotFoundError, PermissionDeniedError
from edutrack.modules.events.models import Event, EventRSVP, RSVPStatus
from edutrack.modules.events.schemas import EventCreate, EventUpdate
from edutrack.modules.events.service import (
    create_event,
    delete_event,
    rsvp,
    rsvp_summary,
    update_event,
)

SERVICE = "edutrack.modules.events.service"
START = datetime(2026, 5, 1, 9, 30, tzinfo=UTC)


def _event_data(**overrides):
    values = {
        "title": "Sports Day",
        "description": "Annual inter-house games.",
        "start_time": START,
        "end_time": START + timedelta(hours=3),
    }
    values.update(overrides)
    return EventCreate(**values)


def _event(created_by_id: str, rsvp_required: bool = True):
    event = MagicMock(spec=Event)
    event.id = "event-1"
    event.title = "Sports Day"
    event.school_id = "11111111-1111-1111-1111-111111111111"
    event.created_by_id = created_by_id
    event.rsvp_required = rsvp_required
    event.start_time = START
    event.end_time = START + timedelta(hours=3)
    return event


# ============================================
# Creation
# ============================================


@pytest.mark.asyncio
async def test_only_principals_create_events(mock_db, school_admin):
    """Only principals may create events."""
    with pytest.raises(PermissionDeniedError) as exc_info:
        await create_event(mock_db, school_admin, _event_data())

    assert exc_info.value.message == "Only principals can create events"


@pytest.mark.asyncio
async def test_end_must_follow_start(mock_db, principal):
    """Reject an event that ends before it starts."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        with pytest.raises(BusinessRuleError) as exc_info:
            await create_event(mock_db, principal, _event_data(end_time=START))

        assert exc_info.value.error_code == "INVALID_TIME_RANGE"
        mock_shared.add.assert_not_called()


@pytest.mark.asyncio
async def test_school_event_notifies_school_parents(mock_db, principal):
    """Test that a school-wide event reaches every parent in the school."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.notify_many", new_callable=AsyncMock) as mock_notify_many,
    ):
        mock_shared.add = AsyncMock(side_effect=lambda db, event: event)
        mock_repo.parent_ids_for_school = AsyncMock(return_value=["p-1", "p-2"])
        mock_notify_many.return_value = 2

        event = await create_event(mock_db, principal, _event_data())

        assert event.created_by_id == principal.id
        assert event.school_id == principal.school_id
        mock_repo.parent_ids_for_school.assert_awaited_once_with(mock_db, principal.school_id)
        mock_repo.parent_ids_for_class.assert_not_called()

        args = mock_notify_many.call_args.args
        assert args[1] == ["p-1", "p-2"]
        assert args[2] == "New Event: Sports Day"
        assert args[3].startswith("A new event has been scheduled for 2026-05-01 at 09:30.")


@pytest.mark.asyncio
async def test_class_event_notifies_class_parents(mock_db, principal):
    """A class event notifies the parents of that class."""
    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.notify_many", new_callable=AsyncMock),
    ):
        mock_shared.get_in_school = AsyncMock(return_value=MagicMock())
        mock_shared.add = AsyncMock(side_effect=lambda db, event: event)
        mock_repo.parent_ids_for_class = AsyncMock(return_value=["p-1"])

        await create_event(mock_db, principal, _event_data(class_id="class-1"))

        mock_repo.parent_ids_for_class.assert_awaited_once_with(mock_db, "class-1")


@pytest.mark.asyncio
async def test_unknown_class_rejected(mock_db, principal):
    """Reject an event for a class outside the school."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_in_school = AsyncMock(return_value=None)

        with pytest.raises(NotFoundError):
            await create_event(mock_db, principal, _event_data(class_id="class-x"))


# ============================================
# Ownership
# ============================================


@pytest.mark.asyncio
async def test_other_principals_event_looks_missing(mock_db, principal):
    """Another principal's event is reported as missing."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_event(created_by_id="someone-else"))
        mock_shared.remove = AsyncMock()

        with pytest.raises(NotFoundError):
            await delete_event(mock_db, principal, "event-1")

        mock_shared.remove.assert_not_called()


@pytest.mark.asyncio
async def test_update_checks_combined_times(mock_db, principal):
    """Test that a new end time is compared with the stored start time."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(return_value=_event(created_by_id=principal.id))

        with pytest.raises(BusinessRuleError):
            await update_event(
                mock_db, principal, "event-1", EventUpdate(end_time=START - timedelta(hours=1))
            )


# ============================================
# RSVP
# ============================================


@pytest.mark.asyncio
async def test_rsvp_not_required(mock_db, parent):
    """Reject an RSVP to an event that does not ask for one."""
    with patch(f"{SERVICE}.shared_repository") as mock_shared:
        mock_shared.get_scoped = AsyncMock(
            return_value=_event(created_by_id="principal-1", rsvp_required=False)
        )

        with pytest.raises(BusinessRuleError) as exc_info:
            await rsvp(mock_db, parent, "event-1", RSVPStatus.ATTENDING)

        assert exc_info.value.error_code == "RSVP_NOT_REQUIRED"


@pytest.mark.asyncio
async def test_rsvp_changes_existing_response(mock_db, parent):
    """Test that responding twice updates the one RSVP and tells the creator."""
    existing = MagicMock(spec=EventRSVP)
    existing.id = "rsvp-1"
    existing.response = RSVPStatus.MAYBE

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
        patch(f"{SERVICE}.notify", new_callable=AsyncMock) as mock_notify,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=_event(created_by_id="principal-1"))
        mock_repo.get_rsvp = AsyncMock(return_value=existing)

        record = await rsvp(mock_db, parent, "event-1", RSVPStatus.ATTENDING)

        assert record is existing
        assert existing.response == RSVPStatus.ATTENDING
        mock_shared.add.assert_not_called()
        args = mock_notify.call_args.args
        assert args[1] == "principal-1"
        assert args[2] == "Event RSVP Response"
        assert args[3] == f'{parent.name} has responded "ATTENDING" to the event "Sports Day"'


@pytest.mark.asyncio
async def test_rsvp_summary_counts(mock_db, principal):
    """Count responses per RSVP status."""
    responses = []
    for status in (RSVPStatus.ATTENDING, RSVPStatus.ATTENDING, RSVPStatus.MAYBE):
        item = MagicMock(spec=EventRSVP)
        item.response = status
        responses.append(item)

    with (
        patch(f"{SERVICE}.shared_repository") as mock_shared,
        patch(f"{SERVICE}.repository") as mock_repo,
    ):
        mock_shared.get_scoped = AsyncMock(return_value=_event(created_by_id=principal.id))
        mock_repo.list_rsvps = AsyncMock(return_value=responses)

        summary = await rsvp_summary(mock_db, principal, "event-1")

        assert summary["total"] == 3
        assert summary["attending"] == 2
        assert summary["not_attending"] == 0
        assert summary["maybe"] == 1
