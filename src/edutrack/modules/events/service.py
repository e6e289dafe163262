"""
Events Service Layer

Principals create events for the whole school or for one class. Parents see
school-wide events of their children's schools plus the events of their
children's classes. Only the principal who created an event may change it.
"""

import logging
from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor
from edutrack.core.errors import BusinessRuleError, NotFoundError
from edutrack.core.pagination import PageParams, paginate
from edutrack.core.permissions import EVENT_CREATORS, ensure_role
from edutrack.core.tenancy import (
    parent_class_ids,
    parent_school_ids,
    resolve_school_id,
    resolve_scope,
    tenant_clause,
)
from edutrack.modules.classes.models import SchoolClass
from edutrack.modules.events import repository
from edutrack.modules.events.models import Event, EventRSVP, EventType, RSVPStatus
from edutrack.modules.events.schemas import EventCreate, EventUpdate
from edutrack.modules.notifications.models import NotificationType
from edutrack.modules.notifications.service import notify, notify_many
from edutrack.modules.rooms.models import Room
from edutrack.modules.shared import repository as shared_repository

logger = logging.getLogger(__name__)


def _scope_clause(actor: Actor):
    return tenant_clause(
        resolve_scope(actor),
        school_column=Event.school_id,
        parent=lambda parent_id: and_(
            Event.school_id.in_(parent_school_ids(parent_id)),
            or_(Event.class_id.is_(None), Event.class_id.in_(parent_class_ids(parent_id))),
        ),
    )


async def _get_event(db: AsyncSession, actor: Actor, event_id: str) -> Event:
    event = await shared_repository.get_scoped(db, Event, event_id, _scope_clause(actor))
    if event is None:
        logger.warning(f"Event {event_id} not found for {actor}")
        raise NotFoundError("Event")
    return event


async def _get_own_event(db: AsyncSession, actor: Actor, event_id: str) -> Event:
    """Events created by someone else look missing."""
    event = await _get_event(db, actor, event_id)
    if event.created_by_id != actor.id:
        logger.warning(f"{actor} tried to modify event {event_id} created by {event.created_by_id}")
        raise NotFoundError("Event")
    return event


def _check_times(start_time: datetime, end_time: datetime) -> None:
    if end_time <= start_time:
        raise BusinessRuleError(
            "End time must be after start time", error_code="INVALID_TIME_RANGE"
        )


async def create_event(db: AsyncSession, actor: Actor, data: EventCreate) -> Event:
    """
    Create an event and notify the affected parents.

    Class events notify the parents of that class; school-wide events notify
    every parent with a child in the school.
    """
    ensure_role(actor, EVENT_CREATORS, "Only principals can create events")
    school_id = resolve_school_id(actor)

    if data.class_id and await shared_repository.get_in_school(
        db, SchoolClass, data.class_id, school_id
    ) is None:
        raise NotFoundError("Class")
    if data.room_id and await shared_repository.get_in_school(
        db, Room, data.room_id, school_id
    ) is None:
        raise NotFoundError("Room")
    _check_times(data.start_time, data.end_time)

    event = await shared_repository.add(
        db,
        Event(school_id=school_id, created_by_id=actor.id, **data.model_dump()),
    )

    if event.class_id:
        recipients = await repository.parent_ids_for_class(db, event.class_id)
    else:
        recipients = await repository.parent_ids_for_school(db, school_id)

    start = event.start_time
    sent = await notify_many(
        db,
        recipients,
        f"New Event: {event.title}",
        f"A new event has been scheduled for {start:%Y-%m-%d} at {start:%H:%M}. "
        f"{event.description}",
        NotificationType.EVENT,
        {"event_id": event.id, "rsvp_required": event.rsvp_required},
    )

    logger.info(f"{actor} created event {event.id} ({sent} notifications sent)")
    return event


async def list_events(
    db: AsyncSession,
    actor: Actor,
    params: PageParams,
    event_type: EventType | None = None,
    start_date: date | None = None,
    end_date: date | None = None,
) -> tuple[list[Event], int]:
    query = repository.list_query(
        _scope_clause(actor), event_type=event_type, start_date=start_date, end_date=end_date
    )
    return await paginate(db, query, params)


async def upcoming_events(db: AsyncSession, actor: Actor, limit: int = 5) -> list[Event]:
    return await repository.upcoming(db, _scope_clause(actor), datetime.now(UTC), limit)


async def get_event(db: AsyncSession, actor: Actor, event_id: str) -> Event:
    return await _get_event(db, actor, event_id)


async def update_event(db: AsyncSession, actor: Actor, event_id: str, data: EventUpdate) -> Event:
    ensure_role(actor, EVENT_CREATORS, "Only principals can update events")
    event = await _get_own_event(db, actor, event_id)
    changes = data.model_dump(exclude_unset=True)

    if changes.get("room_id") and await shared_repository.get_in_school(
        db, Room, changes["room_id"], event.school_id
    ) is None:
        raise NotFoundError("Room")
    _check_times(
        changes.get("start_time", event.start_time),
        changes.get("end_time", event.end_time),
    )

    fields = shared_repository.apply_changes(event, changes)
    await db.flush()

    logger.info(f"{actor} updated event {event.id}: {fields}")
    return event


async def delete_event(db: AsyncSession, actor: Actor, event_id: str) -> None:
    ensure_role(actor, EVENT_CREATORS, "Only principals can delete events")
    event = await _get_own_event(db, actor, event_id)
    await shared_repository.remove(db, event)
    logger.info(f"{actor} deleted event {event_id}")


async def rsvp(
    db: AsyncSession,
    actor: Actor,
    event_id: str,
    response: RSVPStatus,
) -> EventRSVP:
    """Record or change the caller's response, then tell the creator."""
    event = await _get_event(db, actor, event_id)
    if not event.rsvp_required:
        raise BusinessRuleError(
            "RSVP is not required for this event", error_code="RSVP_NOT_REQUIRED"
        )

    existing = await repository.get_rsvp(db, event.id, actor.id)
    if existing is None:
        record = await shared_repository.add(
            db, EventRSVP(event_id=event.id, user_id=actor.id, response=response)
        )
    else:
        existing.response = response
        await db.flush()
        record = existing

    responder = actor.name or actor.email
    await notify(
        db,
        event.created_by_id,
        "Event RSVP Response",
        f'{responder} has responded "{response.value}" to the event "{event.title}"',
        NotificationType.EVENT,
        {"event_id": event.id, "rsvp_id": record.id, "response": response.value},
    )

    logger.info(f"{actor} responded {response.value} to event {event.id}")
    return record


async def rsvp_summary(db: AsyncSession, actor: Actor, event_id: str) -> dict[str, Any]:
    ensure_role(actor, EVENT_CREATORS, "Only principals can view event RSVPs")
    event = await _get_event(db, actor, event_id)
    responses = await repository.list_rsvps(db, event.id)

    def count(status: RSVPStatus) -> int:
        return sum(1 for item in responses if item.response == status)

    return {
        "event_id": event.id,
        "title": event.title,
        "total": len(responses),
        "attending": count(RSVPStatus.ATTENDING),
        "not_attending": count(RSVPStatus.NOT_ATTENDING),
        "maybe": count(RSVPStatus.MAYBE),
        "responses": responses,
    }
