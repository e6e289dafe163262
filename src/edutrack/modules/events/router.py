"""
Events Router

Endpoints:
- POST /events - Create an event (principals)
- GET /events - List events visible to the caller
- GET /events/upcoming - Next events, soonest first
- GET /events/{id} - Get an event
- PUT /events/{id} - Update an event (its creator)
- DELETE /events/{id} - Delete an event (its creator)
- POST /events/{id}/rsvp - Respond to an event
- GET /events/{id}/rsvps - Response summary (principals)
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from edutrack.core.auth import Actor, get_current_actor
from edutrack.core.database import get_db
from edutrack.core.pagination import PageParams, page_params, pagination_meta, single_page_meta
from edutrack.modules.events import service
from edutrack.modules.events.models import EventType
from edutrack.modules.events.schemas import (
    EventCreate,
    EventResponse,
    EventUpdate,
    RSVPRequest,
    RSVPResponse,
    RSVPSummaryResponse,
)
from edutrack.modules.shared.schemas import ItemResponse, ListResponse, MessageResponse

router = APIRouter()


@router.post("", response_model=ItemResponse[EventResponse], status_code=status.HTTP_201_CREATED)
async def create_event(
    body: EventCreate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    event = await service.create_event(db, actor, body)
    return {"message": "Event created successfully", "item": event}


@router.get("", response_model=ListResponse[EventResponse])
async def list_events(
    event_type: EventType | None = Query(None),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    params: PageParams = Depends(page_params),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    rows, total = await service.list_events(
        db, actor, params, event_type=event_type, start_date=start_date, end_date=end_date
    )
    return {
        "message": "Events retrieved successfully",
        "items": rows,
        "pagination": pagination_meta(params, total),
    }


@router.get("/upcoming", response_model=ListResponse[EventResponse])
async def upcoming_events(
    limit: int = Query(5, ge=1, le=50),
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    events = await service.upcoming_events(db, actor, limit)
    return {
        "message": "Upcoming events retrieved successfully",
        "items": events,
        "pagination": single_page_meta(len(events)),
    }


@router.get("/{event_id}", response_model=ItemResponse[EventResponse])
async def get_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    event = await service.get_event(db, actor, event_id)
    return {"message": "Event retrieved successfully", "item": event}


@router.put("/{event_id}", response_model=ItemResponse[EventResponse])
async def update_event(
    event_id: str,
    body: EventUpdate,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    event = await service.update_event(db, actor, event_id, body)
    return {"message": "Event updated successfully", "item": event}


@router.delete("/{event_id}", response_model=MessageResponse)
async def delete_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    await service.delete_event(db, actor, event_id)
    return {"message": "Event deleted successfully"}


@router.post("/{event_id}/rsvp", response_model=ItemResponse[RSVPResponse])
async def rsvp(
    event_id: str,
    body: RSVPRequest,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    record = await service.rsvp(db, actor, event_id, body.response)
    return {"message": "RSVP recorded successfully", "item": record}


@router.get("/{event_id}/rsvps", response_model=RSVPSummaryResponse)
async def rsvp_summary(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    actor: Actor = Depends(get_current_actor),
):
    summary = await service.rsvp_summary(db, actor, event_id)
    return {"message": "Event RSVPs retrieved successfully", "item": summary}
