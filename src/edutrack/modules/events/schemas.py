"""
Event Schemas
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from edutrack.modules.events.models import EventType, RSVPStatus
from edutrack.modules.shared.schemas import ORMModel, reject_null


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=5000)
    location: str | None = Field(None, max_length=200)
    room_id: str | None = None
    start_time: datetime
    end_time: datetime
    event_type: EventType = EventType.GENERAL
    class_id: str | None = None
    rsvp_required: bool = False


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=5000)
    location: str | None = Field(None, max_length=200)
    room_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    event_type: EventType | None = None
    rsvp_required: bool | None = None

    @field_validator(
        "title", "description", "start_time", "end_time", "event_type", "rsvp_required"
    )
    @classmethod
    def not_null(cls, value):
        return reject_null(value)


class EventResponse(ORMModel):
    id: str
    school_id: str
    title: str
    description: str
    location: str | None
    room_id: str | None
    start_time: datetime
    end_time: datetime
    event_type: EventType
    class_id: str | None
    rsvp_required: bool
    created_by_id: str
    created_at: datetime


class RSVPRequest(BaseModel):
    response: RSVPStatus


class RSVPResponse(ORMModel):
    id: str
    event_id: str
    user_id: str
    response: RSVPStatus
    updated_at: datetime


class RSVPSummary(BaseModel):
    event_id: str
    title: str
    total: int
    attending: int
    not_attending: int
    maybe: int
    responses: list[RSVPResponse]


class RSVPSummaryResponse(BaseModel):
    message: str
    item: RSVPSummary
