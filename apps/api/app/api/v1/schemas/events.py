from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from app.api.v1.schemas.common import SchemaBase, assume_utc, ensure_tzaware
from app.api.v1.schemas.hubs import HubOut
from app.models.event import EventType, FocusArea


class EventCreate(SchemaBase):
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    start_datetime: datetime = Field(alias="startDateTime")
    end_datetime: datetime | None = Field(default=None, alias="endDateTime")
    event_type: EventType
    focus_areas: list[FocusArea] = Field(default_factory=list)
    capacity: int | None = Field(default=None, ge=1)
    is_published: bool = False
    # first hub is marked primary
    hub_ids: list[UUID] = Field(default_factory=list)

    @field_validator("start_datetime", "end_datetime", mode="after")
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return ensure_tzaware(value)

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.end_datetime and self.end_datetime <= self.start_datetime:
            raise ValueError("endDateTime must be after startDateTime")
        return self


class EventUpdate(SchemaBase):
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = None
    start_datetime: datetime | None = Field(default=None, alias="startDateTime")
    end_datetime: datetime | None = Field(default=None, alias="endDateTime")
    event_type: EventType | None = None
    focus_areas: list[FocusArea] | None = None
    capacity: int | None = Field(default=None, ge=1)
    is_published: bool | None = None

    @field_validator("start_datetime", "end_datetime", mode="after")
    @classmethod
    def _validate_tzaware(cls, value: datetime | None) -> datetime | None:
        return ensure_tzaware(value)

    @model_validator(mode="after")
    def _validate_time_bounds(self):
        if self.start_datetime and self.end_datetime and self.end_datetime <= self.start_datetime:
            raise ValueError("endDateTime must be after startDateTime")
        return self


class EventOut(SchemaBase):
    id: UUID
    title: str
    description: str | None = None
    start_datetime: datetime = Field(alias="startDateTime")
    end_datetime: datetime | None = Field(default=None, alias="endDateTime")
    event_type: EventType
    focus_areas: list[str]
    capacity: int | None = None
    is_published: bool
    created_by_id: UUID | None = None
    created_at: datetime

    @field_validator("start_datetime", "end_datetime", "created_at", mode="after")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        return assume_utc(value)


class HubEventCreate(SchemaBase):
    hub_id: UUID
    event_id: UUID
    is_primary: bool = False
    capacity: int | None = Field(default=None, ge=1)


class HubEventOut(SchemaBase):
    id: UUID
    hub_id: UUID
    event_id: UUID
    is_primary: bool
    capacity: int | None = None


class HubEventWithHubOut(HubEventOut):
    hub: HubOut


class EventDetailOut(EventOut):
    hub_events: list[HubEventWithHubOut]


class EventListOut(SchemaBase):
    items: list[EventDetailOut]
    total: int = Field(ge=0)
