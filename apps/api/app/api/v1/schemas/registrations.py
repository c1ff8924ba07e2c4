from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field

from app.api.v1.schemas.common import SchemaBase
from app.api.v1.schemas.events import EventOut, HubEventOut
from app.api.v1.schemas.hubs import HubOut
from app.models.registration import RegistrationStatus


class WaitlistIn(SchemaBase):
    first_name: str = Field(min_length=1, max_length=200)
    last_name: str = Field(min_length=1, max_length=200)
    email: EmailStr
    interest_areas: list[str]
    ai_interests: str | None = None


class EventRegistrationIn(SchemaBase):
    hub_event_id: UUID
    # guest contact; ignored in favour of the account when signed in
    first_name: str | None = Field(default=None, max_length=200)
    last_name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    interest_areas: list[str] = Field(default_factory=list)
    ai_interests: str | None = None
    notes: str | None = None


class RegistrationOut(SchemaBase):
    id: UUID
    hub_event_id: UUID
    user_id: UUID | None = None
    first_name: str
    last_name: str
    email: str
    interest_areas: list[str]
    ai_interests: str | None = None
    notes: str | None = None
    status: RegistrationStatus
    created_at: datetime


class WaitlistOut(SchemaBase):
    message: str
    entry: RegistrationOut


class RegistrationStatusIn(SchemaBase):
    status: RegistrationStatus


class UserRegistrationOut(SchemaBase):
    registration: RegistrationOut
    hub_event: HubEventOut
    event: EventOut
    hub: HubOut
