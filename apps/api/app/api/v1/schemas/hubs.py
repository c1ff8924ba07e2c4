from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field

from app.api.v1.schemas.common import SchemaBase


class HubCreate(SchemaBase):
    name: str = Field(min_length=1, max_length=200)
    description: str | None = None
    city: str = Field(min_length=1, max_length=120)
    state: str | None = None
    country: str = Field(min_length=1, max_length=120)
    address: str | None = None
    latitude: str | None = None
    longitude: str | None = None


class HubOut(SchemaBase):
    id: UUID
    name: str
    description: str | None = None
    city: str
    state: str | None = None
    country: str
    address: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    created_at: datetime
