from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum

import sqlalchemy as sa
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, false
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, StringList, TimestampMixin, UUIDPrimaryKeyMixin, enum_column


class EventType(str, Enum):
    WORKSHOP = "workshop"
    MEETUP = "meetup"
    HACKATHON = "hackathon"
    CONFERENCE = "conference"


class FocusArea(str, Enum):
    PRODUCT = "product"
    DESIGN = "design"
    ENGINEERING = "engineering"
    GENERAL = "general"


WAITLIST_EVENT_TITLE = "BuildClub Waitlist"


class Event(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "events"
    __table_args__ = (
        # at most one waitlist fallback event
        sa.Index(
            "uq_events_waitlist_title",
            "title",
            unique=True,
            postgresql_where=sa.text(f"title = '{WAITLIST_EVENT_TITLE}'"),
            sqlite_where=sa.text(f"title = '{WAITLIST_EVENT_TITLE}'"),
        ),
        sa.CheckConstraint(
            "capacity IS NULL OR capacity > 0",
            name="ck_events_capacity_positive",
        ),
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    start_datetime: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_datetime: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    event_type: Mapped[EventType] = mapped_column(
        enum_column(EventType, "event_type"),
        nullable=False,
    )
    # values are FocusArea members
    focus_areas: Mapped[list[str]] = mapped_column(StringList, nullable=False, default=list)
    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_published: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    created_by_id: Mapped[uuid.UUID | None] = mapped_column(
        sa.Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
