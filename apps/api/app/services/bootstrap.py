from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, TypeVar

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Event, Hub, HubEvent
from app.models.event import WAITLIST_EVENT_TITLE, EventType, FocusArea
from app.models.hub import GLOBAL_HUB_NAME

logger = structlog.get_logger(__name__)

__all__ = [
    "GLOBAL_HUB_NAME",
    "WAITLIST_EVENT_TITLE",
    "find_waitlist_hub_event",
    "get_or_create_global_hub",
    "get_or_create_hub_event",
    "get_or_create_waitlist_event",
    "get_or_create_waitlist_hub_event",
]

T = TypeVar("T")


def _insert_or_refetch(db: Session, row: T, find: Callable[[Session], T | None]) -> T:
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        # another request created it first
        db.rollback()
        existing = find(db)
        if existing is None:
            raise
        return existing
    db.refresh(row)
    return row


def _find_waitlist_event(db: Session) -> Event | None:
    return db.scalar(select(Event).where(Event.title == WAITLIST_EVENT_TITLE))


def _find_global_hub(db: Session) -> Hub | None:
    return db.scalar(select(Hub).where(Hub.name == GLOBAL_HUB_NAME))


def get_or_create_waitlist_event(db: Session) -> Event:
    event = _find_waitlist_event(db)
    if event is not None:
        return event

    event = _insert_or_refetch(
        db,
        Event(
            title=WAITLIST_EVENT_TITLE,
            description="General BuildClub waitlist signups",
            start_datetime=datetime.now(timezone.utc),
            event_type=EventType.MEETUP,
            focus_areas=[FocusArea.GENERAL.value],
            is_published=False,
        ),
        _find_waitlist_event,
    )
    logger.info("fallback_event_ready", event_id=str(event.id))
    return event


def get_or_create_global_hub(db: Session) -> Hub:
    hub = _find_global_hub(db)
    if hub is not None:
        return hub

    hub = _insert_or_refetch(
        db,
        Hub(
            name=GLOBAL_HUB_NAME,
            description="Default hub for signups without a location",
            city="Global",
            country="Global",
        ),
        _find_global_hub,
    )
    logger.info("fallback_hub_ready", hub_id=str(hub.id))
    return hub


def _find_hub_event(db: Session, hub: Hub, event: Event) -> HubEvent | None:
    return db.scalar(
        select(HubEvent).where(HubEvent.hub_id == hub.id, HubEvent.event_id == event.id)
    )


def get_or_create_hub_event(db: Session, hub: Hub, event: Event, is_primary: bool = False) -> HubEvent:
    hub_event = _find_hub_event(db, hub, event)
    if hub_event is not None:
        return hub_event

    return _insert_or_refetch(
        db,
        HubEvent(hub_id=hub.id, event_id=event.id, is_primary=is_primary),
        lambda session: _find_hub_event(session, hub, event),
    )


def find_waitlist_hub_event(db: Session) -> HubEvent | None:
    event = _find_waitlist_event(db)
    hub = _find_global_hub(db)
    if event is None or hub is None:
        return None
    return _find_hub_event(db, hub, event)


def get_or_create_waitlist_hub_event(db: Session) -> HubEvent:
    event = get_or_create_waitlist_event(db)
    hub = get_or_create_global_hub(db)
    return get_or_create_hub_event(db, hub, event, is_primary=True)
