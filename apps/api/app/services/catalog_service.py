from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.schemas.common import assume_utc
from app.api.v1.schemas.events import EventCreate, EventUpdate, HubEventCreate
from app.api.v1.schemas.hubs import HubCreate
from app.models import Event, Hub, HubEvent, User
from app.services.error_codes import ErrorCode
from app.services.exceptions import ConflictError, NotFoundError, ValidationError

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HostedEvent:
    event: Event
    hub_events: list[tuple[HubEvent, Hub]]


def _get_event(db: Session, event_id: Any) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")
    return event


def _get_hub(db: Session, hub_id: Any) -> Hub:
    hub = db.get(Hub, hub_id)
    if hub is None:
        raise NotFoundError(ErrorCode.HUB_NOT_FOUND.value, "hub not found")
    return hub


def _hub_events_for(db: Session, event_ids: list[Any]) -> dict[Any, list[tuple[HubEvent, Hub]]]:
    grouped: dict[Any, list[tuple[HubEvent, Hub]]] = {event_id: [] for event_id in event_ids}
    if not event_ids:
        return grouped
    rows = db.execute(
        select(HubEvent, Hub)
        .join(Hub, HubEvent.hub_id == Hub.id)
        .where(HubEvent.event_id.in_(event_ids))
        .order_by(HubEvent.is_primary.desc(), Hub.name)
    ).all()
    for hub_event, hub in rows:
        grouped[hub_event.event_id].append((hub_event, hub))
    return grouped


# --- hubs ---


def create_hub(db: Session, payload: HubCreate) -> Hub:
    hub = Hub(**payload.model_dump())
    db.add(hub)
    db.commit()
    db.refresh(hub)
    logger.info("hub_created", hub_id=str(hub.id))
    return hub


def list_hubs(db: Session) -> list[Hub]:
    return list(db.scalars(select(Hub).order_by(Hub.name)).all())


def get_hub(db: Session, hub_id: Any) -> Hub:
    return _get_hub(db, hub_id)


# --- events ---


def create_event(db: Session, creator: User, payload: EventCreate) -> Event:
    hubs = [_get_hub(db, hub_id) for hub_id in dict.fromkeys(payload.hub_ids)]

    data = payload.model_dump(exclude={"hub_ids"})
    data["focus_areas"] = [area.value for area in payload.focus_areas]
    event = Event(**data, created_by_id=creator.id)
    db.add(event)

    try:
        db.flush()
        for index, hub in enumerate(hubs):
            db.add(HubEvent(hub_id=hub.id, event_id=event.id, is_primary=index == 0))
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.HUB_EVENT_EXISTS.value, "event is already linked to this hub") from exc

    db.refresh(event)
    logger.info("event_created", event_id=str(event.id), hubs=len(hubs))
    return event


def update_event(db: Session, event_id: Any, patch: EventUpdate) -> Event:
    event = _get_event(db, event_id)

    patch_data = patch.model_dump(exclude_unset=True)
    if "focus_areas" in patch_data and patch_data["focus_areas"] is not None:
        patch_data["focus_areas"] = [area.value for area in patch.focus_areas or []]

    for required in ("title", "start_datetime", "event_type", "is_published", "focus_areas"):
        if required in patch_data and patch_data[required] is None:
            raise ValidationError(ErrorCode.VALIDATION_ERROR.value, f"{required} cannot be null")

    new_start = patch_data.get("start_datetime", event.start_datetime)
    new_end = patch_data.get("end_datetime", event.end_datetime)
    if new_start and new_end and assume_utc(new_end) <= assume_utc(new_start):
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "endDateTime must be after startDateTime")

    for key, value in patch_data.items():
        setattr(event, key, value)

    db.add(event)
    db.commit()
    db.refresh(event)
    return event


def get_event(db: Session, event_id: Any, *, published_only: bool = False) -> HostedEvent:
    event = _get_event(db, event_id)
    if published_only and not event.is_published:
        raise NotFoundError(ErrorCode.EVENT_NOT_FOUND.value, "event not found")
    return HostedEvent(event=event, hub_events=_hub_events_for(db, [event.id])[event.id])


def list_events(
    db: Session,
    *,
    published_only: bool = True,
    hub_id: Any | None = None,
) -> list[HostedEvent]:
    stmt = select(Event).order_by(Event.start_datetime)
    if published_only:
        stmt = stmt.where(Event.is_published.is_(True))
    if hub_id is not None:
        stmt = stmt.where(
            Event.id.in_(select(HubEvent.event_id).where(HubEvent.hub_id == hub_id))
        )

    events = list(db.scalars(stmt).all())
    grouped = _hub_events_for(db, [e.id for e in events])
    return [HostedEvent(event=e, hub_events=grouped[e.id]) for e in events]


# --- hub events ---


def link_hub_event(db: Session, payload: HubEventCreate) -> HubEvent:
    hub = _get_hub(db, payload.hub_id)
    event = _get_event(db, payload.event_id)

    hub_event = HubEvent(
        hub_id=hub.id,
        event_id=event.id,
        is_primary=payload.is_primary,
        capacity=payload.capacity,
    )
    db.add(hub_event)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(ErrorCode.HUB_EVENT_EXISTS.value, "event is already linked to this hub") from exc

    db.refresh(hub_event)
    return hub_event


def get_hub_event(db: Session, hub_event_id: Any) -> HubEvent:
    hub_event = db.get(HubEvent, hub_event_id)
    if hub_event is None:
        raise NotFoundError(ErrorCode.HUB_EVENT_NOT_FOUND.value, "hub event not found")
    return hub_event
