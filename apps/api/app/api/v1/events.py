from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Query

from app.api.errors import http_error_from_service
from app.api.v1.schemas.events import (
    EventCreate,
    EventDetailOut,
    EventListOut,
    EventOut,
    EventUpdate,
    HubEventCreate,
    HubEventOut,
    HubEventWithHubOut,
)
from app.api.v1.schemas.hubs import HubCreate, HubOut
from app.auth.deps import AdminUser, DBSession
from app.services import catalog_service
from app.services.catalog_service import HostedEvent
from app.services.exceptions import ServiceError

router = APIRouter(tags=["events"])


def _event_detail(hosted: HostedEvent) -> EventDetailOut:
    base = EventOut.model_validate(hosted.event).model_dump()
    return EventDetailOut(
        **base,
        hub_events=[
            HubEventWithHubOut(
                **HubEventOut.model_validate(hub_event).model_dump(),
                hub=HubOut.model_validate(hub),
            )
            for hub_event, hub in hosted.hub_events
        ],
    )


@router.get("/events", response_model=EventListOut)
def list_events(db: DBSession, hub_id: UUID | None = Query(default=None, alias="hubId")):
    items = [_event_detail(h) for h in catalog_service.list_events(db, hub_id=hub_id)]
    return EventListOut(items=items, total=len(items))


@router.get("/events/{event_id}", response_model=EventDetailOut)
def get_event(event_id: UUID, db: DBSession):
    try:
        hosted = catalog_service.get_event(db, event_id, published_only=True)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return _event_detail(hosted)


@router.post("/events", response_model=EventDetailOut, status_code=201)
def create_event(payload: EventCreate, db: DBSession, admin: AdminUser):
    try:
        event = catalog_service.create_event(db, admin, payload)
        hosted = catalog_service.get_event(db, event.id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return _event_detail(hosted)


@router.patch("/events/{event_id}", response_model=EventDetailOut)
def update_event(event_id: UUID, payload: EventUpdate, db: DBSession, admin: AdminUser):
    try:
        event = catalog_service.update_event(db, event_id, payload)
        hosted = catalog_service.get_event(db, event.id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return _event_detail(hosted)


@router.get("/hubs", response_model=list[HubOut])
def list_hubs(db: DBSession):
    return catalog_service.list_hubs(db)


@router.get("/hubs/{hub_id}", response_model=HubOut)
def get_hub(hub_id: UUID, db: DBSession):
    try:
        return catalog_service.get_hub(db, hub_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None


@router.post("/hubs", response_model=HubOut, status_code=201)
def create_hub(payload: HubCreate, db: DBSession, admin: AdminUser):
    return catalog_service.create_hub(db, payload)


@router.post("/hub-events", response_model=HubEventOut, status_code=201)
def create_hub_event(payload: HubEventCreate, db: DBSession, admin: AdminUser):
    try:
        return catalog_service.link_hub_event(db, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from None
