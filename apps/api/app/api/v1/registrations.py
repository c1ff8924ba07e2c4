from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, HTTPException
from sqlalchemy.orm import Session

from app.api.errors import http_error_from_service
from app.api.v1.auth import NotifierDep
from app.api.v1.schemas.events import EventOut, HubEventOut
from app.api.v1.schemas.hubs import HubOut
from app.api.v1.schemas.registrations import (
    EventRegistrationIn,
    RegistrationOut,
    UserRegistrationOut,
    WaitlistIn,
    WaitlistOut,
)
from app.auth.deps import CurrentIdentity, CurrentUser, DBSession, StaffUser
from app.auth.identity import Authenticated
from app.models import Registration
from app.notifications import Notifier, dispatch
from app.services import bootstrap, registration_service
from app.services.error_codes import ErrorCode
from app.services.exceptions import ConflictError, ServiceError

router = APIRouter(tags=["registrations"])

WAITLIST_JOINED = "Successfully joined the waitlist!"
WAITLIST_DUPLICATE = "This email is already on our waitlist."


def _schedule_confirmation(
    db: Session,
    registration: Registration,
    background_tasks: BackgroundTasks,
    notifier: Notifier,
) -> None:
    notice = registration_service.build_notice(db, registration)
    if notice is not None:
        dispatch.schedule(background_tasks, notifier, "notify_registration", notice)


@router.post("/waitlist", response_model=WaitlistOut, status_code=201)
def join_waitlist(
    payload: WaitlistIn,
    db: DBSession,
    background_tasks: BackgroundTasks,
    notifier: NotifierDep,
):
    try:
        registration = registration_service.register_legacy_waitlist(
            db,
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            interest_areas=payload.interest_areas,
            ai_interests=payload.ai_interests,
        )
    except ServiceError as err:
        if isinstance(err, ConflictError):
            err = ConflictError(err.code, WAITLIST_DUPLICATE)
        raise http_error_from_service(err) from None

    _schedule_confirmation(db, registration, background_tasks, notifier)
    return WaitlistOut(message=WAITLIST_JOINED, entry=RegistrationOut.model_validate(registration))


@router.get("/waitlist", response_model=list[RegistrationOut])
def list_waitlist(db: DBSession, staff: StaffUser):
    hub_event = bootstrap.find_waitlist_hub_event(db)
    if hub_event is None:
        return []
    return registration_service.list_registrations(db, hub_event.id)


@router.post("/events/register", response_model=RegistrationOut, status_code=201)
def register_for_event(
    payload: EventRegistrationIn,
    identity: CurrentIdentity,
    db: DBSession,
    background_tasks: BackgroundTasks,
    notifier: NotifierDep,
):
    user = identity.user if isinstance(identity, Authenticated) else None
    guest = registration_service.GuestContact(
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email,
    )

    try:
        registration = registration_service.register(
            db,
            payload.hub_event_id,
            user=user,
            guest=guest,
            interest_areas=payload.interest_areas,
            ai_interests=payload.ai_interests,
            notes=payload.notes,
        )
    except ServiceError as err:
        raise http_error_from_service(err) from None

    _schedule_confirmation(db, registration, background_tasks, notifier)
    return registration


@router.get("/registrations/me", response_model=list[UserRegistrationOut])
def my_registrations(user: CurrentUser, db: DBSession):
    return [
        UserRegistrationOut(
            registration=RegistrationOut.model_validate(item.registration),
            hub_event=HubEventOut.model_validate(item.hub_event),
            event=EventOut.model_validate(item.event),
            hub=HubOut.model_validate(item.hub),
        )
        for item in registration_service.list_user_registrations(db, user)
    ]


@router.get("/hub-events/{hub_event_id}/registration", response_model=RegistrationOut)
def my_hub_event_registration(hub_event_id: UUID, user: CurrentUser, db: DBSession):
    registration = None
    if user.email:
        registration = registration_service.get_registration_by_email(db, hub_event_id, user.email)
    if registration is None:
        raise HTTPException(
            status_code=404,
            detail={
                "code": ErrorCode.REGISTRATION_NOT_FOUND.value,
                "message": "no registration for this event",
            },
        )
    return registration


@router.post("/registrations/{registration_id}/cancel", response_model=RegistrationOut)
def cancel_registration(
    registration_id: UUID,
    user: CurrentUser,
    db: DBSession,
    background_tasks: BackgroundTasks,
    notifier: NotifierDep,
):
    try:
        registration = registration_service.cancel_registration(db, user, registration_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None

    notice = registration_service.build_notice(db, registration)
    if notice is not None:
        dispatch.schedule(background_tasks, notifier, "notify_cancellation", notice)
    return registration
