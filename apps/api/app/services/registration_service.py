from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.models import Event, Hub, HubEvent, Registration, User
from app.models.registration import RegistrationStatus
from app.models.user import UserRole
from app.notifications.base import Contact, RegistrationNotice
from app.services.bootstrap import get_or_create_waitlist_hub_event
from app.services.error_codes import ErrorCode
from app.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

_TRANSITIONS: dict[RegistrationStatus, frozenset[RegistrationStatus]] = {
    RegistrationStatus.REGISTERED: frozenset(
        {RegistrationStatus.CONFIRMED, RegistrationStatus.ATTENDED, RegistrationStatus.CANCELLED}
    ),
    RegistrationStatus.CONFIRMED: frozenset(
        {RegistrationStatus.ATTENDED, RegistrationStatus.CANCELLED}
    ),
    RegistrationStatus.ATTENDED: frozenset({RegistrationStatus.CANCELLED}),
    RegistrationStatus.CANCELLED: frozenset(),
}


@dataclass(frozen=True)
class GuestContact:
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None


@dataclass(frozen=True)
class UserRegistration:
    registration: Registration
    hub_event: HubEvent
    event: Event
    hub: Hub


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _normalize_items(values: list[str]) -> list[str]:
    normalized: list[str] = []
    seen: set[str] = set()
    for value in values:
        item = value.strip().lower()
        if not item or item in seen:
            continue
        seen.add(item)
        normalized.append(item)
    return normalized


def _resolve_contact(user: User | None, guest: GuestContact | None) -> tuple[str, str, str]:
    guest = guest or GuestContact()
    if user is not None:
        email = user.email or guest.email
        first_name = _clean(user.first_name) or _clean(guest.first_name) or user.username
        last_name = _clean(user.last_name) or _clean(guest.last_name) or ""
    else:
        email = guest.email
        first_name = _clean(guest.first_name)
        last_name = _clean(guest.last_name)

    email = _clean(email)
    if not email or not first_name or last_name is None:
        raise ValidationError(
            ErrorCode.CONTACT_REQUIRED.value,
            "firstName, lastName and email are required for guest registration",
        )
    return first_name, last_name, normalize_email(email)


def get_registration_by_email(db: Session, hub_event_id: Any, email: str) -> Registration | None:
    """The live (non-cancelled) registration for this hub-event and email, if any."""
    return db.scalar(
        select(Registration).where(
            Registration.hub_event_id == hub_event_id,
            Registration.email == normalize_email(email),
            Registration.status != RegistrationStatus.CANCELLED,
        )
    )


def list_registrations(db: Session, hub_event_id: Any) -> list[Registration]:
    return list(
        db.scalars(
            select(Registration)
            .where(Registration.hub_event_id == hub_event_id)
            .order_by(Registration.created_at)
        ).all()
    )


def list_user_registrations(db: Session, user: User) -> list[UserRegistration]:
    rows = db.execute(
        select(Registration, HubEvent, Event, Hub)
        .join(HubEvent, Registration.hub_event_id == HubEvent.id)
        .join(Event, HubEvent.event_id == Event.id)
        .join(Hub, HubEvent.hub_id == Hub.id)
        .where(Registration.user_id == user.id)
        .order_by(Registration.created_at.desc())
    ).all()
    return [
        UserRegistration(registration=r, hub_event=he, event=ev, hub=hub)
        for r, he, ev, hub in rows
    ]


def register(
    db: Session,
    hub_event_id: Any,
    *,
    user: User | None = None,
    guest: GuestContact | None = None,
    interest_areas: list[str],
    ai_interests: str | None = None,
    notes: str | None = None,
) -> Registration:
    hub_event = db.get(HubEvent, hub_event_id)
    if hub_event is None:
        raise NotFoundError(ErrorCode.HUB_EVENT_NOT_FOUND.value, "hub event not found")

    first_name, last_name, email = _resolve_contact(user, guest)

    if get_registration_by_email(db, hub_event.id, email) is not None:
        raise ConflictError(
            ErrorCode.REGISTRATION_EXISTS.value,
            "this email is already registered for this event",
        )

    registration = Registration(
        hub_event_id=hub_event.id,
        user_id=user.id if user is not None else None,
        first_name=first_name,
        last_name=last_name,
        email=email,
        interest_areas=_normalize_items(interest_areas),
        ai_interests=_clean(ai_interests),
        notes=_clean(notes),
        status=RegistrationStatus.REGISTERED,
    )
    db.add(registration)

    try:
        db.commit()
    except IntegrityError as exc:
        # concurrent duplicate tripped uq_registrations_hub_event_email_live
        db.rollback()
        raise ConflictError(
            ErrorCode.REGISTRATION_EXISTS.value,
            "this email is already registered for this event",
        ) from exc

    db.refresh(registration)
    logger.info(
        "registration_created",
        registration_id=str(registration.id),
        hub_event_id=str(hub_event.id),
        guest=user is None,
    )
    return registration


def register_legacy_waitlist(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    interest_areas: list[str],
    ai_interests: str | None = None,
) -> Registration:
    hub_event = get_or_create_waitlist_hub_event(db)
    return register(
        db,
        hub_event.id,
        guest=GuestContact(first_name=first_name, last_name=last_name, email=email),
        interest_areas=interest_areas,
        ai_interests=ai_interests,
    )


def _get_registration(db: Session, registration_id: Any) -> Registration:
    registration = db.get(Registration, registration_id)
    if registration is None:
        raise NotFoundError(ErrorCode.REGISTRATION_NOT_FOUND.value, "registration not found")
    return registration


def update_registration_status(
    db: Session, registration_id: Any, status: RegistrationStatus
) -> Registration:
    registration = _get_registration(db, registration_id)
    if registration.status == status:
        return registration

    if status not in _TRANSITIONS[registration.status]:
        raise ValidationError(
            ErrorCode.INVALID_STATUS_TRANSITION.value,
            f"cannot move registration from {registration.status.value} to {status.value}",
        )

    registration.status = status
    db.add(registration)
    db.commit()
    db.refresh(registration)
    logger.info(
        "registration_status_changed",
        registration_id=str(registration.id),
        status=status.value,
    )
    return registration


def _can_manage(actor: User, registration: Registration) -> bool:
    if actor.role in {UserRole.ADMIN, UserRole.AMBASSADOR}:
        return True
    if registration.user_id is not None and registration.user_id == actor.id:
        return True
    return bool(actor.email) and normalize_email(actor.email) == registration.email


def cancel_registration(db: Session, actor: User, registration_id: Any) -> Registration:
    registration = _get_registration(db, registration_id)
    if not _can_manage(actor, registration):
        raise PermissionDeniedError(ErrorCode.FORBIDDEN.value, "not allowed to cancel this registration")
    if registration.status == RegistrationStatus.CANCELLED:
        raise ValidationError(
            ErrorCode.INVALID_STATUS_TRANSITION.value, "registration is already cancelled"
        )
    return update_registration_status(db, registration.id, RegistrationStatus.CANCELLED)


def delete_registration(db: Session, registration_id: Any) -> None:
    registration = _get_registration(db, registration_id)
    db.delete(registration)
    db.commit()
    logger.info("registration_deleted", registration_id=str(registration_id))


def build_notice(db: Session, registration: Registration) -> RegistrationNotice | None:
    row = db.execute(
        select(Event, Hub)
        .join(HubEvent, HubEvent.event_id == Event.id)
        .join(Hub, HubEvent.hub_id == Hub.id)
        .where(HubEvent.id == registration.hub_event_id)
    ).first()
    if row is None:
        logger.warning("notice_context_missing", registration_id=str(registration.id))
        return None

    event, hub = row
    return RegistrationNotice(
        registration_id=str(registration.id),
        contact=Contact(
            email=registration.email,
            first_name=registration.first_name,
            last_name=registration.last_name,
            interest_areas=list(registration.interest_areas or []),
        ),
        event_title=event.title,
        event_description=event.description,
        start_datetime=event.start_datetime,
        end_datetime=event.end_datetime,
        hub_name=hub.name,
        hub_address=hub.address,
        hub_city=hub.city,
        hub_state=hub.state,
        hub_country=hub.country,
    )

