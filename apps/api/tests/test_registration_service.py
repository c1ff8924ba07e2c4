from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from app.models import Registration
from app.models.registration import RegistrationStatus
from app.models.user import UserRole
from app.services import registration_service
from app.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from app.services.registration_service import GuestContact
from tests.test_auth_identity import make_user
from tests.test_registration_api import seed_hub_event

GUEST = GuestContact(first_name=" Ana ", last_name="Lee", email=" Ana@X.io ")


def _register(db_session, hub_event_id, **kwargs):
    kwargs.setdefault("guest", GUEST)
    kwargs.setdefault("interest_areas", ["Product", " product ", "", "AI"])
    return registration_service.register(db_session, hub_event_id, **kwargs)


def test_register_normalizes_contact_and_interests(db_session):
    hub_event = seed_hub_event(db_session)
    registration = _register(db_session, hub_event.id, notes="  ")

    assert registration.email == "ana@x.io"
    assert registration.first_name == "Ana"
    assert registration.interest_areas == ["product", "ai"]
    assert registration.notes is None
    assert registration.status == RegistrationStatus.REGISTERED


def test_duplicate_registration_leaves_existing_row_untouched(db_session):
    hub_event = seed_hub_event(db_session)
    original = _register(db_session, hub_event.id, ai_interests="evals")

    with pytest.raises(ConflictError):
        _register(db_session, hub_event.id, ai_interests="something else")

    [row] = registration_service.list_registrations(db_session, hub_event.id)
    assert row.id == original.id
    assert row.ai_interests == "evals"


def test_user_without_last_name_can_register(db_session):
    hub_event = seed_hub_event(db_session)
    user = make_user(db_session, "solo@example.com", first_name="Solo")
    registration = _register(db_session, hub_event.id, user=user, guest=None)

    assert registration.user_id == user.id
    assert registration.last_name == ""


def test_guest_needs_every_contact_field(db_session):
    hub_event = seed_hub_event(db_session)
    with pytest.raises(ValidationError) as exc:
        _register(db_session, hub_event.id, guest=GuestContact(first_name="Ana", email="a@x.io"))
    assert exc.value.code == "CONTACT_REQUIRED"


def test_lookup_by_email_ignores_cancelled_rows(db_session):
    hub_event = seed_hub_event(db_session)
    registration = _register(db_session, hub_event.id)

    assert registration_service.get_registration_by_email(db_session, hub_event.id, "ANA@x.io")
    registration_service.update_registration_status(
        db_session, registration.id, RegistrationStatus.CANCELLED
    )
    assert registration_service.get_registration_by_email(db_session, hub_event.id, "ana@x.io") is None

    again = _register(db_session, hub_event.id)
    assert again.id != registration.id


def test_status_moves_forward_only(db_session):
    hub_event = seed_hub_event(db_session)
    registration = _register(db_session, hub_event.id)

    registration_service.update_registration_status(
        db_session, registration.id, RegistrationStatus.CONFIRMED
    )
    registration_service.update_registration_status(
        db_session, registration.id, RegistrationStatus.ATTENDED
    )

    with pytest.raises(ValidationError) as exc:
        registration_service.update_registration_status(
            db_session, registration.id, RegistrationStatus.REGISTERED
        )
    assert exc.value.code == "INVALID_STATUS_TRANSITION"

    registration_service.update_registration_status(
        db_session, registration.id, RegistrationStatus.CANCELLED
    )
    with pytest.raises(ValidationError):
        registration_service.update_registration_status(
            db_session, registration.id, RegistrationStatus.CONFIRMED
        )


def test_cancel_permissions(db_session):
    hub_event = seed_hub_event(db_session)
    registration = _register(db_session, hub_event.id)
    stranger = make_user(db_session, "stranger@example.com")
    admin = make_user(db_session, "admin@example.com", UserRole.ADMIN)

    with pytest.raises(PermissionDeniedError):
        registration_service.cancel_registration(db_session, stranger, registration.id)

    cancelled = registration_service.cancel_registration(db_session, admin, registration.id)
    assert cancelled.status == RegistrationStatus.CANCELLED


def test_delete_registration(db_session):
    hub_event = seed_hub_event(db_session)
    registration = _register(db_session, hub_event.id)

    registration_service.delete_registration(db_session, registration.id)
    assert registration_service.list_registrations(db_session, hub_event.id) == []

    with pytest.raises(NotFoundError):
        registration_service.delete_registration(db_session, registration.id)


def test_build_notice_snapshots_event_and_hub(db_session):
    hub_event = seed_hub_event(db_session)
    registration = _register(db_session, hub_event.id)

    notice = registration_service.build_notice(db_session, registration)
    assert notice.event_title == "Build Night"
    assert notice.hub_name == "Nairobi Hub"
    assert notice.contact.email == "ana@x.io"
    assert notice.registration_id == str(registration.id)


def _row(hub_event_id, email="ana@x.io", status=RegistrationStatus.REGISTERED) -> Registration:
    return Registration(
        hub_event_id=hub_event_id,
        first_name="Ana",
        last_name="Lee",
        email=email,
        interest_areas=["product"],
        status=status,
    )


def test_storage_rejects_second_live_row_for_same_email(db_session):
    hub_event = seed_hub_event(db_session)
    db_session.add(_row(hub_event.id))
    db_session.commit()

    db_session.add(_row(hub_event.id, status=RegistrationStatus.CONFIRMED))
    with pytest.raises(IntegrityError):
        db_session.commit()
    db_session.rollback()

    assert len(registration_service.list_registrations(db_session, hub_event.id)) == 1


def test_storage_allows_live_row_next_to_cancelled_ones(db_session):
    hub_event = seed_hub_event(db_session)
    db_session.add_all(
        [
            _row(hub_event.id, status=RegistrationStatus.CANCELLED),
            _row(hub_event.id, status=RegistrationStatus.CANCELLED),
        ]
    )
    db_session.commit()

    db_session.add(_row(hub_event.id))
    db_session.commit()

    rows = registration_service.list_registrations(db_session, hub_event.id)
    statuses = sorted(r.status.value for r in rows)
    assert statuses == ["cancelled", "cancelled", "registered"]


def test_concurrent_duplicate_is_reported_as_conflict(db_session, monkeypatch):
    hub_event = seed_hub_event(db_session)
    _register(db_session, hub_event.id)

    # a concurrent request passed the lookup before the first row was committed
    monkeypatch.setattr(registration_service, "get_registration_by_email", lambda *args: None)

    with pytest.raises(ConflictError) as exc:
        _register(db_session, hub_event.id)
    assert exc.value.code == "REGISTRATION_EXISTS"

    db_session.expire_all()
    assert len(registration_service.list_registrations(db_session, hub_event.id)) == 1
