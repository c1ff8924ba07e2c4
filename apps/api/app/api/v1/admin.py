from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response

from app.api.errors import http_error_from_service
from app.api.v1.schemas.registrations import RegistrationOut, RegistrationStatusIn
from app.api.v1.schemas.users import GuestUserIn, UpdateUserIn, UserOut
from app.auth.deps import AdminUser, DBSession, require_staff
from app.models.user import UserRole
from app.services import catalog_service, registration_service, users_service
from app.services.exceptions import ServiceError

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_staff)],
)


@router.get("/registrations", response_model=list[RegistrationOut])
def list_registrations(db: DBSession, hub_event_id: UUID = Query(alias="hubEventId")):
    try:
        hub_event = catalog_service.get_hub_event(db, hub_event_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return registration_service.list_registrations(db, hub_event.id)


@router.patch("/registrations/{registration_id}/status", response_model=RegistrationOut)
def update_registration_status(registration_id: UUID, payload: RegistrationStatusIn, db: DBSession):
    try:
        return registration_service.update_registration_status(db, registration_id, payload.status)
    except ServiceError as err:
        raise http_error_from_service(err) from None


@router.delete("/registrations/{registration_id}", status_code=204)
def delete_registration(registration_id: UUID, db: DBSession, admin: AdminUser):
    try:
        registration_service.delete_registration(db, registration_id)
    except ServiceError as err:
        raise http_error_from_service(err) from None
    return Response(status_code=204)


@router.get("/users", response_model=list[UserOut])
def list_users(
    db: DBSession,
    admin: AdminUser,
    role: UserRole | None = None,
    limit: int = Query(default=50, ge=1, le=200),
):
    return users_service.list_users(db, role=role, limit=limit)


@router.post("/users/guests", response_model=UserOut, status_code=201)
def create_guest_user(payload: GuestUserIn, db: DBSession):
    try:
        return users_service.create_guest_user(db, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from None


@router.patch("/users/{user_id}", response_model=UserOut)
def update_user(user_id: UUID, payload: UpdateUserIn, db: DBSession, admin: AdminUser):
    try:
        return users_service.set_user_role(db, admin, user_id, payload.role)
    except ServiceError as err:
        raise http_error_from_service(err) from None
