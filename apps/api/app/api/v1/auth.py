from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Request, Response
from starlette.requests import HTTPConnection

from app.api.errors import http_error_from_service
from app.api.v1.schemas.users import AuthOut, LoginIn, RegisterIn, UserOut
from app.auth.deps import DBSession
from app.auth.identity import end_session, start_session
from app.auth.jwt import create_access_token
from app.core.config import settings
from app.models import User
from app.notifications import Notifier, dispatch, get_notifier
from app.services import users_service
from app.services.exceptions import ServiceError

router = APIRouter(prefix="/auth", tags=["auth"])

NotifierDep = Annotated[Notifier, Depends(get_notifier)]


def sign_in(conn: HTTPConnection, response: Response, user: User) -> str:
    """Bind ``user`` to the session and issue a fresh token cookie."""
    start_session(conn, user)
    token = create_access_token(user)
    response.set_cookie(
        key=settings.token_cookie_name,
        value=token,
        httponly=True,
        secure=settings.token_cookie_secure,
        samesite=settings.token_cookie_samesite,
        max_age=settings.access_token_ttl_seconds,
        path="/",
    )
    return token


def _auth_out(user: User, token: str) -> AuthOut:
    return AuthOut(
        user=UserOut.model_validate(user),
        token=token,
        expires_in=settings.access_token_ttl_seconds,
    )


@router.post("/register", response_model=AuthOut, status_code=201)
def register(
    payload: RegisterIn,
    request: Request,
    response: Response,
    db: DBSession,
    background_tasks: BackgroundTasks,
    notifier: NotifierDep,
):
    try:
        user = users_service.register_local_user(db, payload)
    except ServiceError as err:
        raise http_error_from_service(err) from None

    token = sign_in(request, response, user)

    contact = users_service.contact_for(user)
    if contact is not None:
        dispatch.schedule(background_tasks, notifier, "notify_new_member", contact)

    return _auth_out(user, token)


@router.post("/login", response_model=AuthOut)
def login(payload: LoginIn, request: Request, response: Response, db: DBSession):
    try:
        user = users_service.authenticate(db, payload.email, payload.password)
    except ServiceError as err:
        raise http_error_from_service(err) from None

    token = sign_in(request, response, user)
    return _auth_out(user, token)


@router.post("/logout")
def logout(request: Request, response: Response):
    end_session(request)
    response.delete_cookie(key=settings.token_cookie_name, path="/")
    return {"status": "ok"}
