from __future__ import annotations

import secrets
from typing import Annotated

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse

from app.api.errors import http_error_from_service
from app.api.v1.auth import NotifierDep, sign_in
from app.auth.deps import DBSession
from app.auth.google import GoogleOAuthClient, GoogleOAuthError, get_google_client
from app.core.config import settings
from app.notifications import dispatch
from app.services import users_service
from app.services.error_codes import ErrorCode
from app.services.exceptions import ServiceError

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/auth/google", tags=["auth"])

OAUTH_STATE_KEY = "oauth_state"

GoogleClient = Annotated[GoogleOAuthClient | None, Depends(get_google_client)]


def _require_client(client: GoogleOAuthClient | None) -> GoogleOAuthClient:
    if client is None:
        raise HTTPException(
            status_code=503,
            detail={
                "code": ErrorCode.OAUTH_UNAVAILABLE.value,
                "message": "google login is not configured",
            },
        )
    return client


@router.get("")
def google_login(request: Request, client: GoogleClient):
    client = _require_client(client)
    state = secrets.token_urlsafe(24)
    request.session[OAUTH_STATE_KEY] = state
    return RedirectResponse(client.authorization_url(state), status_code=302)


@router.get("/callback")
def google_callback(
    request: Request,
    db: DBSession,
    client: GoogleClient,
    background_tasks: BackgroundTasks,
    notifier: NotifierDep,
    code: str | None = None,
    state: str | None = None,
    error: str | None = None,
):
    client = _require_client(client)
    failure = RedirectResponse(settings.oauth_failure_redirect, status_code=302)

    expected_state = request.session.pop(OAUTH_STATE_KEY, None)
    if error or not code:
        logger.info("oauth_denied", error=error)
        return failure
    if not expected_state or not state or not secrets.compare_digest(expected_state, state):
        logger.warning("oauth_state_mismatch")
        return failure

    try:
        profile = client.fetch_profile(code)
    except GoogleOAuthError:
        logger.exception("oauth_exchange_failed")
        return failure

    try:
        user, created = users_service.resolve_google_user(db, profile)
    except ServiceError as err:
        raise http_error_from_service(err) from None

    response = RedirectResponse(settings.oauth_success_redirect, status_code=302)
    sign_in(request, response, user)

    if created:
        contact = users_service.contact_for(user)
        if contact is not None:
            dispatch.schedule(background_tasks, notifier, "notify_new_member", contact)

    logger.info("oauth_login", user_id=str(user.id), created=created)
    return response
