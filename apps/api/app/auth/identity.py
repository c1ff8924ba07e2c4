from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import ClassVar, Literal, Union

import structlog
from sqlalchemy.orm import Session
from starlette.requests import HTTPConnection

from app.auth.jwt import extract_token, verify_access_token
from app.models import User

logger = structlog.get_logger(__name__)

SESSION_USER_KEY = "user_id"


@dataclass(frozen=True)
class Authenticated:
    user: User
    source: Literal["session", "token"]

    is_authenticated: ClassVar[bool] = True


@dataclass(frozen=True)
class Anonymous:
    is_authenticated: ClassVar[bool] = False


Identity = Union[Authenticated, Anonymous]

ANONYMOUS = Anonymous()


def _session(conn: HTTPConnection) -> dict | None:
    # SessionMiddleware populates scope["session"]; absent when not installed
    if "session" not in conn.scope:
        return None
    return conn.session


def _user_from_session(conn: HTTPConnection, db: Session) -> User | None:
    session = _session(conn)
    if not session:
        return None

    raw_id = session.get(SESSION_USER_KEY)
    if not raw_id:
        return None

    try:
        user_id = uuid.UUID(str(raw_id))
    except ValueError:
        return None

    return db.get(User, user_id)


def _user_from_token(conn: HTTPConnection, db: Session) -> User | None:
    token = extract_token(conn)
    if not token:
        return None

    try:
        claims = verify_access_token(token)
    except ValueError:
        logger.info("token_rejected", path=conn.url.path)
        return None

    return db.get(User, claims.user_id)


def resolve_identity(conn: HTTPConnection, db: Session) -> Identity:
    user = _user_from_session(conn, db)
    if user is not None:
        return Authenticated(user=user, source="session")

    user = _user_from_token(conn, db)
    if user is not None:
        return Authenticated(user=user, source="token")

    return ANONYMOUS


def start_session(conn: HTTPConnection, user: User) -> None:
    session = _session(conn)
    if session is None:
        return
    session.clear()
    session[SESSION_USER_KEY] = str(user.id)


def end_session(conn: HTTPConnection) -> None:
    session = _session(conn)
    if session is not None:
        session.clear()
