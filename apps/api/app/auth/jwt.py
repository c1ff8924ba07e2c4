from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt
from jwt import PyJWTError
from starlette.requests import HTTPConnection

from app.core.config import settings
from app.models import User


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    username: str
    email: str | None
    role: str
    expires_at: datetime


def _now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user: User, ttl_seconds: int | None = None) -> str:
    now = _now()
    exp = now + timedelta(seconds=ttl_seconds or settings.access_token_ttl_seconds)
    payload = {
        "sub": str(user.id),
        "username": user.username,
        "role": user.role.value,
        "iat": int(now.timestamp()),
        "exp": int(exp.timestamp()),
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_audience,
        # unique per issuance so a new login never reuses an old token
        "jti": uuid.uuid4().hex,
    }
    if user.email:
        payload["email"] = user.email
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            issuer=settings.jwt_issuer,
            audience=settings.jwt_audience,
            options={"require": ["sub", "exp", "iat"]},
        )
    except PyJWTError as exc:
        raise ValueError("invalid access token") from exc

    try:
        user_id = uuid.UUID(str(payload["sub"]))
    except ValueError as exc:
        raise ValueError("invalid subject in access token") from exc

    return TokenClaims(
        user_id=user_id,
        username=str(payload.get("username", "")),
        email=payload.get("email"),
        role=str(payload.get("role", "")),
        expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
    )


def extract_token(conn: HTTPConnection) -> str | None:
    """Bearer header first (API clients), then the token cookie (browsers)."""
    auth = conn.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        token = auth.removeprefix("Bearer ").strip()
        if token:
            return token

    return conn.cookies.get(settings.token_cookie_name) or None
