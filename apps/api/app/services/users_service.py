from __future__ import annotations

import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.v1.schemas.users import GuestUserIn, RegisterIn
from app.auth.password import hash_password, password_needs_rehash, verify_password
from app.models import User
from app.models.user import UserRole
from app.notifications.base import Contact
from app.services.error_codes import ErrorCode
from app.services.exceptions import (
    ConflictError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = structlog.get_logger(__name__)

USERNAME_SANITIZE_RE = re.compile(r"[^a-z0-9._-]+")


@dataclass(frozen=True)
class GoogleProfile:
    sub: str
    email: str | None
    given_name: str | None = None
    family_name: str | None = None
    picture: str | None = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


def contact_for(user: User) -> Contact | None:
    if not user.email:
        return None
    return Contact(
        email=user.email,
        first_name=user.first_name or user.username,
        last_name=user.last_name or "",
        interest_areas=list(user.interests or []),
    )


def _username_taken(db: Session, username: str) -> bool:
    return db.scalar(select(User.id).where(User.username == username)) is not None


def generate_username(db: Session, base: str) -> str:
    candidate = USERNAME_SANITIZE_RE.sub("-", base.strip().lower()).strip("-._") or "member"
    candidate = candidate[:140]
    if not _username_taken(db, candidate):
        return candidate
    while True:
        suffixed = f"{candidate}-{secrets.token_hex(3)}"
        if not _username_taken(db, suffixed):
            return suffixed


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email.strip().lower()))


def register_local_user(db: Session, payload: RegisterIn) -> User:
    email = payload.email.strip().lower()
    existing = get_user_by_email(db, email)
    if existing is not None and not existing.is_guest:
        raise ConflictError(ErrorCode.USER_EXISTS.value, "email already registered")

    if payload.username and _username_taken(db, payload.username):
        raise ConflictError(ErrorCode.USER_EXISTS.value, "username already taken")

    if existing is not None:
        # guest accounts are claimed by the first real signup for that email
        user = existing
        user.is_guest = False
        user.password_hash = hash_password(payload.password)
        user.first_name = payload.first_name or user.first_name
        user.last_name = payload.last_name or user.last_name
        if payload.username:
            user.username = payload.username
    else:
        user = User(
            username=payload.username or generate_username(db, email.split("@", 1)[0]),
            email=email,
            password_hash=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=UserRole.MEMBER,
        )
    user.last_login_at = _now()
    db.add(user)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ErrorCode.USER_EXISTS.value, "email already registered") from None

    db.refresh(user)
    logger.info("user_registered", user_id=str(user.id))
    return user


def create_guest_user(db: Session, payload: GuestUserIn) -> User:
    """Placeholder account for someone staff signed up by hand.

    It has no password and cannot log in; the first local signup or Google
    login with the same email takes it over.
    """
    email = payload.email.strip().lower()
    if get_user_by_email(db, email) is not None:
        raise ConflictError(ErrorCode.USER_EXISTS.value, "email already registered")

    user = User(
        username=generate_username(db, email.split("@", 1)[0]),
        email=email,
        first_name=payload.first_name.strip(),
        last_name=(payload.last_name or "").strip() or None,
        role=UserRole.MEMBER,
        is_guest=True,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ErrorCode.USER_EXISTS.value, "email already registered") from None

    db.refresh(user)
    logger.info("guest_user_created", user_id=str(user.id))
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    hashed = user.password_hash if user is not None else None
    if not verify_password(password, hashed) or user is None:
        raise UnauthorizedError(ErrorCode.INVALID_CREDENTIALS.value, "invalid email or password")

    if password_needs_rehash(user.password_hash):
        user.password_hash = hash_password(password)
    user.last_login_at = _now()
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def resolve_google_user(db: Session, profile: GoogleProfile) -> tuple[User, bool]:
    """Find or create the account behind a Google login.

    Lookup order: google id, then email (guest accounts are converted,
    regular accounts are linked), else a new member is created.
    Returns ``(user, created)``.
    """
    user = db.scalar(select(User).where(User.google_id == profile.sub))
    if user is not None:
        user.last_login_at = _now()
        db.commit()
        db.refresh(user)
        return user, False

    email = profile.email.strip().lower() if profile.email else None
    existing = get_user_by_email(db, email) if email else None
    created = False

    if existing is not None and existing.is_guest:
        logger.info("guest_converted", user_id=str(existing.id))
        user = existing
        user.google_id = profile.sub
        user.first_name = profile.given_name or user.first_name
        user.last_name = profile.family_name or user.last_name
        user.profile_picture = profile.picture or user.profile_picture
        user.is_guest = False
        user.role = UserRole.MEMBER
    elif existing is not None:
        logger.info("google_account_linked", user_id=str(existing.id))
        user = existing
        user.google_id = profile.sub
        user.profile_picture = profile.picture or user.profile_picture
    else:
        local_part = email.split("@", 1)[0] if email else "member"
        user = User(
            username=generate_username(db, f"{local_part}-{profile.sub[:5]}"),
            google_id=profile.sub,
            email=email,
            first_name=profile.given_name,
            last_name=profile.family_name,
            profile_picture=profile.picture,
            role=UserRole.MEMBER,
        )
        created = True

    user.last_login_at = _now()
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(ErrorCode.USER_EXISTS.value, "account conflict during google login") from None

    db.refresh(user)
    return user, created


def list_users(db: Session, role: UserRole | None = None, limit: int = 50) -> list[User]:
    stmt = select(User).order_by(User.created_at.desc()).limit(limit)
    if role is not None:
        stmt = stmt.where(User.role == role)
    return list(db.scalars(stmt).all())


def set_user_role(db: Session, actor: User, user_id: Any, role: UserRole) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(ErrorCode.USER_NOT_FOUND.value, "user not found")
    if user.id == actor.id:
        raise ValidationError(ErrorCode.VALIDATION_ERROR.value, "cannot change own role")

    user.role = role
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("user_role_changed", user_id=str(user.id), role=role.value)
    return user
