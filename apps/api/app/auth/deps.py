from __future__ import annotations

from typing import Annotated, Callable

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.auth.identity import Authenticated, Identity, resolve_identity
from app.db import get_db
from app.models import User
from app.models.user import UserRole

DBSession = Annotated[Session, Depends(get_db)]


def _unauthorized(detail: str = "authentication required") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "UNAUTHORIZED", "message": detail},
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden(detail: str = "insufficient role") -> HTTPException:
    return HTTPException(status_code=403, detail={"code": "FORBIDDEN", "message": detail})


def get_identity(request: Request, db: DBSession) -> Identity:
    return resolve_identity(request, db)


CurrentIdentity = Annotated[Identity, Depends(get_identity)]


def get_current_user(identity: CurrentIdentity) -> User:
    if not isinstance(identity, Authenticated):
        raise _unauthorized()
    return identity.user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_role(*roles: UserRole) -> Callable[..., User]:
    allowed = frozenset(roles)

    def _guard(identity: CurrentIdentity) -> User:
        if not isinstance(identity, Authenticated):
            raise _unauthorized()
        if identity.user.role not in allowed:
            raise _forbidden()
        return identity.user

    return _guard


require_admin = require_role(UserRole.ADMIN)
require_staff = require_role(UserRole.ADMIN, UserRole.AMBASSADOR)

AdminUser = Annotated[User, Depends(require_admin)]
StaffUser = Annotated[User, Depends(require_staff)]
