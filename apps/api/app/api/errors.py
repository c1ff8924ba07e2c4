from fastapi import HTTPException

from app.services.exceptions import (
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    UnauthorizedError,
    ValidationError,
)

_STATUS_BY_ERROR: tuple[tuple[type[ServiceError], int], ...] = (
    (NotFoundError, 404),
    (UnauthorizedError, 401),
    (PermissionDeniedError, 403),
    (ConflictError, 409),
    (ValidationError, 400),
)


def http_error_from_service(err: ServiceError) -> HTTPException:
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(err, cls)), 500)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return HTTPException(status_code=status, detail=err.to_detail(), headers=headers)
