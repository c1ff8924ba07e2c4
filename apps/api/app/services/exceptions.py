from app.services.error_codes import ErrorCode


class ServiceError(Exception):
    """Domain failure carrying a stable code that clients can branch on."""

    def __init__(self, code: ErrorCode | str, message: str | None = None) -> None:
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.message = message or self.code
        super().__init__(self.message)

    def to_detail(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


class NotFoundError(ServiceError):
    pass


class UnauthorizedError(ServiceError):
    pass


class PermissionDeniedError(ServiceError):
    pass


class ConflictError(ServiceError):
    pass


class ValidationError(ServiceError):
    pass
