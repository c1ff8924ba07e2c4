from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    USER_NOT_FOUND = "USER_NOT_FOUND"
    USER_EXISTS = "USER_EXISTS"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    HUB_NOT_FOUND = "HUB_NOT_FOUND"
    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    HUB_EVENT_NOT_FOUND = "HUB_EVENT_NOT_FOUND"
    HUB_EVENT_EXISTS = "HUB_EVENT_EXISTS"

    REGISTRATION_EXISTS = "REGISTRATION_EXISTS"
    REGISTRATION_NOT_FOUND = "REGISTRATION_NOT_FOUND"
    CONTACT_REQUIRED = "CONTACT_REQUIRED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"

    OAUTH_UNAVAILABLE = "OAUTH_UNAVAILABLE"
