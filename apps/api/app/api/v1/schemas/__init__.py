from app.api.v1.schemas.events import (
    EventCreate,
    EventDetailOut,
    EventListOut,
    EventOut,
    EventUpdate,
    HubEventCreate,
    HubEventOut,
    HubEventWithHubOut,
)
from app.api.v1.schemas.hubs import HubCreate, HubOut
from app.api.v1.schemas.registrations import (
    EventRegistrationIn,
    RegistrationOut,
    RegistrationStatusIn,
    UserRegistrationOut,
    WaitlistIn,
    WaitlistOut,
)
from app.api.v1.schemas.users import AuthOut, LoginIn, MeOut, RegisterIn, UpdateUserIn, UserOut

__all__ = [
    "EventCreate",
    "EventUpdate",
    "EventOut",
    "EventDetailOut",
    "EventListOut",
    "HubEventCreate",
    "HubEventOut",
    "HubEventWithHubOut",
    "HubCreate",
    "HubOut",
    "WaitlistIn",
    "WaitlistOut",
    "EventRegistrationIn",
    "RegistrationOut",
    "RegistrationStatusIn",
    "UserRegistrationOut",
    "RegisterIn",
    "LoginIn",
    "AuthOut",
    "MeOut",
    "UpdateUserIn",
    "UserOut",
]
