from app.services.bootstrap import get_or_create_waitlist_hub_event
from app.services.catalog_service import create_event, create_hub, link_hub_event, update_event
from app.services.registration_service import (
    cancel_registration,
    register,
    register_legacy_waitlist,
    update_registration_status,
)

__all__ = [
    "get_or_create_waitlist_hub_event",
    "create_hub",
    "create_event",
    "update_event",
    "link_hub_event",
    "register",
    "register_legacy_waitlist",
    "cancel_registration",
    "update_registration_status",
]
