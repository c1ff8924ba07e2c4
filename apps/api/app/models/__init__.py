from app.models.base import Base
from app.models.event import Event
from app.models.hub import Hub
from app.models.hub_event import HubEvent
from app.models.registration import Registration
from app.models.user import User

__all__ = ["Base", "User", "Hub", "Event", "HubEvent", "Registration"]
