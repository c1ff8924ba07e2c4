from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Contact:
    email: str
    first_name: str
    last_name: str
    interest_areas: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RegistrationNotice:
    """Detached snapshot of a registration plus the event/hub it belongs to.

    Notifications run after the request's DB session is gone, so they never
    see ORM rows.
    """

    registration_id: str
    contact: Contact
    event_title: str
    event_description: str | None
    start_datetime: datetime | None
    end_datetime: datetime | None
    hub_name: str
    hub_address: str | None = None
    hub_city: str | None = None
    hub_state: str | None = None
    hub_country: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("start_datetime", "end_datetime"):
            value = payload[key]
            payload[key] = value.isoformat() if value else None
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> RegistrationNotice:
        data = dict(payload)
        data["contact"] = Contact(**data["contact"])
        for key in ("start_datetime", "end_datetime"):
            value = data.get(key)
            data[key] = datetime.fromisoformat(value) if value else None
        return cls(**data)


class Notifier(ABC):
    """Outbound mailing-list and email provider.

    Implementations may raise on delivery failure; callers treat every
    method as best-effort.
    """

    @abstractmethod
    def upsert_contact(self, contact: Contact) -> None:
        """Add or update the contact in the mailing list."""

    @abstractmethod
    def send_registration_confirmation(self, notice: RegistrationNotice) -> None:
        """Tell the registrant they are registered."""

    @abstractmethod
    def send_operator_notification(
        self, contact: Contact, notice: RegistrationNotice | None = None
    ) -> None:
        """Tell the operator address that someone joined, or registered for ``notice``."""

    @abstractmethod
    def send_welcome(self, contact: Contact) -> None:
        """Welcome a newly created member account."""

    @abstractmethod
    def send_cancellation(self, notice: RegistrationNotice) -> None:
        """Confirm that a registration was cancelled."""
