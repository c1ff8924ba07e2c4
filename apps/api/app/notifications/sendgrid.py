from __future__ import annotations

import httpx
import structlog

from app.notifications import templates
from app.notifications.base import Contact, Notifier, RegistrationNotice

logger = structlog.get_logger(__name__)


class SendGridNotifier(Notifier):
    """Thin SendGrid v3 client: transactional mail plus marketing contacts."""

    def __init__(
        self,
        api_key: str,
        sender: str,
        base_url: str = "https://api.sendgrid.com",
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._sender = sender
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout,
            headers={"Authorization": f"Bearer {api_key}"},
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _send(self, message: templates.EmailMessage) -> None:
        resp = self._client.post(
            "/v3/mail/send",
            json={
                "personalizations": [{"to": [{"email": message.to}]}],
                "from": {"email": self._sender},
                "subject": message.subject,
                "content": [{"type": "text/html", "value": message.html}],
            },
        )
        resp.raise_for_status()
        logger.info("email_sent", to=message.to, subject=message.subject)

    def upsert_contact(self, contact: Contact) -> None:
        resp = self._client.put(
            "/v3/marketing/contacts",
            json={
                "contacts": [
                    {
                        "email": contact.email,
                        "first_name": contact.first_name,
                        "last_name": contact.last_name,
                    }
                ]
            },
        )
        resp.raise_for_status()
        logger.info("contact_upserted", email=contact.email, status_code=resp.status_code)

    def send_registration_confirmation(self, notice: RegistrationNotice) -> None:
        self._send(templates.registration_confirmation(notice))

    def send_operator_notification(
        self, contact: Contact, notice: RegistrationNotice | None = None
    ) -> None:
        self._send(templates.operator_notification(contact, self._sender, notice))

    def send_welcome(self, contact: Contact) -> None:
        self._send(templates.welcome(contact))

    def send_cancellation(self, notice: RegistrationNotice) -> None:
        self._send(templates.cancellation(notice))
