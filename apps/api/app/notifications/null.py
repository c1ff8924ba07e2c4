from __future__ import annotations

import structlog

from app.notifications.base import Contact, Notifier, RegistrationNotice

logger = structlog.get_logger(__name__)


class NullNotifier(Notifier):
    """Used when no email provider is configured. Every call is a logged no-op."""

    def upsert_contact(self, contact: Contact) -> None:
        logger.debug("notification_skipped", kind="contact", email=contact.email)

    def send_registration_confirmation(self, notice: RegistrationNotice) -> None:
        logger.debug("notification_skipped", kind="confirmation", email=notice.contact.email)

    def send_operator_notification(
        self, contact: Contact, notice: RegistrationNotice | None = None
    ) -> None:
        logger.debug("notification_skipped", kind="operator", email=contact.email)

    def send_welcome(self, contact: Contact) -> None:
        logger.debug("notification_skipped", kind="welcome", email=contact.email)

    def send_cancellation(self, notice: RegistrationNotice) -> None:
        logger.debug("notification_skipped", kind="cancellation", email=notice.contact.email)
