from __future__ import annotations

from functools import lru_cache

import structlog

from app.core.config import settings
from app.notifications.base import Notifier
from app.notifications.null import NullNotifier
from app.notifications.sendgrid import SendGridNotifier

logger = structlog.get_logger(__name__)


def create_notifier(api_key: str | None = None, sender: str | None = None) -> Notifier:
    api_key = api_key or settings.sendgrid_api_key
    sender = sender or settings.admin_email
    if not api_key or not sender:
        logger.warning("sendgrid_not_configured")
        return NullNotifier()
    return SendGridNotifier(
        api_key=api_key,
        sender=sender,
        base_url=settings.sendgrid_base_url,
        timeout=settings.notification_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_notifier() -> Notifier:
    return create_notifier()
