from app.notifications.base import Contact, Notifier, RegistrationNotice
from app.notifications.null import NullNotifier
from app.notifications.sendgrid import SendGridNotifier


def get_notifier() -> Notifier:
    from app.notifications.factory import get_notifier as _get_notifier

    return _get_notifier()


__all__ = [
    "Contact",
    "Notifier",
    "NullNotifier",
    "RegistrationNotice",
    "SendGridNotifier",
    "get_notifier",
]
