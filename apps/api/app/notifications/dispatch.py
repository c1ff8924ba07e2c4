from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable

import structlog
from fastapi import BackgroundTasks

from app.core.config import settings
from app.notifications.base import Contact, Notifier, RegistrationNotice

logger = structlog.get_logger(__name__)


def _attempt(step: str, fn: Callable[[Any], None], arg: Any, email: str) -> bool:
    try:
        fn(arg)
    except Exception:
        logger.exception("notification_failed", step=step, email=email)
        return False
    return True


def notify_registration(notifier: Notifier, notice: RegistrationNotice) -> dict[str, bool]:
    email = notice.contact.email
    results = {
        "contact": _attempt("contact", notifier.upsert_contact, notice.contact, email),
        "confirmation": _attempt(
            "confirmation", notifier.send_registration_confirmation, notice, email
        ),
        "operator": _attempt(
            "operator",
            lambda n: notifier.send_operator_notification(n.contact, n),
            notice,
            email,
        ),
    }
    logger.info("registration_notifications_done", registration_id=notice.registration_id, **results)
    return results


def notify_new_member(notifier: Notifier, contact: Contact) -> dict[str, bool]:
    results = {
        "contact": _attempt("contact", notifier.upsert_contact, contact, contact.email),
        "welcome": _attempt("welcome", notifier.send_welcome, contact, contact.email),
        "operator": _attempt("operator", notifier.send_operator_notification, contact, contact.email),
    }
    logger.info("member_notifications_done", email=contact.email, **results)
    return results


def notify_cancellation(notifier: Notifier, notice: RegistrationNotice) -> dict[str, bool]:
    return {
        "cancellation": _attempt(
            "cancellation", notifier.send_cancellation, notice, notice.contact.email
        )
    }


_TASKS: dict[str, Callable[..., dict[str, bool]]] = {
    "notify_registration": notify_registration,
    "notify_new_member": notify_new_member,
    "notify_cancellation": notify_cancellation,
}


def _payload(arg: RegistrationNotice | Contact) -> dict[str, Any]:
    if isinstance(arg, RegistrationNotice):
        return arg.to_payload()
    return asdict(arg)


def schedule(
    background_tasks: BackgroundTasks,
    notifier: Notifier,
    task_name: str,
    arg: RegistrationNotice | Contact,
) -> None:
    """Run a notification task after the response has been sent."""
    if settings.notification_dispatch == "celery":
        from app.worker.celery_app import celery_app

        try:
            celery_app.send_task(task_name, args=[_payload(arg)])
        except Exception:
            logger.exception("notification_enqueue_failed", task=task_name)
        return

    background_tasks.add_task(_TASKS[task_name], notifier, arg)
