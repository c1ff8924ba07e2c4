from celery.utils.log import get_task_logger

from app.notifications import get_notifier
from app.notifications.base import Contact, RegistrationNotice
from app.notifications.dispatch import notify_cancellation, notify_new_member, notify_registration
from app.worker.celery_app import celery_app

logger = get_task_logger(__name__)


@celery_app.task(name="notify_registration")
def notify_registration_task(payload: dict) -> dict:
    notice = RegistrationNotice.from_payload(payload)
    logger.info("notify_registration registration_id=%s", notice.registration_id)
    return notify_registration(get_notifier(), notice)


@celery_app.task(name="notify_new_member")
def notify_new_member_task(payload: dict) -> dict:
    contact = Contact(**payload)
    logger.info("notify_new_member email=%s", contact.email)
    return notify_new_member(get_notifier(), contact)


@celery_app.task(name="notify_cancellation")
def notify_cancellation_task(payload: dict) -> dict:
    notice = RegistrationNotice.from_payload(payload)
    logger.info("notify_cancellation registration_id=%s", notice.registration_id)
    return notify_cancellation(get_notifier(), notice)
