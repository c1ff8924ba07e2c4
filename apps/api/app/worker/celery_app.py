from celery import Celery

from app.core.config import settings

celery_app = Celery(
    "buildclub",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.worker.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    task_always_eager=settings.celery_always_eager,
    task_soft_time_limit=int(settings.notification_timeout_seconds * 3) + 5,
    task_acks_late=True,
)
