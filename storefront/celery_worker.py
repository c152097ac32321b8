# storefront/celery_worker.py
from celery import Celery

from storefront.utils.settings import CELERY_BROKER_URL, CELERY_RESULT_BACKEND

celery_app = Celery(
    "storefront",
    broker=CELERY_BROKER_URL,
    backend=CELERY_RESULT_BACKEND,
)

# tasks must be imported explicitly for the worker to register them
celery_app.conf.imports = (
    "storefront.services.notification_service",
)

celery_app.conf.task_acks_late = True
celery_app.conf.broker_connection_retry_on_startup = True
celery_app.conf.timezone = "UTC"
