"""
Celery configuration for Smart Scheduler.

Only best-effort booking side effects (meeting-link creation and outbound
notifications) run here; nothing in the booking path waits on a worker.
"""

import logging
import os

from celery import Celery
from celery.signals import task_failure, task_retry

logger = logging.getLogger(__name__)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "smartscheduler.settings.production")

app = Celery("smartscheduler")

# Using a string here means the worker doesn't have to serialize
# the configuration object to child processes.
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()

app.conf.task_routes = {
    "apps.bookingapp.tasks.*": {"queue": "side_effects"},
}


@task_failure.connect
def task_failure_handler(sender=None, exception=None, **kwargs):
    logger.error(f"Task {sender.name} failed: {exception}")


@task_retry.connect
def task_retry_handler(sender=None, reason=None, **kwargs):
    logger.warning(f"Task {sender.name} retrying: {reason}")
