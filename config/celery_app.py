import os

from celery import Celery
from celery.signals import setup_logging

# pytest passes --ds=config.settings.test and local runs export their own
# module, so this default only applies to deployed workers and beat.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("community_hub")

# All Celery keys live in Django settings with a CELERY_ prefix, including
# CELERY_BEAT_SCHEDULE which drives the periodic seat sweep.
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Picks up community_hub.seats.tasks.
app.autodiscover_tasks()
