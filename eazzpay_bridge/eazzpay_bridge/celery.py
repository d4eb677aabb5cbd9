"""
Celery configuration for eazzpay_bridge project.
"""

import os
from celery import Celery
from celery.signals import setup_logging

# Set the default Django settings module for the 'celery' program.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'eazzpay_bridge.settings')

app = Celery('eazzpay_bridge')

# namespace='CELERY' means all celery-related configuration keys
# should have a `CELERY_` prefix.
app.config_from_object('django.conf:settings', namespace='CELERY')

# Picks up payments.tasks.verify_pending_payments
app.autodiscover_tasks()


@setup_logging.connect
def config_loggers(*args, **kwargs):
    """
    Configure Celery to use Django logging configuration.
    Worker and beat logs share the JSON format of the web process.
    """
    from logging.config import dictConfig
    from django.conf import settings

    dictConfig(settings.LOGGING)
