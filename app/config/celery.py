"""
Celery configuration for the Django application.

Celery runs the payment status poller:
- Periodic pass over pending transactions (django-celery-beat schedule)
- On-demand checks for a single merchant order id

This configuration uses Redis as both the message broker and result backend.
Tasks are auto-discovered from all installed Django apps.

Usage:
    # Tasks are registered through each app's tasks.py:
    from payments.tasks import reconcile_single_transaction

    reconcile_single_transaction.delay("INV-20260401-0001")

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

# Create Celery application instance
# The name should match the Django project name
app = Celery("config")

# Load configuration from Django settings
# All Celery settings should be prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

# Auto-discover tasks from all registered Django apps
# Celery will look for a tasks.py module in each installed app
app.autodiscover_tasks()

