"""
Add celery-beat schedule for polling pending gateway transactions.

This migration creates the periodic task schedule for the
poll_pending_transactions task, which checks every pending Transaction
against the gateway's status API.
"""

from django.conf import settings
from django.db import migrations

TASK_NAME = "Poll Pending Payment Transactions"


def create_periodic_task(apps, schema_editor):
    """Create the periodic task for polling pending transactions."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=getattr(settings, "PAYMENT_POLL_INTERVAL_SECONDS", 60),
        period="seconds",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "payments.workers.status_poller.poll_pending_transactions",
            "interval": schedule,
            "enabled": True,
            "description": (
                "Queries the gateway for every pending Transaction and "
                "applies the result through payment reconciliation."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
