import os

from celery import Celery
from celery.signals import worker_ready


os.environ.setdefault("DJANGO_SETTINGS_MODULE", "requisitions_project.settings")

app = Celery("requisitions_project")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks()


@worker_ready.connect
def reconcile_on_startup(sender, **kwargs):
    """Backfill missed budget consumption once the worker is up."""
    sender.app.send_task("budgets.reconcile_budget_consumption")
