import os
from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "taskboard.settings")

# Only the message relay runs here for now (apps/chat/tasks.py).
app = Celery("taskboard")
app.config_from_object("django.conf:settings", namespace="CELERY")
app.autodiscover_tasks(lambda: ["apps.chat"])
