import os

from celery import Celery
from celery.signals import worker_process_init

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'sharktrack.settings')

app = Celery('sharktrack')


app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()


@worker_process_init.connect
def load_status_registry(**kwargs):
    from order_tracking.services.status_registry import load_registry
    load_registry()
