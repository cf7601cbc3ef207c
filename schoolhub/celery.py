# schoolhub/celery.py
import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'schoolhub.settings')

app = Celery('schoolhub')

# All CELERY_* values in settings.py configure the worker
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
