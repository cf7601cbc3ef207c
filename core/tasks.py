import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from core.models import Notification
from core.services.attendance import ensure_daily_attendance
from core.services.clinic import send_follow_up_reminders

logger = logging.getLogger(__name__)


@shared_task
def send_clinic_follow_up_reminders():
    """Celery task to remind nurses and parents of clinic follow-ups due today or overdue"""
    sent = send_follow_up_reminders()
    logger.info(f"Clinic follow-up reminders sent for {sent} visits")
    return sent


@shared_task
def purge_read_notifications():
    """Celery task to delete read notifications past the retention period"""
    cutoff = timezone.now() - timedelta(days=settings.NOTIFICATION_RETENTION_DAYS)
    deleted, _ = Notification.objects.filter(is_read=True, created_at__lt=cutoff).delete()
    logger.info(f"Purged {deleted} read notifications older than {settings.NOTIFICATION_RETENTION_DAYS} days")
    return deleted


@shared_task
def create_daily_attendance_placeholders():
    """Celery task to add not_marked attendance rows for students without a mark today"""
    result = ensure_daily_attendance()
    return {'date': result['date'].isoformat(), 'created': result['created']}
