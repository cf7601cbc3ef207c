# core/services/clinic.py
"""
Clinic visits and the notifications they trigger.
"""
import logging

from django.db import transaction
from django.utils import timezone

from core.models import ClinicRecord
from core.services.notifications import notify_user, notify_users, parents_of

logger = logging.getLogger(__name__)


def notify_parents_of_visit(record):
    """Tell every parent linked to the student; returns how many were told."""
    student = record.student
    sent = notify_users(
        parents_of(student),
        title=f"Clinic visit: {student.name}",
        message=(
            f"{student.name} visited the school clinic on {record.visit_date:%d %b %Y}. "
            f"Symptoms: {record.symptoms}."
            + (f" Treatment: {record.treatment}." if record.treatment else '')
        ),
        notification_type='CLINIC',
        link=f"/clinic-records/{record.pk}",
    )
    if sent:
        record.parent_notified = True
        record.save(update_fields=['parent_notified', 'updated_at'])
    else:
        logger.info(f"No parent accounts linked to {student.name}; clinic visit not notified")
    return sent


@transaction.atomic
def record_visit(nurse, notify_parent=False, **data):
    record = ClinicRecord.objects.create(nurse=nurse, **data)
    logger.info(f"Clinic visit recorded for {record.student.name} by {nurse.username}")
    if notify_parent:
        notify_parents_of_visit(record)
    return record


def due_follow_ups(on_date=None):
    on_date = on_date or timezone.localdate()
    return ClinicRecord.objects.select_related('student', 'nurse').filter(
        follow_up_required=True,
        follow_up_reminder_sent=False,
        follow_up_date__lte=on_date,
    )


def send_follow_up_reminders(on_date=None):
    """Remind the nurse and parents of follow-ups due on or before ``on_date``."""
    sent = 0
    for record in due_follow_ups(on_date):
        student = record.student
        title = f"Clinic follow-up due: {student.name}"
        message = (
            f"Follow-up for the clinic visit of {record.visit_date:%d %b %Y} "
            f"is due on {record.follow_up_date:%d %b %Y}."
        )
        notify_user(record.nurse, title, message, notification_type='CLINIC')
        notify_users(parents_of(student), title, message, notification_type='CLINIC')
        record.follow_up_reminder_sent = True
        record.save(update_fields=['follow_up_reminder_sent', 'updated_at'])
        sent += 1
    return sent
