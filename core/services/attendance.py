# core/services/attendance.py
"""
Daily attendance marking and the placeholder rows that make gaps visible.
"""
import logging

from django.db import transaction
from django.utils import timezone

from core.exceptions import DataValidationError
from core.models import AttendanceRecord, Student
from core.services.notifications import notify_users, parents_of

logger = logging.getLogger(__name__)

STATUSES = {value for value, _ in AttendanceRecord.STATUS_CHOICES}
PLACEHOLDER_REMARKS = 'Auto-generated placeholder for accountability'


def notify_parents_of_absence(record):
    student = record.student
    sent = notify_users(
        parents_of(student),
        title=f"Attendance: {student.name} marked {record.get_status_display().lower()}",
        message=(
            f"{student.name} was marked {record.get_status_display().lower()} on {record.date:%d %b %Y}."
            + (f" Remarks: {record.remarks}" if record.remarks else '')
        ),
        notification_type='WARNING',
        link=f"/attendance/{record.pk}",
    )
    if sent:
        record.notification_sent = True
        record.save(update_fields=['notification_sent', 'updated_at'])
    return sent


@transaction.atomic
def mark_attendance(student, status, recorded_by=None, date=None, time=None, remarks='',
                    notify_parent=False):
    """
    Record the student's attendance for a day.

    A second mark for the same day updates the existing row. Returns
    ``(record, created)``.
    """
    if status not in STATUSES:
        raise DataValidationError(
            f"Invalid attendance status: {status}", validation_errors={'status': 'invalid'}
        )

    date = date or timezone.localdate()
    record, created = AttendanceRecord.objects.update_or_create(
        student=student,
        date=date,
        defaults={
            'status': status,
            'time': time or timezone.localtime().time().replace(microsecond=0),
            'recorded_by': recorded_by,
            'remarks': remarks or '',
        },
    )
    logger.info(
        f"{'Marked' if created else 'Updated'} attendance for {student.name} on {date}: {status} "
        f"by {getattr(recorded_by, 'username', 'system')}"
    )

    if notify_parent and status not in AttendanceRecord.PRESENT_STATUSES:
        notify_parents_of_absence(record)
    return record, created


@transaction.atomic
def ensure_daily_attendance(on_date=None):
    """Create a ``not_marked`` row for every student on the roll who has none for the day."""
    on_date = on_date or timezone.localdate()
    students = Student.objects.filter(status__in=Student.ON_ROLL_STATUSES)
    already_marked = set(
        AttendanceRecord.objects.filter(date=on_date).values_list('student_id', flat=True)
    )

    placeholders = [
        AttendanceRecord(
            student=student,
            date=on_date,
            status='not_marked',
            remarks=PLACEHOLDER_REMARKS,
        )
        for student in students
        if student.pk not in already_marked
    ]
    AttendanceRecord.objects.bulk_create(placeholders)

    total = students.count()
    logger.info(f"Attendance placeholders for {on_date}: {len(placeholders)} created, {total} students on roll")
    return {'date': on_date, 'created': len(placeholders), 'total_students': total}
