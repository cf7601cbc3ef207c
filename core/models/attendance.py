"""
Daily student attendance.
"""
from django.conf import settings
from django.db import models
from django.utils import timezone


class AttendanceRecord(models.Model):
    STATUS_CHOICES = [
        ('present', 'Present'),
        ('absent', 'Absent'),
        ('late', 'Late'),
        ('excused', 'Excused'),
        ('sick', 'Sick'),
        ('not_marked', 'Not marked'),
    ]

    # Statuses counted as attending school that day
    PRESENT_STATUSES = ('present', 'late', 'excused')

    student = models.ForeignKey('core.Student', on_delete=models.CASCADE, related_name='attendance_records')
    date = models.DateField(default=timezone.localdate, db_index=True)
    time = models.TimeField(null=True, blank=True)
    status = models.CharField(max_length=12, choices=STATUS_CHOICES)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='attendance_records'
    )
    remarks = models.TextField(blank=True)
    notification_sent = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-date', 'time', 'id']
        verbose_name = 'Attendance Record'
        verbose_name_plural = 'Attendance Records'
        constraints = [
            models.UniqueConstraint(fields=['student', 'date'], name='unique_student_attendance_day'),
        ]
        indexes = [
            models.Index(fields=['date', 'status'], name='core_attendance_date_idx'),
        ]

    def __str__(self):
        return f"{self.student.name} - {self.date} - {self.get_status_display()}"

    @property
    def is_present(self):
        return self.status in self.PRESENT_STATUSES
