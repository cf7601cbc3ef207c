"""
Student management models: Student, recycled access numbers and parent links.
"""
import logging
from decimal import Decimal

from django.conf import settings
from django.db import models

from core.models.base import CLASS_CHOICES, GENDER_CHOICES, RESIDENCE_CHOICES

logger = logging.getLogger(__name__)


class Student(models.Model):
    STATUS_CHOICES = [
        ('active', 'Active'),
        ('pending', 'Pending placement'),
        ('re-admitted', 'Re-admitted'),
        ('left', 'Left'),
        ('expelled', 'Expelled'),
        ('suspended', 'Suspended'),
    ]

    # Students holding a place on the class roll
    ON_ROLL_STATUSES = ('active', 're-admitted')
    DUPLICATE_CHECK_STATUSES = ('active', 'pending', 're-admitted')

    ADMITTED_BY_CHOICES = [
        ('admin', 'Administration'),
        ('secretary', 'Secretary'),
        ('overseer', 'Sponsorships Overseer'),
    ]

    CONDUCT_NOTE_TYPES = ('positive', 'negative', 'warning', 'achievement', 'incident')

    name = models.CharField(max_length=200)
    access_number = models.CharField(max_length=40, blank=True, db_index=True)
    admission_id = models.CharField(max_length=40, blank=True, db_index=True)
    date_of_birth = models.DateField(null=True, blank=True)
    age = models.PositiveSmallIntegerField(default=0)
    gender = models.CharField(max_length=1, choices=GENDER_CHOICES, blank=True)
    class_name = models.CharField(max_length=20, choices=CLASS_CHOICES)
    stream = models.CharField(max_length=30, blank=True)
    residence_type = models.CharField(max_length=10, choices=RESIDENCE_CHOICES, default='Day')

    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    medical_condition = models.TextField(blank=True)

    parent_name = models.CharField(max_length=200, blank=True)
    parent_phone = models.CharField(max_length=20, blank=True)
    parent_email = models.EmailField(blank=True)
    parent_relationship = models.CharField(max_length=50, blank=True)

    total_fees = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))
    fees_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0'))

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active', db_index=True)
    flag_comment = models.TextField(blank=True)
    conduct_notes = models.JSONField(default=list, blank=True)
    admitted_by = models.CharField(max_length=20, choices=ADMITTED_BY_CHOICES, default='admin')
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='admitted_students'
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['class_name', 'stream', 'name']
        verbose_name = 'Student'
        verbose_name_plural = 'Students'
        indexes = [
            models.Index(fields=['class_name', 'stream', 'status'], name='core_student_class_status_idx'),
            models.Index(fields=['name'], name='core_student_name_idx'),
        ]

    def __str__(self):
        return f"{self.name} ({self.access_number or 'unassigned'}) - {self.class_name} {self.stream}".strip()

    @property
    def is_on_roll(self):
        return self.status in self.ON_ROLL_STATUSES

    @property
    def fee_balance(self):
        return (self.total_fees or Decimal('0')) - (self.fees_paid or Decimal('0'))

    @property
    def is_fully_paid(self):
        return self.fee_balance <= 0


class DroppedAccessNumber(models.Model):
    """An access number released by a student leaving the roll, waiting for reuse."""

    access_number = models.CharField(max_length=40)
    class_name = models.CharField(max_length=20, choices=CLASS_CHOICES)
    stream_name = models.CharField(max_length=30, blank=True)
    student_name = models.CharField(max_length=200, blank=True)
    reason = models.CharField(max_length=255, blank=True)
    dropped_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['dropped_at', 'id']
        verbose_name = 'Dropped Access Number'
        verbose_name_plural = 'Dropped Access Numbers'
        indexes = [
            models.Index(fields=['class_name', 'stream_name', 'dropped_at'], name='core_dropped_class_stream_idx'),
        ]

    def __str__(self):
        return f"{self.access_number} ({self.class_name} {self.stream_name})"


class ParentAssignment(models.Model):
    parent = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='child_assignments'
    )
    student = models.ForeignKey(Student, on_delete=models.CASCADE, related_name='parent_assignments')
    assigned_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        verbose_name = 'Parent Assignment'
        verbose_name_plural = 'Parent Assignments'
        constraints = [
            models.UniqueConstraint(fields=['parent', 'student'], name='unique_parent_student'),
        ]

    def __str__(self):
        return f"{self.parent.username} -> {self.student.name}"
