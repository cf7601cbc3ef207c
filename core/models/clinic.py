"""
Clinic visit records.
"""
from decimal import Decimal

from django.conf import settings
from django.db import models
from django.utils import timezone


class ClinicRecord(models.Model):
    STATUS_CHOICES = [
        ('resolved', 'Resolved'),
        ('under_observation', 'Under observation'),
        ('referred', 'Referred'),
        ('follow_up', 'Follow-up'),
    ]

    student = models.ForeignKey('core.Student', on_delete=models.CASCADE, related_name='clinic_records')
    visit_date = models.DateField(default=timezone.localdate, db_index=True)
    visit_time = models.TimeField(null=True, blank=True)
    symptoms = models.TextField()
    diagnosis = models.TextField(blank=True)
    treatment = models.TextField(blank=True)
    medication = models.TextField(blank=True)
    cost = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0'))
    nurse = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.PROTECT, related_name='clinic_records'
    )
    follow_up_required = models.BooleanField(default=False)
    follow_up_date = models.DateField(null=True, blank=True)
    follow_up_reminder_sent = models.BooleanField(default=False)
    parent_notified = models.BooleanField(default=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='resolved')
    notes = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-visit_date', '-visit_time', '-id']
        verbose_name = 'Clinic Record'
        verbose_name_plural = 'Clinic Records'
        indexes = [
            models.Index(fields=['student', 'visit_date'], name='core_clinic_student_date_idx'),
            models.Index(fields=['follow_up_required', 'follow_up_date'], name='core_clinic_follow_up_idx'),
        ]

    def __str__(self):
        return f"{self.student.name} - {self.visit_date}"

    def save(self, *args, **kwargs):
        if not self.follow_up_required:
            self.follow_up_date = None
        super().save(*args, **kwargs)
