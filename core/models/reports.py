"""
Weekly staff reports.
"""
from datetime import timedelta

from django.conf import settings
from django.db import models


class WeeklyReport(models.Model):
    REPORT_TYPES = [
        ('teaching', 'Teaching'),
        ('administrative', 'Administrative'),
        ('clinic', 'Clinic'),
        ('general', 'General'),
    ]

    STATUS_CHOICES = [
        ('submitted', 'Submitted'),
        ('reviewed', 'Reviewed'),
    ]

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='weekly_reports'
    )
    week_start = models.DateField()
    week_end = models.DateField(blank=True)
    report_type = models.CharField(max_length=20, choices=REPORT_TYPES, default='general')
    content = models.TextField()
    achievements = models.JSONField(default=list, blank=True)
    challenges = models.JSONField(default=list, blank=True)
    next_week_goals = models.JSONField(default=list, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='submitted')
    submitted_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-week_start', '-submitted_at']
        verbose_name = 'Weekly Report'
        verbose_name_plural = 'Weekly Reports'
        indexes = [
            models.Index(fields=['user', 'week_start'], name='core_weekly_user_week_idx'),
        ]

    def __str__(self):
        return f"{self.user.username}: week of {self.week_start}"

    def save(self, *args, **kwargs):
        if self.week_start and not self.week_end:
            self.week_end = self.week_start + timedelta(days=6)
        super().save(*args, **kwargs)
