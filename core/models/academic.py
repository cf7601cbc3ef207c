"""
Term results per student.
"""
from decimal import Decimal

from django.conf import settings
from django.db import models

from core.models.base import TERM_CHOICES


class AcademicRecord(models.Model):
    student = models.ForeignKey('core.Student', on_delete=models.CASCADE, related_name='academic_records')
    term = models.CharField(max_length=10, choices=TERM_CHOICES)
    year = models.PositiveIntegerField()

    # {"Mathematics": 78, "English": 64, ...}
    subjects = models.JSONField(default=dict, blank=True)
    # Per subject totals when a paper is not out of 100
    subject_totals = models.JSONField(default=dict, blank=True)

    total_marks = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))
    total_possible = models.DecimalField(max_digits=8, decimal_places=2, default=Decimal('0'))
    percentage = models.PositiveSmallIntegerField(default=0)
    overall_grade = models.CharField(max_length=3, blank=True)
    position = models.PositiveIntegerField(null=True, blank=True)

    teacher = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='recorded_results'
    )
    teacher_comment = models.TextField(blank=True)
    head_teacher_comment = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-year', 'term', 'position']
        verbose_name = 'Academic Record'
        verbose_name_plural = 'Academic Records'
        constraints = [
            models.UniqueConstraint(fields=['student', 'term', 'year'], name='unique_student_term_year'),
        ]
        indexes = [
            models.Index(fields=['term', 'year'], name='core_acad_term_year_idx'),
        ]

    def __str__(self):
        return f"{self.student.name} - {self.term} {self.year} ({self.overall_grade or 'ungraded'})"

    @property
    def subject_count(self):
        return len(self.subjects or {})
