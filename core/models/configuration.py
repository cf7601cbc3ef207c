"""
Organisation-wide settings editable at runtime.
"""
import logging

from django.conf import settings
from django.db import models

logger = logging.getLogger(__name__)


def default_fee_structure():
    return {}


class SchoolSettings(models.Model):
    school_name = models.CharField(max_length=200, blank=True)
    address = models.TextField(blank=True)
    po_box = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=50, blank=True)
    email = models.EmailField(blank=True)
    website = models.CharField(max_length=200, blank=True)
    motto = models.CharField(max_length=255, blank=True)
    hr_name = models.CharField(max_length=150, blank=True, help_text="Signatory on appointment letters")
    head_teacher_name = models.CharField(max_length=150, blank=True)
    document_colour = models.CharField(max_length=7, default='#1e3a8a')

    current_term = models.CharField(max_length=10, default='Term 1')
    current_year = models.PositiveIntegerField(null=True, blank=True)

    # {"A": {"min": 85, "max": 100, "comment": "..."}, ...} merged over the default bands
    grade_bands = models.JSONField(default=dict, blank=True)

    # {"Senior 1": [{"name": "Tuition", "amount": 450000}, {"name": "Boarding", ...}], ...}
    fee_structure = models.JSONField(default=default_fee_structure, blank=True)

    updated_at = models.DateTimeField(auto_now=True)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        verbose_name = "School Settings"
        verbose_name_plural = "School Settings"

    def __str__(self):
        return f"School Settings - {self.display_name}"

    def save(self, *args, **kwargs):
        # Singleton row
        self.pk = 1
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        logger.warning("Attempt to delete school settings ignored")

    @property
    def display_name(self):
        return self.school_name or settings.SCHOOL_NAME

    @classmethod
    def get_settings(cls):
        instance, created = cls.objects.get_or_create(
            pk=1,
            defaults={
                'school_name': settings.SCHOOL_NAME,
                'address': settings.SCHOOL_ADDRESS,
                'email': settings.SCHOOL_EMAIL,
                'phone': settings.SCHOOL_PHONE,
            }
        )
        if created:
            logger.info("Created default school settings")
        return instance
