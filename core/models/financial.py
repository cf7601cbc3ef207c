"""
Student fee payments.
"""
from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.crypto import get_random_string

from core.models.base import TERM_CHOICES


class StudentPayment(models.Model):
    METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('mobile_money', 'Mobile Money'),
        ('bank_transfer', 'Bank Transfer'),
        ('cheque', 'Cheque'),
        ('other', 'Other'),
    ]

    student = models.ForeignKey('core.Student', on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(
        max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))]
    )
    billing_type = models.CharField(max_length=100, default='General Fee', help_text="Fee item paid, e.g. Tuition")
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='cash')
    reference = models.CharField(max_length=100, blank=True)
    description = models.CharField(max_length=255, blank=True)
    receipt_number = models.CharField(max_length=20, unique=True, blank=True)
    term = models.CharField(max_length=10, choices=TERM_CHOICES, blank=True)
    year = models.PositiveIntegerField(null=True, blank=True)
    paid_at = models.DateTimeField(default=timezone.now)
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='received_payments'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-paid_at', '-id']
        verbose_name = 'Student Payment'
        verbose_name_plural = 'Student Payments'
        indexes = [
            models.Index(fields=['student', 'paid_at'], name='core_payment_student_idx'),
            models.Index(fields=['term', 'year'], name='core_payment_term_year_idx'),
        ]

    def __str__(self):
        return f"{self.receipt_number}: {self.amount} from {self.student.name}"

    def save(self, *args, **kwargs):
        if not self.receipt_number:
            self.receipt_number = self.generate_receipt_number()
        super().save(*args, **kwargs)

    @classmethod
    def generate_receipt_number(cls):
        while True:
            receipt_number = f"RC-{get_random_string(10, '0123456789')}"
            if not cls.objects.filter(receipt_number=receipt_number).exists():
                return receipt_number
