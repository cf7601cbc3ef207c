"""
HR staff records and payroll payments.
"""

from django.conf import settings
from django.db import models

from core.models.base import staff_document_path


class Staff(models.Model):
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    role = models.CharField(max_length=100, blank=True)
    date_of_birth = models.DateField(null=True, blank=True)
    village = models.CharField(max_length=100, blank=True)
    next_of_kin = models.CharField(max_length=200, blank=True)
    next_of_kin_phone = models.CharField(max_length=20, blank=True)
    national_id = models.CharField(max_length=30, blank=True)
    medical_issues = models.TextField(blank=True)

    contract_duration_months = models.PositiveSmallIntegerField(null=True, blank=True)
    start_date = models.DateField(null=True, blank=True)
    amount_to_pay = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    bank_name = models.CharField(max_length=100, blank=True)
    bank_account_name = models.CharField(max_length=200, blank=True)
    bank_account_number = models.CharField(max_length=50, blank=True)
    mobile_money_provider = models.CharField(max_length=50, blank=True)
    mobile_money_number = models.CharField(max_length=20, blank=True)

    hr_notes = models.TextField(blank=True)
    cv = models.FileField(upload_to=staff_document_path, blank=True)
    passport_photo = models.ImageField(upload_to=staff_document_path, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']
        verbose_name = 'Staff Member'
        verbose_name_plural = 'Staff'

    def __str__(self):
        return f"{self.name} ({self.role or 'Staff'})"


class StaffPayment(models.Model):
    METHOD_CHOICES = [
        ('bank', 'Bank transfer'),
        ('mobile_money', 'Mobile money'),
        ('cash', 'Cash'),
    ]

    staff = models.ForeignKey(Staff, on_delete=models.CASCADE, related_name='payments')
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    period = models.CharField(max_length=20, blank=True, help_text="e.g. 2024-05")
    method = models.CharField(max_length=20, choices=METHOD_CHOICES, default='bank')
    reference = models.CharField(max_length=100, blank=True)
    notes = models.TextField(blank=True)
    paid_at = models.DateTimeField(auto_now_add=True)
    paid_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    class Meta:
        ordering = ['-paid_at', '-id']
        verbose_name = 'Staff Payment'
        verbose_name_plural = 'Staff Payments'

    def __str__(self):
        return f"{self.staff.name}: {self.amount} ({self.period})"
