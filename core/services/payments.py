# core/services/payments.py
"""
Student fee payments and per-term payment summaries.
"""
import logging
from decimal import Decimal, InvalidOperation

from django.db import transaction
from django.utils import timezone

from core.exceptions import DataValidationError
from core.models import SchoolSettings, Student, StudentPayment
from core.services.fees import fee_items_for_class, filter_fee_items_by_residence, item_amount
from core.services.notifications import notify_users, parents_of

logger = logging.getLogger(__name__)

GENERAL_FEE = 'General Fee'


def current_term_and_year():
    school = SchoolSettings.get_settings()
    return school.current_term, school.current_year or timezone.localdate().year


@transaction.atomic
def record_student_payment(student, amount, received_by=None, billing_type='', method='cash',
                           reference='', description='', paid_at=None, term=None, year=None):
    """
    Store a fee payment and add it to the student's ``fees_paid``.

    Term and year default to the school's current term.
    """
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise DataValidationError("Amount must be a number", validation_errors={'amount': 'invalid'})
    if amount <= 0:
        raise DataValidationError("Invalid or missing amount", validation_errors={'amount': 'must be > 0'})

    default_term, default_year = current_term_and_year()
    billing_type = (billing_type or '').strip() or GENERAL_FEE
    method = method or 'cash'
    if not description:
        description = f"Payment for {billing_type} - {method}" + (f" (Ref: {reference})" if reference else '')

    locked = Student.objects.select_for_update().get(pk=student.pk)
    payment = StudentPayment.objects.create(
        student=locked,
        amount=amount,
        billing_type=billing_type,
        method=method,
        reference=reference or '',
        description=description,
        paid_at=paid_at or timezone.now(),
        term=term or default_term,
        year=year or default_year,
        received_by=received_by,
    )
    locked.fees_paid = (locked.fees_paid or Decimal('0')) + amount
    locked.save(update_fields=['fees_paid', 'updated_at'])
    student.fees_paid = locked.fees_paid

    logger.info(
        f"Payment {payment.receipt_number} of {amount} for {student.name} ({billing_type}) "
        f"received by {getattr(received_by, 'username', 'system')}"
    )
    notify_users(
        parents_of(locked),
        title=f"Payment received: {student.name}",
        message=f"A payment of UGX {amount:,.0f} for {billing_type} was received. Receipt {payment.receipt_number}.",
        notification_type='INFO',
        link=f"/students/{student.pk}/payments",
    )
    return payment


def payment_summary(student, term=None, year=None):
    """
    Fee items required for the term against what has been paid towards each.

    Payments are matched to fee items by billing type, case-insensitively.
    """
    default_term, default_year = current_term_and_year()
    term = term or default_term
    year = int(year or default_year)

    items, total_required = filter_fee_items_by_residence(
        fee_items_for_class(student.class_name), student.residence_type or 'Day'
    )
    payments = student.payments.filter(term=term, year=year)

    paid_by_type = {}
    for payment in payments:
        key = (payment.billing_type or GENERAL_FEE).lower()
        paid_by_type[key] = paid_by_type.get(key, Decimal('0')) + payment.amount

    breakdown = []
    for item in items:
        name = item.get('name') or item.get('fee_name') or GENERAL_FEE
        required = item_amount(item)
        paid = paid_by_type.get(name.lower(), Decimal('0'))
        breakdown.append({
            'fee_name': name,
            'required': required,
            'paid': paid,
            'remaining': max(Decimal('0'), required - paid),
        })

    total_paid = sum((payment.amount for payment in payments), Decimal('0'))
    return {
        'student_id': student.pk,
        'term': term,
        'year': year,
        'payment_breakdown': breakdown,
        'total_paid': total_paid,
        'total_fees_required': total_required,
        'balance': max(Decimal('0'), total_required - total_paid),
    }
