# core/services/staff.py
import logging
from decimal import Decimal, InvalidOperation

from django.db.models import Count, Sum

from core.exceptions import DataValidationError
from core.models import StaffPayment

logger = logging.getLogger(__name__)


def pay_staff(staff, amount, paid_by=None, **details):
    try:
        amount = Decimal(str(amount))
    except (InvalidOperation, TypeError, ValueError):
        raise DataValidationError("Amount must be a number", validation_errors={'amount': 'invalid'})
    if amount <= 0:
        raise DataValidationError("Amount must be greater than 0", validation_errors={'amount': 'must be > 0'})

    payment = StaffPayment.objects.create(staff=staff, amount=amount, paid_by=paid_by, **details)
    logger.info(f"Recorded payment of {amount} to {staff.name} by {getattr(paid_by, 'username', 'system')}")
    return payment


def payment_summary(staff):
    payments = staff.payments.all()
    totals = payments.aggregate(total=Sum('amount'), count=Count('id'))
    last = payments.order_by('-paid_at', '-id').first()
    return {
        'staff_id': staff.pk,
        'total_paid': totals['total'] or Decimal('0'),
        'payment_count': totals['count'],
        'last_payment': last,
    }
