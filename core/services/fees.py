# core/services/fees.py
"""
Fee structure lookups and per-student balances.
"""
import logging
from decimal import Decimal, InvalidOperation

logger = logging.getLogger(__name__)

BOARDING_KEYWORDS = ('board',)
# 'luch' is a misspelling found in imported fee sheets
LUNCH_KEYWORDS = ('lunch', 'luch')


def _label(item):
    return str(item.get('name') or item.get('fee_name') or '').lower().strip()


def item_amount(item):
    try:
        return Decimal(str(item.get('amount') or 0))
    except (InvalidOperation, TypeError, ValueError):
        logger.warning(f"Ignoring fee item with invalid amount: {item}")
        return Decimal('0')


def filter_fee_items_by_residence(items, residence_type=None):
    """
    Drop fee items that do not apply to the residence type.

    Day students (the default) do not pay boarding items; boarders do not
    pay lunch items. Returns ``(items, total)``.
    """
    items = list(items or [])
    if residence_type == 'Boarding':
        excluded = LUNCH_KEYWORDS
    else:
        excluded = BOARDING_KEYWORDS

    kept = [item for item in items if not any(word in _label(item) for word in excluded)]
    total = sum((item_amount(item) for item in kept), Decimal('0'))
    return kept, total


def fee_items_for_class(class_name):
    from core.models import SchoolSettings

    structure = SchoolSettings.get_settings().fee_structure or {}
    return structure.get(class_name) or structure.get('Default') or []


def default_total_fees(class_name, residence_type=None):
    _, total = filter_fee_items_by_residence(fee_items_for_class(class_name), residence_type)
    return total


def _sum_matching(items, keywords):
    return sum(
        (item_amount(item) for item in items if any(word in _label(item) for word in keywords)),
        Decimal('0'),
    )


def fee_breakdown(student):
    """
    Fees owed by a student for their class and residence.

    Boarders carry the boarding fee and day students the lunch fee; the
    rest of the structure total is base tuition.
    """
    residence_type = student.residence_type or 'Day'
    items, structure_total = filter_fee_items_by_residence(
        fee_items_for_class(student.class_name), residence_type
    )
    has_boarding = residence_type == 'Boarding'
    boarding_fee = _sum_matching(items, BOARDING_KEYWORDS) if has_boarding else Decimal('0')
    lunch_fee = Decimal('0') if has_boarding else _sum_matching(items, LUNCH_KEYWORDS)
    balance = student.fee_balance
    return {
        'student_id': student.pk,
        'residence_type': residence_type,
        'items': [{'name': item.get('name') or item.get('fee_name', ''), 'amount': item_amount(item)} for item in items],
        'base_tuition': structure_total - boarding_fee - lunch_fee,
        'boarding_fee': boarding_fee,
        'lunch_fee': lunch_fee,
        'has_boarding': has_boarding,
        'has_lunch': not has_boarding,
        'structure_total': structure_total,
        'total_fees': student.total_fees,
        'fees_paid': student.fees_paid,
        'balance': balance,
        'is_fully_paid': balance <= 0,
    }
