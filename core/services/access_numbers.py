# core/services/access_numbers.py
"""
Access numbers and admission ids.

An access number is ``<class code><stream code><NN>``, e.g. ``BA07`` for the
seventh place in Senior 2 stream A. Numbers are unique among students on
the roll; numbers released by leavers are recycled oldest first.
"""
import logging
import re

from django.utils import timezone

from core.exceptions import AccessNumberConflict, DuplicateRecordError
from core.models import DroppedAccessNumber, Student

logger = logging.getLogger(__name__)

ACCESS_CLASS_CODES = {
    'Senior 1': 'A',
    'Senior 2': 'B',
    'Senior 3': 'C',
    'Senior 4': 'D',
    'Senior 5': 'E',
    'Senior 6': 'F',
}

# Admission ids only distinguish O-level classes
ADMISSION_CLASS_CODES = {
    'Senior 1': 'A',
    'Senior 2': 'B',
    'Senior 3': 'C',
    'Senior 4': 'D',
}

MONTH_NAMES = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]

# January and July would both shorten to "Jy"
MONTH_CODE_OVERRIDES = {
    'January': 'Ja',
    'July': 'Jy',
}

_SEQUENCE_RE = re.compile(r'(\d+)$')


def class_code(class_name):
    return ACCESS_CLASS_CODES.get(class_name, 'X')


def stream_code(stream):
    first = (stream or '').strip().upper()[:1]
    return first if first and 'A' <= first <= 'Z' else 'N'


def sequence_of(access_number):
    """Numeric suffix of an access number, 0 when there is none."""
    match = _SEQUENCE_RE.search(access_number or '')
    return int(match.group(1)) if match else 0


def format_access_number(class_name, stream, sequence):
    return f"{class_code(class_name)}{stream_code(stream)}{sequence:02d}"


def on_roll(class_name=None, stream=None):
    queryset = Student.objects.filter(status__in=Student.ON_ROLL_STATUSES)
    if class_name is not None:
        queryset = queryset.filter(class_name=class_name)
    if stream is not None:
        queryset = queryset.filter(stream=stream)
    return queryset


def is_number_in_use(access_number, exclude=None):
    queryset = on_roll().filter(access_number=access_number)
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude.pk)
    return queryset.exists()


def next_free_access_number(class_name, stream):
    """Lowest sequence not held by a student on the roll of that class and stream."""
    used = {
        sequence_of(number)
        for number in on_roll(class_name, stream).values_list('access_number', flat=True)
    }
    sequence = 1
    while sequence in used:
        sequence += 1
    return format_access_number(class_name, stream, sequence)


def allocate_access_number(class_name, stream, requested=None, original=None, exclude=None):
    """
    Pick the access number for a student joining the roll.

    Order of preference: an explicitly requested number, the student's
    original number on re-admission when it is still free, the oldest
    dropped number for the class and stream, then the lowest free sequence.
    """
    if requested:
        if is_number_in_use(requested, exclude=exclude):
            raise AccessNumberConflict(f"Access number {requested} already exists")
        return requested

    if original and not is_number_in_use(original, exclude=exclude):
        logger.info(f"Re-admission reuses original access number {original}")
        return original

    dropped = (
        DroppedAccessNumber.objects
        .filter(class_name=class_name, stream_name=stream or '')
        .order_by('dropped_at', 'id')
    )
    for candidate in dropped:
        if not is_number_in_use(candidate.access_number, exclude=exclude):
            logger.info(f"Reusing dropped access number {candidate.access_number}")
            return candidate.access_number
        # Stale entry: someone already holds it
        candidate.delete()

    return next_free_access_number(class_name, stream)


def consume_access_number(access_number):
    """Remove a number from the dropped pool once it is in use again."""
    deleted, _ = DroppedAccessNumber.objects.filter(access_number=access_number).delete()
    if deleted:
        logger.info(f"Removed {access_number} from dropped access numbers (now in use)")


def is_highest_in_stream(student):
    numbers = on_roll(student.class_name, student.stream).values_list('access_number', flat=True)
    highest = max((sequence_of(number) for number in numbers), default=0)
    return sequence_of(student.access_number) >= highest


def release_access_number(student, reason):
    """
    Return a leaving student's number to the pool.

    The highest-numbered student's number is not pooled; the sequence scan
    hands it out again naturally. Returns the pooled entry or None.
    """
    if not student.access_number or not student.is_on_roll:
        return None
    if is_highest_in_stream(student):
        logger.info(f"{student.access_number} is the highest in its stream; not pooled")
        return None

    entry = DroppedAccessNumber.objects.create(
        access_number=student.access_number,
        class_name=student.class_name,
        stream_name=student.stream or '',
        student_name=student.name,
        reason=reason,
    )
    logger.info(f"Dropped access number {entry.access_number} ({reason})")
    return entry


def month_code(month):
    """Code for a month number (1-12): unique first letters stand alone."""
    name = MONTH_NAMES[month - 1]
    if name in MONTH_CODE_OVERRIDES:
        return MONTH_CODE_OVERRIDES[name]
    first = name[0]
    if sum(1 for other in MONTH_NAMES if other[0] == first) > 1:
        return first + name[-1]
    return first


def generate_admission_id(class_name, when=None):
    when = when or timezone.localdate()
    prefix = f"{month_code(when.month)}{when:%y}"
    count = Student.objects.filter(admission_id__startswith=prefix).count()
    admission_id = f"{prefix}{ADMISSION_CLASS_CODES.get(class_name, 'X')}{count + 1:02d}"

    if Student.objects.filter(admission_id=admission_id).exists():
        raise DuplicateRecordError(
            "Admission ID already exists",
            details=f"Admission ID {admission_id} is already in use"
        )
    return admission_id
