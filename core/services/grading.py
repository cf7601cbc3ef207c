# core/services/grading.py
"""
Letter grading of marks.

Bands are inclusive integer ranges; a school may override any band's
limits or comment through ``SchoolSettings.grade_bands``.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from core.exceptions import GradingSystemException

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT_TOTAL = 100

# Highest band first; evaluation order matters
DEFAULT_GRADE_BANDS = [
    ('A', {'min': 80, 'max': 100, 'comment': "Excellent performance! Keep up the outstanding work."}),
    ('B+', {'min': 75, 'max': 79, 'comment': "Very good work! You are doing great."}),
    ('B', {'min': 70, 'max': 74, 'comment': "Good performance. Continue working hard."}),
    ('C+', {'min': 65, 'max': 69, 'comment': "Fair performance. You can do better with more effort."}),
    ('C', {'min': 60, 'max': 64, 'comment': "Average performance. More effort is needed."}),
    ('D+', {'min': 55, 'max': 59, 'comment': "Below average. Significant improvement required."}),
    ('D', {'min': 50, 'max': 54, 'comment': "Poor performance. Immediate attention needed."}),
    ('F', {'min': 0, 'max': 49, 'comment': "Failure. Requires intensive support and remedial work."}),
]

GRADE_LETTERS = [grade for grade, _ in DEFAULT_GRADE_BANDS]


def build_grade_system(overrides=None):
    """Merge per-band overrides over the defaults, keeping band order."""
    overrides = overrides or {}
    unknown = set(overrides) - set(GRADE_LETTERS)
    if unknown:
        raise GradingSystemException(
            "Unknown grade bands in override", details={'bands': sorted(unknown)}
        )

    system = []
    for grade, band in DEFAULT_GRADE_BANDS:
        merged = dict(band)
        merged.update(overrides.get(grade) or {})
        system.append((grade, merged))
    return system


def school_grade_system():
    """Grade system configured for the school."""
    from core.models import SchoolSettings

    return build_grade_system(SchoolSettings.get_settings().grade_bands)


def _to_number(value, field='marks'):
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise GradingSystemException(f"Invalid {field}: {value!r}")


def calculate_percentage(marks, total):
    """Whole-number percentage, rounding halves up. Non-positive totals give 0."""
    marks = _to_number(marks)
    total = _to_number(total, 'total')
    if total <= 0:
        return 0
    return int((marks / total * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def calculate_grade(percentage, grade_system=None):
    """
    Return ``(grade, comment)`` for a percentage.

    The percentage is clamped to 0-100. A value falling between bands
    (possible with fractional input) falls back to F.
    """
    system = grade_system or build_grade_system()
    value = max(Decimal('0'), min(Decimal('100'), _to_number(percentage, 'percentage')))

    for grade, band in system:
        if band['min'] <= value <= band['max']:
            return grade, band['comment']

    fallback = dict(system)['F']
    return 'F', fallback['comment']


def auto_grade_subjects(subjects, totals=None, grade_system=None):
    """
    Grade each subject and the aggregate.

    ``subjects`` maps subject name to marks and ``totals`` maps subject name
    to the marks available; subjects without a total are out of 100.
    """
    totals = totals or {}
    system = grade_system or build_grade_system()

    subject_grades = {}
    total_marks = Decimal('0')
    total_possible = Decimal('0')

    for subject, marks in (subjects or {}).items():
        marks_value = _to_number(marks)
        if marks_value < 0:
            raise GradingSystemException(f"Marks for {subject} cannot be negative")
        subject_total = _to_number(totals.get(subject) or DEFAULT_SUBJECT_TOTAL, 'total')
        percentage = calculate_percentage(marks_value, subject_total)
        grade, comment = calculate_grade(percentage, system)

        subject_grades[subject] = {
            'marks': marks_value,
            'total': subject_total,
            'percentage': percentage,
            'grade': grade,
            'comment': comment,
        }
        total_marks += marks_value
        total_possible += subject_total

    average_percentage = calculate_percentage(total_marks, total_possible)
    overall_grade, overall_comment = calculate_grade(average_percentage, system)

    return {
        'subject_grades': subject_grades,
        'overall_grade': overall_grade,
        'overall_comment': overall_comment,
        'total_marks': total_marks,
        'total_possible_marks': total_possible,
        'average_percentage': average_percentage,
    }
