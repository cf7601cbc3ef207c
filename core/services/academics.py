# core/services/academics.py
"""
Term results: upserting marks and ranking students.
"""
import logging
from collections import defaultdict

from django.db import transaction

from core.exceptions import DataValidationError
from core.models import AcademicRecord
from core.services.grading import auto_grade_subjects, school_grade_system

logger = logging.getLogger(__name__)


def apply_grading(record, grade_system=None):
    """Fill totals, percentage and overall grade from ``record.subjects``."""
    result = auto_grade_subjects(
        record.subjects, record.subject_totals, grade_system or school_grade_system()
    )
    record.total_marks = result['total_marks']
    record.total_possible = result['total_possible_marks']
    record.percentage = result['average_percentage']
    record.overall_grade = result['overall_grade'] if record.subjects else ''
    return result


@transaction.atomic
def save_academic_record(student, term, year, subjects, teacher=None, **extra):
    """
    Create or update the single record for (student, term, year).

    Returns ``(record, created)``.
    """
    if not term or not year:
        raise DataValidationError("Term and year are required")

    defaults = {'subjects': subjects or {}, 'teacher': teacher}
    defaults.update({key: value for key, value in extra.items() if value is not None})

    record, created = AcademicRecord.objects.select_for_update().get_or_create(
        student=student, term=term, year=year, defaults=defaults
    )
    if not created:
        for field, value in defaults.items():
            if field == 'teacher' and value is None:
                continue
            setattr(record, field, value)

    apply_grading(record)
    record.save()

    logger.info(
        f"{'Created' if created else 'Updated'} academic record for {student.name} "
        f"{term} {year}: {record.percentage}% ({record.overall_grade})"
    )
    return record, created


def _ranking_key(record):
    return (
        -record.percentage,
        -record.total_marks,
        -record.subject_count,
        record.student.name.lower(),
    )


def _tie_key(record):
    return (record.percentage, record.total_marks, record.subject_count)


def _cohort_key(record):
    return (record.student.class_name, record.student.stream)


def _rank(records):
    ranked = sorted(records, key=_ranking_key)
    previous_key = None
    position = 0
    for index, record in enumerate(ranked, start=1):
        key = _tie_key(record)
        if key != previous_key:
            position = index
            previous_key = key
        record.position = position
    return ranked


@transaction.atomic
def recompute_positions(term, year, class_name=None, stream=None):
    """
    Rank each class/stream cohort and store each record's position.

    Positions are always relative to the student's own class and stream,
    the same group ``cohort_size`` counts, whatever filters are passed.
    Records tied on percentage, total marks and subject count share a
    position and the next position skips accordingly (1, 2, 2, 4).
    Returns the number of records updated.
    """
    if not term or not year:
        raise DataValidationError(
            "Term and year are required",
            validation_errors={'term': 'required', 'year': 'required'}
        )

    records = AcademicRecord.objects.select_related('student').filter(term=term, year=year)
    if class_name:
        records = records.filter(student__class_name=class_name)
    if stream:
        records = records.filter(student__stream=stream)

    cohorts = defaultdict(list)
    for record in records:
        cohorts[_cohort_key(record)].append(record)

    ranked = []
    for cohort in cohorts.values():
        ranked.extend(_rank(cohort))

    AcademicRecord.objects.bulk_update(ranked, ['position'])
    logger.info(
        f"Recomputed positions for {len(ranked)} records: {term} {year}, "
        f"class={class_name or 'all'}, stream={stream or 'all'}"
    )
    return len(ranked)


def cohort_size(record):
    return AcademicRecord.objects.filter(
        term=record.term,
        year=record.year,
        student__class_name=record.student.class_name,
        student__stream=record.student.stream,
    ).count()
