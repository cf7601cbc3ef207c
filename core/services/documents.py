# core/services/documents.py
"""
Printable HTML documents: report cards and appointment letters.
"""
import logging
from datetime import date

from django.template import TemplateDoesNotExist, TemplateSyntaxError
from django.template.loader import render_to_string
from django.utils import timezone

from core.exceptions import DataValidationError, DocumentRenderError
from core.models import SchoolSettings
from core.services.academics import cohort_size
from core.services.grading import auto_grade_subjects, school_grade_system

logger = logging.getLogger(__name__)

REPORT_CARD_TEMPLATE = 'core/documents/report_card.html'
APPOINTMENT_LETTER_TEMPLATE = 'core/documents/appointment_letter.html'


def school_context():
    school = SchoolSettings.get_settings()
    return {
        'school': school,
        'school_name': school.display_name,
        'generated_on': timezone.localdate(),
    }


def _render(template_name, context):
    try:
        return render_to_string(template_name, context)
    except (TemplateDoesNotExist, TemplateSyntaxError) as e:
        raise DocumentRenderError(f"Could not render {template_name}: {str(e)}")


def add_months(start, months):
    """Same day ``months`` later, clamped to the end of shorter months."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    for day in (start.day, 30, 29, 28):
        try:
            return date(year, month, day)
        except ValueError:
            continue
    raise ValueError(f"Cannot add {months} months to {start}")


def render_report_card(record):
    student = record.student
    graded = auto_grade_subjects(record.subjects, record.subject_totals, school_grade_system())
    rows = [
        {'subject': subject, **details}
        for subject, details in graded['subject_grades'].items()
    ]

    context = school_context()
    context.update({
        'record': record,
        'student': student,
        'rows': rows,
        'total_marks': graded['total_marks'],
        'total_possible': graded['total_possible_marks'],
        'percentage': graded['average_percentage'],
        'overall_grade': graded['overall_grade'],
        'overall_comment': graded['overall_comment'],
        'position': record.position,
        'cohort_size': cohort_size(record),
        'teacher_comment': record.teacher_comment or graded['overall_comment'],
        'head_teacher_comment': record.head_teacher_comment,
    })
    logger.info(f"Rendering report card for {student.name} ({record.term} {record.year})")
    return _render(REPORT_CARD_TEMPLATE, context)


def appointment_letter_context(staff):
    if not staff.name:
        raise DataValidationError("Staff name is required for an appointment letter")

    start_date = staff.start_date or timezone.localdate()
    months = staff.contract_duration_months
    end_date = add_months(start_date, months) if months else None

    context = school_context()
    context.update({
        'staff': staff,
        'role': (staff.role or 'STAFF').upper(),
        'start_date': start_date,
        'end_date': end_date,
        'contract_months': months,
        'remuneration': f"UGX {staff.amount_to_pay:,.0f}" if staff.amount_to_pay is not None else '',
        'hr_name': context['school'].hr_name or 'Human Resource Manager',
    })
    return context


def render_appointment_letter(staff):
    logger.info(f"Rendering appointment letter for {staff.name}")
    return _render(APPOINTMENT_LETTER_TEMPLATE, appointment_letter_context(staff))
