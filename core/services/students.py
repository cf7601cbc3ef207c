# core/services/students.py
"""
Student admissions, roll changes and conduct notes.
"""
import logging
import uuid
from datetime import date

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from core.exceptions import DataValidationError, DuplicateRecordError, PermissionDeniedError
from core.models import ParentAssignment, Student
from core.services import access_numbers
from core.services.fees import default_total_fees

logger = logging.getLogger(__name__)

FLAG_STATUSES = ('left', 'expelled', 'suspended', 're-admitted')


def find_duplicate(name, class_name, exclude=None):
    queryset = Student.objects.filter(
        name__iexact=(name or '').strip(),
        class_name=class_name,
        status__in=Student.DUPLICATE_CHECK_STATUSES,
    )
    if exclude is not None:
        queryset = queryset.exclude(pk=exclude.pk)
    return queryset.first()


def _age_from(date_of_birth, today=None):
    today = today or date.today()
    return today.year - date_of_birth.year - (
        (today.month, today.day) < (date_of_birth.month, date_of_birth.day)
    )


@transaction.atomic
def admit_student(data, user=None):
    """
    Create a student from validated serializer data.

    Students brought in by the sponsorships overseer wait in ``pending``
    without an access number or admission id until they are placed.
    """
    data = dict(data)
    name = (data.get('name') or '').strip()
    class_name = data.get('class_name')
    stream = (data.get('stream') or '').strip()
    admitted_by = data.get('admitted_by') or 'admin'
    is_overseer = admitted_by == 'overseer'

    errors = {}
    if not name:
        errors['name'] = 'Name is required'
    if not data.get('age') and data.get('date_of_birth'):
        data['age'] = _age_from(data['date_of_birth'])
    if not data.get('age') or data['age'] <= 0:
        errors['age'] = 'Age must be greater than 0'
    if not class_name:
        errors['class_name'] = 'Class is required'
    if not stream and not is_overseer:
        errors['stream'] = 'Stream is required'
    if errors:
        raise DataValidationError(next(iter(errors.values())), validation_errors=errors, user=user)

    existing = find_duplicate(name, class_name)
    if existing:
        raise DuplicateRecordError(
            "Duplicate student detected",
            details={
                'message': f'A student named "{name}" already exists in {class_name}.',
                'existing_student': {
                    'id': existing.pk,
                    'name': existing.name,
                    'class_name': existing.class_name,
                    'access_number': existing.access_number,
                },
            },
            user=user,
        )

    data['name'] = name
    data['stream'] = stream
    data['admitted_by'] = admitted_by
    requested_number = data.pop('access_number', None)
    original_number = data.pop('original_access_number', None)
    requested_admission_id = data.pop('admission_id', None)

    if is_overseer:
        # The stream is chosen at placement
        data['stream'] = ''
        data['status'] = 'pending'
        data['access_number'] = ''
        data['admission_id'] = ''
    else:
        data['status'] = 'active'
        data['access_number'] = access_numbers.allocate_access_number(
            class_name, stream, requested=requested_number, original=original_number
        )
        if requested_admission_id:
            if Student.objects.filter(admission_id=requested_admission_id).exists():
                raise DuplicateRecordError(
                    "Admission ID already exists",
                    details=f"Admission ID {requested_admission_id} is already in use"
                )
            data['admission_id'] = requested_admission_id
        else:
            data['admission_id'] = access_numbers.generate_admission_id(class_name)

    if data.get('total_fees') in (None, ''):
        data['total_fees'] = default_total_fees(class_name, data.get('residence_type'))

    student = Student.objects.create(created_by=user, **data)
    if student.access_number:
        access_numbers.consume_access_number(student.access_number)

    logger.info(
        f"Student admitted: {student.name} ({student.access_number or 'pending'}) "
        f"by {getattr(user, 'username', 'system')}"
    )
    return student


@transaction.atomic
def place_pending_student(student, stream, class_name=None, user=None):
    """Give a pending (overseer) student a class place, access number and admission id."""
    if student.status != 'pending':
        raise DataValidationError("Only pending students can be placed", user=user)
    if not stream:
        raise DataValidationError("Stream is required", validation_errors={'stream': 'Stream is required'})

    student.class_name = class_name or student.class_name
    student.stream = stream
    student.access_number = access_numbers.allocate_access_number(
        student.class_name, stream, exclude=student
    )
    student.admission_id = access_numbers.generate_admission_id(student.class_name)
    student.status = 'active'
    student.save()
    access_numbers.consume_access_number(student.access_number)

    logger.info(f"Pending student {student.name} placed as {student.access_number}")
    return student


@transaction.atomic
def flag_student(student, status='left', comment='', user=None):
    """
    Change a student's roll status.

    Leaving the roll may pool the access number; re-admission puts the
    student back on the roll with the original number when it is free.
    """
    status = status or 'left'
    if status not in FLAG_STATUSES:
        raise DataValidationError(
            f"Invalid status: {status}", validation_errors={'status': list(FLAG_STATUSES)}
        )

    if status == 're-admitted':
        return readmit_student(student, comment=comment, user=user)

    access_numbers.release_access_number(student, reason=f"Student {status}")
    student.status = status
    student.flag_comment = comment or ''
    student.save(update_fields=['status', 'flag_comment', 'updated_at'])

    logger.info(f"Student {student.name} flagged as {status} by {getattr(user, 'username', 'system')}")
    return student


def readmit_student(student, comment='', user=None):
    if student.is_on_roll:
        raise DataValidationError(f"{student.name} is already on the roll", user=user)
    if student.status == 'pending':
        raise DataValidationError("Pending students must be placed, not re-admitted", user=user)

    existing = find_duplicate(student.name, student.class_name, exclude=student)
    if existing:
        raise DuplicateRecordError(
            "Duplicate student detected",
            details={'existing_student': {'id': existing.pk, 'access_number': existing.access_number}},
        )

    student.access_number = access_numbers.allocate_access_number(
        student.class_name, student.stream, original=student.access_number, exclude=student
    )
    student.status = 're-admitted'
    student.flag_comment = comment or ''
    student.save(update_fields=['access_number', 'status', 'flag_comment', 'updated_at'])
    access_numbers.consume_access_number(student.access_number)

    logger.info(f"Student {student.name} re-admitted as {student.access_number}")
    return student


@transaction.atomic
def delete_student(student, user=None):
    if student.admitted_by == 'overseer':
        raise PermissionDeniedError(
            "Students admitted by the sponsorships overseer cannot be deleted",
            user=user
        )

    access_numbers.release_access_number(student, reason="Student deleted")
    logger.info(
        f"Student deleted: {student.name} ({student.access_number}) "
        f"by {getattr(user, 'username', 'system')}"
    )
    student.delete()


def add_conduct_note(student, content, note_type, author):
    content = (content or '').strip()
    errors = {}
    if not content:
        errors['content'] = 'Content is required'
    elif len(content) > settings.CONDUCT_NOTE_MAX_LENGTH:
        errors['content'] = f'Content must be at most {settings.CONDUCT_NOTE_MAX_LENGTH} characters'
    if note_type not in Student.CONDUCT_NOTE_TYPES:
        errors['type'] = f"Type must be one of: {', '.join(Student.CONDUCT_NOTE_TYPES)}"
    if not author:
        errors['author'] = 'Author is required'
    if errors:
        raise DataValidationError(next(iter(errors.values())), validation_errors=errors)

    now = timezone.now().isoformat()
    note = {
        'id': uuid.uuid4().hex,
        'type': note_type,
        'content': content,
        'author': author,
        'created_at': now,
        'updated_at': now,
    }
    student.conduct_notes = list(student.conduct_notes or []) + [note]
    student.save(update_fields=['conduct_notes', 'updated_at'])
    return note


def assign_children(parent, students):
    created = 0
    for student in students:
        _, was_created = ParentAssignment.objects.get_or_create(parent=parent, student=student)
        created += int(was_created)
    logger.info(f"Assigned {created} students to parent {parent.username}")
    return created
