"""
Models package initialization.
Exports all models so they can be imported from core.models.
"""

from .base import (
    CLASS_CHOICES,
    CLASS_STREAMS,
    CLASS_SUBJECTS,
    DAY_CHOICES,
    GENDER_CHOICES,
    RESIDENCE_CHOICES,
    TERM_CHOICES,
)

from .configuration import SchoolSettings

from .student import DroppedAccessNumber, ParentAssignment, Student

from .financial import StudentPayment

from .attendance import AttendanceRecord

from .clinic import ClinicRecord

from .staff import Staff, StaffPayment

from .timetable import TimetableEntry

from .academic import AcademicRecord

from .communication import Message, Notification

from .reports import WeeklyReport

__all__ = [
    'CLASS_CHOICES',
    'CLASS_STREAMS',
    'CLASS_SUBJECTS',
    'DAY_CHOICES',
    'GENDER_CHOICES',
    'RESIDENCE_CHOICES',
    'TERM_CHOICES',
    'SchoolSettings',
    'Student',
    'DroppedAccessNumber',
    'ParentAssignment',
    'StudentPayment',
    'AttendanceRecord',
    'ClinicRecord',
    'Staff',
    'StaffPayment',
    'TimetableEntry',
    'AcademicRecord',
    'Message',
    'Notification',
    'WeeklyReport',
]
