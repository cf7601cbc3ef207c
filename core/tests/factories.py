# core/tests/factories.py
import datetime
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model
from django.utils import timezone
from factory.django import DjangoModelFactory

from core.models import (
    AcademicRecord,
    AttendanceRecord,
    ClinicRecord,
    Message,
    Notification,
    ParentAssignment,
    Staff,
    Student,
    StudentPayment,
    TimetableEntry,
    WeeklyReport,
)

User = get_user_model()


class UserFactory(DjangoModelFactory):
    class Meta:
        model = User
        skip_postgeneration_save = True

    username = factory.Sequence(lambda n: f'user{n}')
    email = factory.Sequence(lambda n: f'user{n}@school.com')
    first_name = factory.Faker('first_name')
    last_name = factory.Faker('last_name')
    role = 'TEACHER'

    @factory.post_generation
    def password(obj, create, extracted, **kwargs):
        obj.set_password(extracted or 'password')
        if create:
            obj.save(update_fields=['password'])


class AdminFactory(UserFactory):
    role = 'ADMIN'


class ParentFactory(UserFactory):
    role = 'PARENT'


class NurseFactory(UserFactory):
    role = 'NURSE'


class StudentFactory(DjangoModelFactory):
    class Meta:
        model = Student

    name = factory.Faker('name')
    access_number = factory.Sequence(lambda n: f'AA{n + 1:02d}')
    admission_id = factory.Sequence(lambda n: f'F24A{n + 1:02d}')
    age = 14
    gender = 'M'
    class_name = 'Senior 1'
    stream = 'A'
    residence_type = 'Day'
    total_fees = Decimal('500000')
    fees_paid = Decimal('0')
    status = 'active'


class ParentAssignmentFactory(DjangoModelFactory):
    class Meta:
        model = ParentAssignment

    parent = factory.SubFactory(ParentFactory)
    student = factory.SubFactory(StudentFactory)


class StudentPaymentFactory(DjangoModelFactory):
    class Meta:
        model = StudentPayment

    student = factory.SubFactory(StudentFactory)
    amount = Decimal('100000')
    billing_type = 'Tuition'
    method = 'cash'
    term = 'Term 1'
    year = 2024


class AttendanceRecordFactory(DjangoModelFactory):
    class Meta:
        model = AttendanceRecord

    student = factory.SubFactory(StudentFactory)
    date = factory.LazyFunction(timezone.localdate)
    time = datetime.time(8, 0)
    status = 'present'


class ClinicRecordFactory(DjangoModelFactory):
    class Meta:
        model = ClinicRecord

    student = factory.SubFactory(StudentFactory)
    nurse = factory.SubFactory(NurseFactory)
    visit_date = factory.LazyFunction(timezone.localdate)
    symptoms = 'Headache and fever'
    treatment = 'Paracetamol'


class StaffFactory(DjangoModelFactory):
    class Meta:
        model = Staff

    name = factory.Faker('name')
    role = 'Teacher'
    phone = '0772000000'
    contract_duration_months = 12
    start_date = datetime.date(2024, 1, 15)
    amount_to_pay = Decimal('800000')


class TimetableEntryFactory(DjangoModelFactory):
    class Meta:
        model = TimetableEntry

    day = 'Monday'
    start_time = datetime.time(8, 0)
    end_time = datetime.time(9, 0)
    subject = 'Mathematics'
    teacher = factory.SubFactory(UserFactory)
    class_name = 'Senior 1'
    stream_name = 'A'


class AcademicRecordFactory(DjangoModelFactory):
    class Meta:
        model = AcademicRecord

    student = factory.SubFactory(StudentFactory)
    term = 'Term 1'
    year = 2024
    subjects = factory.LazyFunction(lambda: {'Mathematics': 80, 'English': 70})


class MessageFactory(DjangoModelFactory):
    class Meta:
        model = Message

    sender = factory.SubFactory(UserFactory)
    recipient = factory.SubFactory(AdminFactory)
    subject = factory.Sequence(lambda n: f'Message {n}')
    content = factory.Faker('sentence')


class NotificationFactory(DjangoModelFactory):
    class Meta:
        model = Notification

    recipient = factory.SubFactory(UserFactory)
    title = factory.Sequence(lambda n: f'Notification {n}')
    message = factory.Faker('sentence')


class WeeklyReportFactory(DjangoModelFactory):
    class Meta:
        model = WeeklyReport

    user = factory.SubFactory(UserFactory)
    week_start = datetime.date(2024, 5, 6)
    content = factory.Faker('paragraph')
