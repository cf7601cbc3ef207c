# core/serializers.py
import copy

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from core.exceptions import GradingSystemException
from core.models import (
    CLASS_CHOICES,
    TERM_CHOICES,
    AcademicRecord,
    AttendanceRecord,
    ClinicRecord,
    DroppedAccessNumber,
    Message,
    Notification,
    SchoolSettings,
    Staff,
    StaffPayment,
    Student,
    StudentPayment,
    TimetableEntry,
    WeeklyReport,
)
from core.services.grading import build_grade_system

User = get_user_model()


# ===== STUDENTS =====

class StudentSummarySerializer(serializers.ModelSerializer):
    class Meta:
        model = Student
        fields = ['id', 'name', 'access_number', 'admission_id', 'class_name', 'stream', 'status']


class StudentSerializer(serializers.ModelSerializer):
    original_access_number = serializers.CharField(write_only=True, required=False, allow_blank=True)
    fee_balance = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)
    is_fully_paid = serializers.BooleanField(read_only=True)
    created_by = serializers.StringRelatedField()
    total_fees = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)

    class Meta:
        model = Student
        fields = [
            'id', 'name', 'access_number', 'original_access_number', 'admission_id',
            'date_of_birth', 'age', 'gender', 'class_name', 'stream', 'residence_type',
            'phone', 'email', 'address', 'medical_condition',
            'parent_name', 'parent_phone', 'parent_email', 'parent_relationship',
            'total_fees', 'fees_paid', 'fee_balance', 'is_fully_paid',
            'status', 'flag_comment', 'conduct_notes', 'admitted_by', 'created_by',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['status', 'flag_comment', 'conduct_notes', 'created_at', 'updated_at']

    def validate_admitted_by(self, value):
        if self.instance is not None and value != self.instance.admitted_by:
            raise serializers.ValidationError("Admission source cannot be changed")
        return value


class StudentFlagSerializer(serializers.Serializer):
    status = serializers.ChoiceField(
        choices=['left', 'expelled', 'suspended', 're-admitted'], required=False, default='left'
    )
    comment = serializers.CharField(required=False, allow_blank=True, default='')


class StudentPlacementSerializer(serializers.Serializer):
    stream = serializers.CharField()
    class_name = serializers.ChoiceField(choices=CLASS_CHOICES, required=False)


class ConductNoteSerializer(serializers.Serializer):
    content = serializers.CharField(allow_blank=True, trim_whitespace=True)
    type = serializers.CharField()
    author = serializers.CharField(required=False, allow_blank=True)


class DroppedAccessNumberSerializer(serializers.ModelSerializer):
    class Meta:
        model = DroppedAccessNumber
        fields = ['id', 'access_number', 'class_name', 'stream_name', 'student_name', 'reason', 'dropped_at']


# ===== FEE PAYMENTS =====

class StudentPaymentSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.name', read_only=True)
    received_by = serializers.StringRelatedField()

    class Meta:
        model = StudentPayment
        fields = [
            'id', 'student', 'student_name', 'amount', 'billing_type', 'method', 'reference',
            'description', 'receipt_number', 'term', 'year', 'paid_at', 'received_by',
        ]
        read_only_fields = ['student', 'receipt_number']
        extra_kwargs = {
            'billing_type': {'required': False, 'allow_blank': True},
            'paid_at': {'required': False},
        }


class PaymentPeriodSerializer(serializers.Serializer):
    term = serializers.ChoiceField(choices=TERM_CHOICES, required=False)
    year = serializers.IntegerField(required=False, min_value=2000, max_value=2100)


# ===== ATTENDANCE =====

class AttendanceRecordSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.name', read_only=True)
    recorded_by_name = serializers.CharField(source='recorded_by.display_name', read_only=True, default=None)
    notify_parent = serializers.BooleanField(write_only=True, required=False, default=False)

    class Meta:
        model = AttendanceRecord
        fields = [
            'id', 'student', 'student_name', 'date', 'time', 'status', 'remarks',
            'recorded_by', 'recorded_by_name', 'notification_sent', 'notify_parent',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['recorded_by', 'notification_sent', 'created_at', 'updated_at']
        # Marking the same student twice on a day updates the first mark
        validators = []


class EnsureDailyAttendanceSerializer(serializers.Serializer):
    date = serializers.DateField(required=False)


# ===== CLINIC =====

class ClinicRecordSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.name', read_only=True)
    nurse_name = serializers.CharField(source='nurse.display_name', read_only=True)
    notify_parent = serializers.BooleanField(write_only=True, required=False, default=False)

    class Meta:
        model = ClinicRecord
        fields = [
            'id', 'student', 'student_name', 'visit_date', 'visit_time', 'symptoms',
            'diagnosis', 'treatment', 'medication', 'cost', 'nurse', 'nurse_name',
            'follow_up_required', 'follow_up_date', 'parent_notified', 'status', 'notes',
            'notify_parent', 'created_at', 'updated_at',
        ]
        read_only_fields = ['nurse', 'parent_notified', 'created_at', 'updated_at']

    def validate_cost(self, value):
        if value is not None and value < 0:
            raise serializers.ValidationError("Cost cannot be negative")
        return value


# ===== STAFF =====

class StaffSerializer(serializers.ModelSerializer):
    class Meta:
        model = Staff
        fields = [
            'id', 'name', 'phone', 'email', 'role', 'date_of_birth', 'village',
            'next_of_kin', 'next_of_kin_phone', 'national_id', 'medical_issues',
            'contract_duration_months', 'start_date', 'amount_to_pay',
            'bank_name', 'bank_account_name', 'bank_account_number',
            'mobile_money_provider', 'mobile_money_number', 'hr_notes',
            'cv', 'passport_photo', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_name(self, value):
        if not value.strip():
            raise serializers.ValidationError("Name is required")
        return value.strip()

    def _validate_upload(self, value):
        if value and getattr(value, 'size', 0) > settings.MAX_UPLOAD_SIZE:
            raise serializers.ValidationError(
                f"File too large. Maximum size is {settings.MAX_UPLOAD_SIZE // (1024 * 1024)}MB"
            )
        return value

    def validate_cv(self, value):
        return self._validate_upload(value)

    def validate_passport_photo(self, value):
        return self._validate_upload(value)


class StaffPaymentSerializer(serializers.ModelSerializer):
    staff_name = serializers.CharField(source='staff.name', read_only=True)
    paid_by = serializers.StringRelatedField()

    class Meta:
        model = StaffPayment
        fields = ['id', 'staff', 'staff_name', 'amount', 'period', 'method', 'reference', 'notes', 'paid_at', 'paid_by']
        read_only_fields = ['staff', 'paid_at']


# ===== TIMETABLES =====

class TimetableEntrySerializer(serializers.ModelSerializer):
    teacher_name = serializers.CharField(source='teacher.display_name', read_only=True)
    duration_minutes = serializers.IntegerField(read_only=True)

    class Meta:
        model = TimetableEntry
        fields = [
            'id', 'day', 'start_time', 'end_time', 'duration_minutes', 'subject',
            'teacher', 'teacher_name', 'class_name', 'stream_name', 'room',
        ]

    def validate(self, attrs):
        instance = copy.copy(self.instance) if self.instance else TimetableEntry()
        for field, value in attrs.items():
            setattr(instance, field, value)
        try:
            instance.clean()
        except DjangoValidationError as e:
            raise serializers.ValidationError(e.message_dict)
        return attrs


# ===== ACADEMICS =====

class AcademicRecordSerializer(serializers.ModelSerializer):
    student_name = serializers.CharField(source='student.name', read_only=True)
    class_name = serializers.CharField(source='student.class_name', read_only=True)
    stream = serializers.CharField(source='student.stream', read_only=True)
    teacher = serializers.StringRelatedField()

    class Meta:
        model = AcademicRecord
        fields = [
            'id', 'student', 'student_name', 'class_name', 'stream', 'term', 'year',
            'subjects', 'subject_totals', 'total_marks', 'total_possible', 'percentage',
            'overall_grade', 'position', 'teacher', 'teacher_comment',
            'head_teacher_comment', 'created_at', 'updated_at',
        ]
        read_only_fields = [
            'total_marks', 'total_possible', 'percentage', 'overall_grade', 'position',
            'created_at', 'updated_at',
        ]
        # Saving the same (student, term, year) updates the existing record
        validators = []

    def _validate_marks_map(self, value, allow_zero=True):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Expected an object of subject to marks")
        for subject, marks in value.items():
            if isinstance(marks, bool) or not isinstance(marks, (int, float)):
                raise serializers.ValidationError(f"Marks for {subject} must be a number")
            if marks < 0 or (not allow_zero and marks == 0):
                raise serializers.ValidationError(f"Invalid value for {subject}: {marks}")
        return value

    def validate_subjects(self, value):
        return self._validate_marks_map(value)

    def validate_subject_totals(self, value):
        return self._validate_marks_map(value, allow_zero=False)


class AutoGradeSerializer(serializers.Serializer):
    subjects = serializers.DictField(child=serializers.FloatField(min_value=0))
    totals = serializers.DictField(child=serializers.FloatField(min_value=0), required=False)


class PositionsSerializer(serializers.Serializer):
    term = serializers.CharField()
    year = serializers.IntegerField()
    class_name = serializers.CharField(required=False, allow_blank=True)
    stream = serializers.CharField(required=False, allow_blank=True)


# ===== MESSAGING =====

class MessageSerializer(serializers.ModelSerializer):
    sender_name = serializers.CharField(source='sender.display_name', read_only=True)
    sender_role = serializers.CharField(source='sender.role', read_only=True)
    recipient_name = serializers.CharField(source='recipient.display_name', read_only=True, default=None)

    class Meta:
        model = Message
        fields = [
            'id', 'sender', 'sender_name', 'sender_role', 'recipient', 'recipient_name',
            'subject', 'content', 'message_type', 'priority', 'is_pinned', 'is_read',
            'read_at', 'requires_approval', 'is_approved', 'student', 'created_at',
        ]
        read_only_fields = fields


class SendMessageSerializer(serializers.Serializer):
    recipients = serializers.PrimaryKeyRelatedField(
        queryset=User.objects.filter(is_active=True), many=True, allow_empty=False
    )
    subject = serializers.CharField(max_length=200)
    content = serializers.CharField()
    message_type = serializers.ChoiceField(choices=Message.MESSAGE_TYPES, default='general')
    priority = serializers.ChoiceField(choices=Message.PRIORITY_CHOICES, default='normal')
    student = serializers.PrimaryKeyRelatedField(queryset=Student.objects.all(), required=False, allow_null=True)

    def to_internal_value(self, data):
        # A single ``recipient`` is accepted as shorthand
        if 'recipients' not in data and 'recipient' in data:
            data = data.copy()
            data['recipients'] = [data['recipient']]
        return super().to_internal_value(data)


class RecipientSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'username', 'display_name', 'role', 'role_display']


class NotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Notification
        fields = ['id', 'title', 'message', 'notification_type', 'link', 'is_read', 'read_at', 'created_at']
        read_only_fields = fields


# ===== WEEKLY REPORTS =====

class WeeklyReportSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.display_name', read_only=True)
    user_role = serializers.CharField(source='user.role', read_only=True)

    class Meta:
        model = WeeklyReport
        fields = [
            'id', 'user', 'user_name', 'user_role', 'week_start', 'week_end', 'report_type',
            'content', 'achievements', 'challenges', 'next_week_goals', 'status',
            'submitted_at', 'updated_at',
        ]
        read_only_fields = ['user', 'status', 'submitted_at', 'updated_at']
        extra_kwargs = {'week_end': {'required': False}}

    def _validate_list(self, value):
        if not isinstance(value, list):
            raise serializers.ValidationError("Expected a list")
        return [str(item) for item in value if str(item).strip()]

    def validate_achievements(self, value):
        return self._validate_list(value)

    def validate_challenges(self, value):
        return self._validate_list(value)

    def validate_next_week_goals(self, value):
        return self._validate_list(value)

    def validate(self, attrs):
        week_start = attrs.get('week_start') or getattr(self.instance, 'week_start', None)
        week_end = attrs.get('week_end')
        if week_start and week_end and week_end < week_start:
            raise serializers.ValidationError({'week_end': 'Week end cannot be before week start'})
        return attrs


# ===== SETTINGS =====

class SchoolSettingsSerializer(serializers.ModelSerializer):
    updated_by = serializers.StringRelatedField()

    class Meta:
        model = SchoolSettings
        exclude = ['id']
        read_only_fields = ['updated_at']

    def validate_grade_bands(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Expected an object keyed by grade")
        try:
            build_grade_system(value)
        except GradingSystemException as e:
            raise serializers.ValidationError(e.message)
        return value

    def validate_fee_structure(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError("Expected an object keyed by class name")
        for class_name, items in value.items():
            if not isinstance(items, list):
                raise serializers.ValidationError(f"Fee items for {class_name} must be a list")
            for item in items:
                if not isinstance(item, dict) or not item.get('name'):
                    raise serializers.ValidationError(f"Every fee item for {class_name} needs a name")
        return value
