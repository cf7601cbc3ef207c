# core/filters.py
import django_filters
from django.db.models import Q

from .models import (
    AcademicRecord,
    AttendanceRecord,
    ClinicRecord,
    DroppedAccessNumber,
    Message,
    Staff,
    Student,
    TimetableEntry,
    WeeklyReport,
)


class StudentFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search')
    class_name = django_filters.CharFilter()
    stream = django_filters.CharFilter(lookup_expr='iexact')

    class Meta:
        model = Student
        fields = ['status', 'class_name', 'stream', 'residence_type', 'gender', 'admitted_by']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(name__icontains=value)
            | Q(access_number__icontains=value)
            | Q(admission_id__icontains=value)
        )


class DroppedAccessNumberFilter(django_filters.FilterSet):
    class Meta:
        model = DroppedAccessNumber
        fields = ['class_name', 'stream_name']


class ClinicRecordFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='visit_date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='visit_date', lookup_expr='lte')
    search = django_filters.CharFilter(method='filter_search')

    class Meta:
        model = ClinicRecord
        fields = ['student', 'status', 'nurse', 'follow_up_required']

    def filter_search(self, queryset, name, value):
        return queryset.filter(
            Q(student__name__icontains=value)
            | Q(symptoms__icontains=value)
            | Q(diagnosis__icontains=value)
        )


class StaffFilter(django_filters.FilterSet):
    role = django_filters.CharFilter(lookup_expr='icontains')

    class Meta:
        model = Staff
        fields = ['role']


class TimetableFilter(django_filters.FilterSet):
    class Meta:
        model = TimetableEntry
        fields = ['teacher', 'class_name', 'stream_name', 'day']


class AcademicRecordFilter(django_filters.FilterSet):
    class_name = django_filters.CharFilter(field_name='student__class_name')
    stream = django_filters.CharFilter(field_name='student__stream', lookup_expr='iexact')

    class Meta:
        model = AcademicRecord
        fields = ['student', 'term', 'year', 'teacher']


class MessageFilter(django_filters.FilterSet):
    folder = django_filters.ChoiceFilter(
        choices=[('inbox', 'Inbox'), ('sent', 'Sent')], method='filter_folder'
    )

    class Meta:
        model = Message
        fields = ['message_type', 'priority', 'is_read', 'is_approved']

    def filter_folder(self, queryset, name, value):
        user = self.request.user
        if value == 'sent':
            return queryset.filter(sender=user)
        return queryset.filter(recipient=user)


class WeeklyReportFilter(django_filters.FilterSet):
    week_from = django_filters.DateFilter(field_name='week_start', lookup_expr='gte')
    week_to = django_filters.DateFilter(field_name='week_start', lookup_expr='lte')

    class Meta:
        model = WeeklyReport
        fields = ['user', 'report_type', 'status']


class AttendanceFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='lte')
    class_name = django_filters.CharFilter(field_name='student__class_name')
    stream = django_filters.CharFilter(field_name='student__stream', lookup_expr='iexact')

    class Meta:
        model = AttendanceRecord
        fields = ['student', 'status', 'date', 'recorded_by']
