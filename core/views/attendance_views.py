import logging

from django.utils.dateparse import parse_date
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege
from core.exceptions import DataValidationError, PermissionDeniedError
from core.filters import AttendanceFilter
from core.models import AttendanceRecord, Student
from core.serializers import AttendanceRecordSerializer, EnsureDailyAttendanceSerializer
from core.services.attendance import ensure_daily_attendance, mark_attendance, notify_parents_of_absence

from .base_views import scope_students

logger = logging.getLogger(__name__)


class AttendanceViewSet(viewsets.ModelViewSet):
    """Daily attendance marks, one per student per day"""
    serializer_class = AttendanceRecordSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = AttendanceFilter
    ordering_fields = ['date', 'time', 'status']
    privilege_map = {
        'list': 'view_attendance',
        'retrieve': 'view_attendance',
        'by_date': 'view_attendance',
        'create': 'mark_attendance',
        'update': 'mark_attendance',
        'partial_update': 'mark_attendance',
        'ensure_daily': 'mark_attendance',
        'destroy': 'delete_attendance',
    }

    def get_queryset(self):
        queryset = AttendanceRecord.objects.select_related('student', 'recorded_by')
        return scope_students(queryset, self.request.user, prefix='student__')

    def _check_student_in_scope(self, student):
        if not scope_students(Student.objects.filter(pk=student.pk), self.request.user).exists():
            raise PermissionDeniedError(
                f"You cannot mark attendance for {student.name}", user=self.request.user
            )

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        self._check_student_in_scope(data['student'])

        record, created = mark_attendance(
            data['student'],
            data['status'],
            recorded_by=request.user,
            date=data.get('date'),
            time=data.get('time'),
            remarks=data.get('remarks', ''),
            notify_parent=data.get('notify_parent', False),
        )
        return Response(
            self.get_serializer(record).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def perform_update(self, serializer):
        notify_parent = serializer.validated_data.pop('notify_parent', False)
        student = serializer.validated_data.get('student')
        if student is not None:
            self._check_student_in_scope(student)
        record = serializer.save(recorded_by=self.request.user)
        logger.info(f"Attendance {record.pk} updated by {self.request.user.username}: {record.status}")
        if notify_parent and not record.is_present:
            notify_parents_of_absence(record)

    def perform_destroy(self, instance):
        logger.info(
            f"Attendance for {instance.student.name} on {instance.date} deleted by {self.request.user.username}"
        )
        instance.delete()

    @action(detail=False, methods=['get'], url_path=r'date/(?P<date>\d{4}-\d{2}-\d{2})')
    def by_date(self, request, date=None):
        try:
            day = parse_date(date or '')
        except ValueError:
            day = None
        if day is None:
            raise DataValidationError(f"Invalid date: {date}", validation_errors={'date': 'invalid'})
        queryset = self.filter_queryset(self.get_queryset()).filter(date=day).order_by('time', 'id')
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=False, methods=['post'], url_path='ensure-daily')
    def ensure_daily(self, request):
        serializer = EnsureDailyAttendanceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(ensure_daily_attendance(serializer.validated_data.get('date')))
