import logging
from collections import OrderedDict

from django.db.models import Q
from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege, is_teacher
from core.exceptions import DataValidationError
from core.filters import TimetableFilter
from core.models import DAY_CHOICES, TimetableEntry
from core.serializers import TimetableEntrySerializer

from .base_views import assigned_class_filter, can_manage

logger = logging.getLogger(__name__)

MANAGE_TIMETABLE = ('add_timetable', 'edit_timetable', 'delete_timetable')


class TimetableViewSet(viewsets.ModelViewSet):
    serializer_class = TimetableEntrySerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = TimetableFilter
    ordering_fields = ['day_index', 'start_time', 'class_name']
    privilege_map = {
        'list': 'view_timetables',
        'retrieve': 'view_timetables',
        'grid': 'view_timetables',
        'create': MANAGE_TIMETABLE,
        'update': MANAGE_TIMETABLE,
        'partial_update': MANAGE_TIMETABLE,
        'destroy': MANAGE_TIMETABLE,
    }

    def get_queryset(self):
        user = self.request.user
        queryset = TimetableEntry.objects.select_related('teacher').order_by('day_index', 'start_time')
        if is_teacher(user) and not can_manage(user, *MANAGE_TIMETABLE):
            queryset = queryset.filter(
                assigned_class_filter(user, 'class_name', 'stream_name') | Q(teacher=user)
            )
        return queryset

    def perform_create(self, serializer):
        entry = serializer.save()
        logger.info(f"Timetable entry {entry} created by {self.request.user.username}")

    def perform_destroy(self, instance):
        logger.info(f"Timetable entry {instance} deleted by {self.request.user.username}")
        instance.delete()

    @action(detail=False, methods=['get'])
    def grid(self, request):
        """Entries for one class (and stream) keyed by day, Monday to Friday."""
        class_name = request.query_params.get('class_name')
        if not class_name:
            raise DataValidationError("class_name is required", validation_errors={'class_name': 'required'})
        stream_name = request.query_params.get('stream_name')

        entries = self.get_queryset().filter(class_name=class_name)
        if stream_name:
            entries = entries.filter(stream_name__iexact=stream_name)

        grid = OrderedDict((day, []) for day, _ in DAY_CHOICES)
        for entry in entries:
            grid[entry.day].append(self.get_serializer(entry).data)

        return Response({'class_name': class_name, 'stream_name': stream_name or '', 'days': grid})
