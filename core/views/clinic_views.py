import logging

from rest_framework import viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege
from accounts.services import has_privilege
from core.exceptions import DataValidationError, PermissionDeniedError
from core.filters import ClinicRecordFilter
from core.models import ClinicRecord
from core.serializers import ClinicRecordSerializer
from core.services.clinic import notify_parents_of_visit, record_visit

logger = logging.getLogger(__name__)


class ClinicRecordViewSet(viewsets.ModelViewSet):
    serializer_class = ClinicRecordSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = ClinicRecordFilter
    ordering_fields = ['visit_date', 'created_at']
    privilege_map = {
        'list': 'view_clinic_records',
        'retrieve': 'view_clinic_records',
        'date_range': 'view_clinic_records',
        'create': 'add_clinic_record',
        'update': 'edit_clinic_record',
        'partial_update': 'edit_clinic_record',
        'destroy': 'delete_clinic_record',
        'notify_parent': 'notify_clinic_visits',
    }

    def get_queryset(self):
        return ClinicRecord.objects.select_related('student', 'nurse').order_by(
            '-visit_date', '-visit_time', '-id'
        )

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        notify_parent = data.pop('notify_parent', False)
        if notify_parent and not has_privilege(self.request.user, 'notify_clinic_visits'):
            raise PermissionDeniedError(
                "You cannot notify parents of clinic visits",
                required_privilege='notify_clinic_visits',
                user=self.request.user,
            )
        serializer.instance = record_visit(self.request.user, notify_parent=notify_parent, **data)

    def perform_update(self, serializer):
        serializer.validated_data.pop('notify_parent', None)
        record = serializer.save()
        logger.info(f"Clinic record {record.pk} updated by {self.request.user.username}")

    @action(detail=False, methods=['get'], url_path='date-range')
    def date_range(self, request):
        if not (request.query_params.get('date_from') and request.query_params.get('date_to')):
            raise DataValidationError(
                "Both date_from and date_to are required",
                validation_errors={'date_from': 'required', 'date_to': 'required'},
            )
        queryset = self.filter_queryset(self.get_queryset())
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=['post'], url_path='notify-parent')
    def notify_parent(self, request, pk=None):
        record = self.get_object()
        notified = notify_parents_of_visit(record)
        return Response({'notified': notified, 'parent_notified': record.parent_notified})
