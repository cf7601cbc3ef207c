import logging
import os

from django.http import FileResponse, HttpResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege
from accounts.services import has_privilege
from core.exceptions import PermissionDeniedError, RecordNotFoundError
from core.filters import StaffFilter
from core.models import Staff, StaffPayment
from core.serializers import StaffPaymentSerializer, StaffSerializer
from core.services.documents import render_appointment_letter
from core.services import staff as staff_service

logger = logging.getLogger(__name__)

UPLOAD_PRIVILEGES = {
    'cv': 'upload_staff_cv',
    'passport_photo': 'upload_staff_passport',
}


class StaffViewSet(viewsets.ModelViewSet):
    """HR records with payroll payments and appointment letters"""
    queryset = Staff.objects.all()
    serializer_class = StaffSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = StaffFilter
    search_fields = ['name', 'role', 'phone', 'email', 'national_id']
    ordering_fields = ['name', 'start_date', 'created_at']
    privilege_map = {
        'list': 'view_staff',
        'retrieve': 'view_staff',
        'create': 'add_staff',
        'update': 'edit_staff',
        'partial_update': 'edit_staff',
        'destroy': 'delete_staff',
        'pay': 'edit_staff',
        'payments': ('view_staff', 'view_payments'),
        'all_payments': ('view_staff', 'view_payments'),
        'payment_summary': ('view_staff', 'view_payments'),
        'cv': 'view_staff',
        'passport': 'view_staff',
        'appointment_letter': 'view_staff',
    }

    def _check_uploads(self, serializer):
        for field, privilege in UPLOAD_PRIVILEGES.items():
            if serializer.validated_data.get(field) and not has_privilege(self.request.user, privilege):
                raise PermissionDeniedError(
                    f"You cannot upload the {field.replace('_', ' ')}",
                    required_privilege=privilege,
                    user=self.request.user,
                )

    def perform_create(self, serializer):
        self._check_uploads(serializer)
        staff = serializer.save()
        logger.info(f"Staff record created for {staff.name} by {self.request.user.username}")

    def perform_update(self, serializer):
        self._check_uploads(serializer)
        staff = serializer.save()
        logger.info(f"Staff record {staff.pk} updated by {self.request.user.username}")

    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        staff = self.get_object()
        serializer = StaffPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        details = dict(serializer.validated_data)
        amount = details.pop('amount')
        payment = staff_service.pay_staff(staff, amount, paid_by=request.user, **details)
        return Response(StaffPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def payments(self, request, pk=None):
        staff = self.get_object()
        return Response(StaffPaymentSerializer(staff.payments.select_related('paid_by'), many=True).data)

    @action(detail=False, methods=['get'], url_path='payments', url_name='all-payments')
    def all_payments(self, request):
        queryset = StaffPayment.objects.select_related('staff', 'paid_by').all()
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(StaffPaymentSerializer(page, many=True).data)
        return Response(StaffPaymentSerializer(queryset, many=True).data)

    @action(detail=True, methods=['get'], url_path='payment-summary')
    def payment_summary(self, request, pk=None):
        summary = staff_service.payment_summary(self.get_object())
        last = summary['last_payment']
        summary['last_payment'] = StaffPaymentSerializer(last).data if last else None
        return Response(summary)

    def _file_response(self, file_field, label):
        if not file_field:
            raise RecordNotFoundError(f"No {label} uploaded")
        try:
            handle = file_field.open('rb')
        except FileNotFoundError:
            raise RecordNotFoundError(f"The stored {label} file is missing")
        return FileResponse(handle, as_attachment=True, filename=os.path.basename(file_field.name))

    @action(detail=True, methods=['get'])
    def cv(self, request, pk=None):
        return self._file_response(self.get_object().cv, 'CV')

    @action(detail=True, methods=['get'])
    def passport(self, request, pk=None):
        return self._file_response(self.get_object().passport_photo, 'passport photo')

    @action(detail=True, methods=['get'], url_path='appointment-letter')
    def appointment_letter(self, request, pk=None):
        html = render_appointment_letter(self.get_object())
        return HttpResponse(html, content_type='text/html; charset=utf-8')
