import logging

from django.http import HttpResponse
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege
from accounts.services import has_privilege
from core.exceptions import AccessNumberConflict, PermissionDeniedError, RecordNotFoundError
from core.filters import DroppedAccessNumberFilter, StudentFilter
from core.models import AcademicRecord, DroppedAccessNumber, Student
from core.serializers import (
    ConductNoteSerializer,
    DroppedAccessNumberSerializer,
    PaymentPeriodSerializer,
    StudentFlagSerializer,
    StudentPlacementSerializer,
    StudentPaymentSerializer,
    StudentSerializer,
)
from core.services import access_numbers, students as student_service
from core.services.documents import render_report_card
from core.services.fees import fee_breakdown
from core.services.payments import payment_summary, record_student_payment

from .base_views import scope_students

logger = logging.getLogger(__name__)

ADMITTED_BY_ROLE = {
    'SPONSORSHIPS_OVERSEER': 'overseer',
    'SECRETARY': 'secretary',
}


class StudentViewSet(viewsets.ModelViewSet):
    """Student records, admissions and roll changes"""
    serializer_class = StudentSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = StudentFilter
    search_fields = ['name', 'access_number', 'admission_id', 'parent_name']
    ordering_fields = ['name', 'access_number', 'class_name', 'created_at']
    privilege_map = {
        'list': 'view_students',
        'retrieve': ('view_students', 'view_student_details'),
        'enrolled': 'view_students',
        'fee_balance': ('view_financial', 'view_student_details'),
        'pay': 'record_payment',
        'payments': ('view_payments', 'view_financial'),
        'payment_summary': ('view_payments', 'view_financial'),
        'create': ('add_student', 'admit_from_overseer'),
        'update': 'edit_student',
        'partial_update': 'edit_student',
        'destroy': 'delete_student',
        'flag': ('flag_student', 're_admit_student'),
        'place': 'admit_from_overseer',
        'conduct_notes': ('view_student_details', 'edit_student_conduct'),
        'report_card': 'view_report_cards',
    }

    def get_queryset(self):
        queryset = Student.objects.select_related('created_by').all()
        return scope_students(queryset, self.request.user)

    def perform_create(self, serializer):
        data = dict(serializer.validated_data)
        user = self.request.user
        data['admitted_by'] = ADMITTED_BY_ROLE.get(user.role, data.get('admitted_by') or 'admin')
        serializer.instance = student_service.admit_student(data, user)

    def perform_update(self, serializer):
        student = serializer.instance
        data = serializer.validated_data
        data.pop('original_access_number', None)
        if data.get('total_fees') is None:
            data.pop('total_fees', None)

        new_number = data.get('access_number')
        if new_number and new_number != student.access_number:
            if access_numbers.is_number_in_use(new_number, exclude=student):
                raise AccessNumberConflict(
                    f"Access number {new_number} is already in use",
                    details={'access_number': new_number},
                )
            access_numbers.consume_access_number(new_number)

        serializer.save()
        logger.info(f"Student {student.name} updated by {self.request.user.username}")

    def destroy(self, request, *args, **kwargs):
        student = self.get_object()
        student_service.delete_student(student, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def enrolled(self, request):
        queryset = self.filter_queryset(self.get_queryset()).filter(status__in=Student.ON_ROLL_STATUSES)
        page = self.paginate_queryset(queryset)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(queryset, many=True).data)

    @action(detail=True, methods=['get'], url_path='fee-balance')
    def fee_balance(self, request, pk=None):
        return Response(fee_breakdown(self.get_object()))

    @action(detail=True, methods=['post'])
    def pay(self, request, pk=None):
        student = self.get_object()
        serializer = StudentPaymentSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        details = dict(serializer.validated_data)
        amount = details.pop('amount')
        payment = record_student_payment(student, amount, received_by=request.user, **details)
        return Response(StudentPaymentSerializer(payment).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'])
    def payments(self, request, pk=None):
        student = self.get_object()
        return Response(StudentPaymentSerializer(
            student.payments.select_related('student', 'received_by'), many=True
        ).data)

    @action(detail=True, methods=['get'], url_path='payment-summary')
    def payment_summary(self, request, pk=None):
        student = self.get_object()
        period = PaymentPeriodSerializer(data=request.query_params)
        period.is_valid(raise_exception=True)
        return Response(payment_summary(
            student, term=period.validated_data.get('term'), year=period.validated_data.get('year')
        ))

    @action(detail=True, methods=['post'])
    def flag(self, request, pk=None):
        student = self.get_object()
        serializer = StudentFlagSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']

        required = 're_admit_student' if new_status == 're-admitted' else 'flag_student'
        if not has_privilege(request.user, required):
            raise PermissionDeniedError(
                f"You need the {required} privilege for this change",
                required_privilege=required,
                user=request.user,
            )

        student_service.flag_student(
            student, new_status, serializer.validated_data['comment'], user=request.user
        )
        return Response(self.get_serializer(student).data)

    @action(detail=True, methods=['post'])
    def place(self, request, pk=None):
        if request.user.role == 'SPONSORSHIPS_OVERSEER':
            raise PermissionDeniedError(
                "Pending students are placed by the school administration", user=request.user
            )
        student = self.get_object()
        serializer = StudentPlacementSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        student_service.place_pending_student(
            student,
            serializer.validated_data['stream'],
            class_name=serializer.validated_data.get('class_name'),
            user=request.user,
        )
        return Response(self.get_serializer(student).data)

    @action(detail=True, methods=['get', 'post'], url_path='conduct-notes')
    def conduct_notes(self, request, pk=None):
        student = self.get_object()
        if request.method == 'GET':
            return Response(student.conduct_notes or [])

        if not has_privilege(request.user, 'edit_student_conduct'):
            raise PermissionDeniedError(
                "You cannot add conduct notes", required_privilege='edit_student_conduct', user=request.user
            )
        serializer = ConductNoteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        note = student_service.add_conduct_note(
            student,
            serializer.validated_data['content'],
            serializer.validated_data['type'],
            serializer.validated_data.get('author') or request.user.display_name,
        )
        return Response(note, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='report-card')
    def report_card(self, request, pk=None):
        student = self.get_object()
        term = request.query_params.get('term')
        year = request.query_params.get('year')

        records = AcademicRecord.objects.select_related('student').filter(student=student)
        if term:
            records = records.filter(term=term)
        if year:
            records = records.filter(year=year)
        record = records.order_by('-year', '-term').first()
        if record is None:
            raise RecordNotFoundError(
                f"No academic record for {student.name}"
                + (f" in {term} {year}" if term and year else '')
            )

        return HttpResponse(render_report_card(record), content_type='text/html; charset=utf-8')


class DroppedAccessNumberViewSet(mixins.ListModelMixin,
                                 mixins.RetrieveModelMixin,
                                 mixins.DestroyModelMixin,
                                 viewsets.GenericViewSet):
    """Access numbers waiting to be reused"""
    queryset = DroppedAccessNumber.objects.all()
    serializer_class = DroppedAccessNumberSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = DroppedAccessNumberFilter
    privilege_map = {
        'list': 'view_students',
        'retrieve': 'view_students',
        'destroy': 'delete_student',
    }

    def perform_destroy(self, instance):
        logger.info(f"Dropped access number {instance.access_number} discarded by {self.request.user.username}")
        instance.delete()
