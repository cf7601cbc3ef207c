import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege
from core.filters import AcademicRecordFilter
from core.models import AcademicRecord
from core.serializers import AcademicRecordSerializer, AutoGradeSerializer, PositionsSerializer
from core.services import academics as academic_service
from core.services.grading import auto_grade_subjects, school_grade_system

from .base_views import scope_students

logger = logging.getLogger(__name__)

MARKS_ENTRY = ('add_student_marks', 'edit_student_marks')


class AcademicRecordViewSet(viewsets.ModelViewSet):
    """Term marks per student; saving the same student, term and year updates in place"""
    serializer_class = AcademicRecordSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = AcademicRecordFilter
    ordering_fields = ['percentage', 'position', 'year', 'term']
    privilege_map = {
        'list': ('view_student_marks', 'view_report_cards'),
        'retrieve': ('view_student_marks', 'view_report_cards'),
        'create': MARKS_ENTRY,
        'update': MARKS_ENTRY,
        'partial_update': MARKS_ENTRY,
        'destroy': 'edit_student_marks',
        'auto_grade': MARKS_ENTRY + ('view_student_marks',),
        'recompute_positions': ('edit_student_marks', 'generate_report_cards'),
    }

    def get_queryset(self):
        queryset = AcademicRecord.objects.select_related('student', 'teacher')
        return scope_students(queryset, self.request.user, prefix='student__')

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        record, created = academic_service.save_academic_record(
            data.pop('student'),
            data.pop('term'),
            data.pop('year'),
            data.pop('subjects', {}),
            teacher=request.user,
            **data,
        )
        return Response(
            self.get_serializer(record).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    def perform_update(self, serializer):
        record = serializer.save()
        academic_service.apply_grading(record)
        record.save(update_fields=['total_marks', 'total_possible', 'percentage', 'overall_grade', 'updated_at'])
        logger.info(f"Academic record {record.pk} updated by {self.request.user.username}")

    @action(detail=False, methods=['post'], url_path='auto-grade')
    def auto_grade(self, request):
        """Grade marks without saving them."""
        serializer = AutoGradeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        result = auto_grade_subjects(
            serializer.validated_data['subjects'],
            serializer.validated_data.get('totals'),
            school_grade_system(),
        )
        return Response(result)

    @action(detail=False, methods=['post'], url_path='recompute-positions')
    def recompute_positions(self, request):
        serializer = PositionsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        updated = academic_service.recompute_positions(
            serializer.validated_data['term'],
            serializer.validated_data['year'],
            class_name=serializer.validated_data.get('class_name') or None,
            stream=serializer.validated_data.get('stream') or None,
        )
        return Response({'updated': updated})
