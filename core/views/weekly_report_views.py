import logging

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from accounts.permissions import HasPrivilege, is_admin
from accounts.services import has_privilege
from core.filters import WeeklyReportFilter
from core.models import WeeklyReport
from core.serializers import WeeklyReportSerializer
from core.services import weekly_reports as report_service

logger = logging.getLogger(__name__)


class WeeklyReportViewSet(viewsets.ModelViewSet):
    serializer_class = WeeklyReportSerializer
    permission_classes = [IsAuthenticated, HasPrivilege]
    filterset_class = WeeklyReportFilter
    search_fields = ['content']
    ordering_fields = ['week_start', 'submitted_at']
    privilege_map = {
        'create': 'submit_reports',
        'update': 'submit_reports',
        'partial_update': 'submit_reports',
        'review': 'review_weekly_reports',
        'stats': 'view_weekly_reports',
    }

    def get_queryset(self):
        user = self.request.user
        queryset = WeeklyReport.objects.select_related('user')
        if is_admin(user) and has_privilege(user, 'view_weekly_reports'):
            return queryset
        return queryset.filter(user=user)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        report = report_service.submit_weekly_report(request.user, **serializer.validated_data)
        return Response(self.get_serializer(report).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'])
    def review(self, request, pk=None):
        report = self.get_object()
        report.status = 'reviewed'
        report.save(update_fields=['status', 'updated_at'])
        logger.info(f"Weekly report {report.pk} reviewed by {request.user.username}")
        return Response(self.get_serializer(report).data)

    @action(detail=False, methods=['get'], url_path='by-month')
    def by_month(self, request):
        reports = self.filter_queryset(self.get_queryset())
        grouped = report_service.group_by_month(reports)
        for month in grouped:
            for week in month['weeks']:
                week['reports'] = self.get_serializer(week['reports'], many=True).data
        return Response(grouped)

    @action(detail=False, methods=['get'])
    def stats(self, request):
        return Response(report_service.report_stats(self.get_queryset()))
