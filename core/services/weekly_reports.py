# core/services/weekly_reports.py
"""
Weekly report submission and summaries.
"""
import logging
from collections import OrderedDict
from datetime import timedelta

from django.db.models import Count
from django.utils import timezone

from core.exceptions import DataValidationError
from core.models import WeeklyReport
from core.services.notifications import notify_admins

logger = logging.getLogger(__name__)


def submit_weekly_report(user, **data):
    if not (data.get('content') or '').strip():
        raise DataValidationError("Content is required", validation_errors={'content': 'required'})
    if not data.get('week_start'):
        raise DataValidationError("Week start is required", validation_errors={'week_start': 'required'})

    report = WeeklyReport.objects.create(user=user, **data)

    notify_admins(
        "New Weekly Report Submitted",
        f"{user.display_name} ({user.role_display}) submitted a report for the week of "
        f"{report.week_start:%d %b %Y}.",
        notification_type='WEEKLY_REPORT',
        link=f"/weekly-reports/{report.pk}",
    )
    logger.info(f"Weekly report {report.pk} submitted by {user.username}")
    return report


def group_by_month(reports):
    """
    ``[{"month": "2024-05", "weeks": [{"week_start": ..., "reports": [...],
    "count": n, "submitters": m}, ...]}, ...]`` newest first.
    """
    months = OrderedDict()
    for report in sorted(reports, key=lambda r: (r.week_start, r.submitted_at), reverse=True):
        month_key = f"{report.week_start:%Y-%m}"
        weeks = months.setdefault(month_key, OrderedDict())
        weeks.setdefault(report.week_start, []).append(report)

    grouped = []
    for month_key, weeks in months.items():
        grouped.append({
            'month': month_key,
            'weeks': [
                {
                    'week_start': week_start,
                    'week_end': week_start + timedelta(days=6),
                    'reports': week_reports,
                    'count': len(week_reports),
                    'submitters': len({r.user_id for r in week_reports}),
                }
                for week_start, week_reports in weeks.items()
            ],
        })
    return grouped


def report_stats(queryset=None):
    queryset = queryset if queryset is not None else WeeklyReport.objects.all()
    total = queryset.count()
    this_week = queryset.filter(submitted_at__gte=timezone.now() - timedelta(days=7)).count()
    unique_users = queryset.values('user').distinct().count()
    by_type = dict(queryset.values_list('report_type').annotate(count=Count('id')))
    return {
        'total_reports': total,
        'this_week': this_week,
        'unique_users': unique_users,
        'average_per_user': round(total / unique_users, 2) if unique_users else 0,
        'by_type': by_type,
    }
