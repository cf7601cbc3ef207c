from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views.academic_views import AcademicRecordViewSet
from .views.attendance_views import AttendanceViewSet
from .views.clinic_views import ClinicRecordViewSet
from .views.message_views import MessageViewSet
from .views.notifications_views import NotificationViewSet
from .views.settings_views import ClassCatalogueView, SchoolSettingsView
from .views.staff_views import StaffViewSet
from .views.student_views import DroppedAccessNumberViewSet, StudentViewSet
from .views.timetable_views import TimetableViewSet
from .views.weekly_report_views import WeeklyReportViewSet

router = DefaultRouter()
router.register(r'students', StudentViewSet, basename='student')
router.register(r'dropped-access-numbers', DroppedAccessNumberViewSet, basename='dropped-access-number')
router.register(r'clinic-records', ClinicRecordViewSet, basename='clinic-record')
router.register(r'staff', StaffViewSet, basename='staff')
router.register(r'timetables', TimetableViewSet, basename='timetable')
router.register(r'academic-records', AcademicRecordViewSet, basename='academic-record')
router.register(r'messages', MessageViewSet, basename='message')
router.register(r'notifications', NotificationViewSet, basename='notification')
router.register(r'weekly-reports', WeeklyReportViewSet, basename='weekly-report')
router.register(r'attendance', AttendanceViewSet, basename='attendance')

urlpatterns = [
    path('settings/', SchoolSettingsView.as_view(), name='school-settings'),
    path('classes/', ClassCatalogueView.as_view(), name='classes'),
    path('', include(router.urls)),
]
