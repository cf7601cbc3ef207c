from django.contrib import admin

from .models import (
    AcademicRecord,
    AttendanceRecord,
    ClinicRecord,
    DroppedAccessNumber,
    Message,
    Notification,
    ParentAssignment,
    SchoolSettings,
    Staff,
    StaffPayment,
    Student,
    StudentPayment,
    TimetableEntry,
    WeeklyReport,
)


@admin.register(Student)
class StudentAdmin(admin.ModelAdmin):
    list_display = ('name', 'access_number', 'admission_id', 'class_name', 'stream', 'status')
    search_fields = ('name', 'access_number', 'admission_id')
    list_filter = ('class_name', 'stream', 'status', 'residence_type', 'admitted_by')
    ordering = ('class_name', 'stream', 'name')
    readonly_fields = ('created_at', 'updated_at')


@admin.register(DroppedAccessNumber)
class DroppedAccessNumberAdmin(admin.ModelAdmin):
    list_display = ('access_number', 'class_name', 'stream_name', 'student_name', 'reason', 'dropped_at')
    list_filter = ('class_name',)


@admin.register(ParentAssignment)
class ParentAssignmentAdmin(admin.ModelAdmin):
    list_display = ('parent', 'student', 'assigned_at')
    search_fields = ('parent__username', 'student__name')
    raw_id_fields = ('parent', 'student')


@admin.register(StudentPayment)
class StudentPaymentAdmin(admin.ModelAdmin):
    list_display = ('receipt_number', 'student', 'amount', 'billing_type', 'method', 'term', 'year', 'paid_at')
    search_fields = ('receipt_number', 'student__name', 'reference')
    list_filter = ('method', 'term', 'year')
    raw_id_fields = ('student', 'received_by')
    readonly_fields = ('receipt_number', 'created_at')


@admin.register(AttendanceRecord)
class AttendanceRecordAdmin(admin.ModelAdmin):
    list_display = ('student', 'date', 'time', 'status', 'recorded_by', 'notification_sent')
    list_filter = ('status', 'date')
    search_fields = ('student__name', 'student__access_number')
    raw_id_fields = ('student', 'recorded_by')


@admin.register(ClinicRecord)
class ClinicRecordAdmin(admin.ModelAdmin):
    list_display = ('student', 'visit_date', 'status', 'nurse', 'follow_up_required', 'parent_notified')
    list_filter = ('status', 'follow_up_required', 'visit_date')
    search_fields = ('student__name', 'symptoms', 'diagnosis')
    raw_id_fields = ('student',)


class StaffPaymentInline(admin.TabularInline):
    model = StaffPayment
    extra = 0
    readonly_fields = ('paid_at', 'paid_by')


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    list_display = ('name', 'role', 'phone', 'start_date', 'contract_duration_months', 'amount_to_pay')
    search_fields = ('name', 'role', 'national_id')
    inlines = [StaffPaymentInline]


@admin.register(TimetableEntry)
class TimetableEntryAdmin(admin.ModelAdmin):
    list_display = ('day', 'start_time', 'end_time', 'subject', 'teacher', 'class_name', 'stream_name', 'room')
    list_filter = ('day', 'class_name', 'stream_name')
    ordering = ('day_index', 'start_time')


@admin.register(AcademicRecord)
class AcademicRecordAdmin(admin.ModelAdmin):
    list_display = ('student', 'term', 'year', 'percentage', 'overall_grade', 'position')
    list_filter = ('term', 'year', 'overall_grade')
    search_fields = ('student__name', 'student__access_number')
    raw_id_fields = ('student',)


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ('subject', 'sender', 'recipient', 'message_type', 'priority', 'is_read', 'is_approved', 'created_at')
    list_filter = ('message_type', 'priority', 'is_approved')
    search_fields = ('subject', 'sender__username', 'recipient__username')


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ('title', 'recipient', 'notification_type', 'is_read', 'created_at')
    list_filter = ('notification_type', 'is_read')


@admin.register(WeeklyReport)
class WeeklyReportAdmin(admin.ModelAdmin):
    list_display = ('user', 'week_start', 'week_end', 'report_type', 'status', 'submitted_at')
    list_filter = ('report_type', 'status')


@admin.register(SchoolSettings)
class SchoolSettingsAdmin(admin.ModelAdmin):
    list_display = ('display_name', 'current_term', 'current_year', 'updated_at')

    def has_add_permission(self, request):
        return not SchoolSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False
