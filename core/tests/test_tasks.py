import datetime
from io import StringIO

from django.core.management import CommandError, call_command
from django.test import TestCase, override_settings
from django.utils import timezone

from core.models import AcademicRecord, Notification
from core.tasks import purge_read_notifications, send_clinic_follow_up_reminders
from core.tests.factories import AcademicRecordFactory, ClinicRecordFactory, NotificationFactory, StudentFactory


class PurgeReadNotificationsTest(TestCase):
    @override_settings(NOTIFICATION_RETENTION_DAYS=30)
    def test_only_old_read_notifications_are_deleted(self):
        old_read = NotificationFactory(is_read=True)
        old_unread = NotificationFactory()
        recent_read = NotificationFactory(is_read=True)
        Notification.objects.filter(pk__in=[old_read.pk, old_unread.pk]).update(
            created_at=timezone.now() - datetime.timedelta(days=45)
        )

        self.assertEqual(purge_read_notifications(), 1)
        self.assertEqual(
            set(Notification.objects.values_list('pk', flat=True)), {old_unread.pk, recent_read.pk}
        )


class ClinicReminderTaskTest(TestCase):
    def test_task_sends_overdue_reminders(self):
        ClinicRecordFactory(
            follow_up_required=True, follow_up_date=timezone.localdate() - datetime.timedelta(days=1)
        )
        self.assertEqual(send_clinic_follow_up_reminders(), 1)


class ManagementCommandTest(TestCase):
    def test_recompute_positions_command(self):
        AcademicRecordFactory(student=StudentFactory(), percentage=70, total_marks=140)
        AcademicRecordFactory(student=StudentFactory(), percentage=80, total_marks=160)
        out = StringIO()

        call_command('recompute_positions', '--term', 'Term 1', '--year', '2024', stdout=out)

        self.assertIn('Updated positions for 2 records', out.getvalue())
        self.assertEqual(
            list(AcademicRecord.objects.order_by('position').values_list('percentage', flat=True)), [80, 70]
        )

    def test_follow_up_command_rejects_bad_date(self):
        with self.assertRaises(CommandError):
            call_command('send_clinic_followup_reminders', '--date', '08/05/2024', stdout=StringIO())

    def test_follow_up_command_with_date(self):
        ClinicRecordFactory(follow_up_required=True, follow_up_date=datetime.date(2024, 5, 8))
        out = StringIO()

        call_command('send_clinic_followup_reminders', '--date', '2024-05-08', stdout=out)

        self.assertIn('Sent follow-up reminders for 1 clinic visits', out.getvalue())
