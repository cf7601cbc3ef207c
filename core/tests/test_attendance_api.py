import datetime

from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.exceptions import DataValidationError
from core.models import AttendanceRecord, Notification
from core.services.attendance import PLACEHOLDER_REMARKS, ensure_daily_attendance, mark_attendance
from core.tasks import create_daily_attendance_placeholders
from core.tests.factories import (
    AdminFactory,
    AttendanceRecordFactory,
    NurseFactory,
    ParentAssignmentFactory,
    StudentFactory,
    UserFactory,
)

SCHOOL_DAY = datetime.date(2024, 5, 6)


class MarkAttendanceTest(TestCase):
    def setUp(self):
        self.student = StudentFactory()
        self.teacher = UserFactory()

    def test_first_mark_creates_record(self):
        record, created = mark_attendance(self.student, 'present', recorded_by=self.teacher, date=SCHOOL_DAY)

        self.assertTrue(created)
        self.assertTrue(record.is_present)
        self.assertEqual(record.recorded_by, self.teacher)
        self.assertIsNotNone(record.time)

    def test_second_mark_same_day_updates(self):
        mark_attendance(self.student, 'present', date=SCHOOL_DAY)

        record, created = mark_attendance(self.student, 'late', date=SCHOOL_DAY, remarks='Bus delay')

        self.assertFalse(created)
        self.assertEqual(AttendanceRecord.objects.count(), 1)
        self.assertEqual((record.status, record.remarks), ('late', 'Bus delay'))

    def test_unknown_status_rejected(self):
        with self.assertRaises(DataValidationError):
            mark_attendance(self.student, 'truant', date=SCHOOL_DAY)
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_absence_notifies_parents_when_asked(self):
        parent = ParentAssignmentFactory(student=self.student).parent

        record, _ = mark_attendance(self.student, 'absent', date=SCHOOL_DAY, notify_parent=True)

        self.assertTrue(record.notification_sent)
        notification = Notification.objects.get(recipient=parent)
        self.assertEqual(notification.notification_type, 'WARNING')
        self.assertIn('absent', notification.title)

    def test_present_mark_never_notifies(self):
        ParentAssignmentFactory(student=self.student)

        record, _ = mark_attendance(self.student, 'excused', date=SCHOOL_DAY, notify_parent=True)

        self.assertFalse(record.notification_sent)
        self.assertFalse(Notification.objects.exists())


class DailyPlaceholderTest(TestCase):
    def test_placeholders_only_for_unmarked_students_on_roll(self):
        marked = StudentFactory()
        unmarked = StudentFactory()
        StudentFactory(status='left')
        AttendanceRecordFactory(student=marked, date=SCHOOL_DAY)

        result = ensure_daily_attendance(SCHOOL_DAY)

        self.assertEqual(result, {'date': SCHOOL_DAY, 'created': 1, 'total_students': 2})
        placeholder = AttendanceRecord.objects.get(student=unmarked)
        self.assertEqual(placeholder.status, 'not_marked')
        self.assertEqual(placeholder.remarks, PLACEHOLDER_REMARKS)

    def test_running_twice_adds_nothing(self):
        StudentFactory()
        ensure_daily_attendance(SCHOOL_DAY)
        self.assertEqual(ensure_daily_attendance(SCHOOL_DAY)['created'], 0)

    def test_task_reports_today(self):
        StudentFactory()
        result = create_daily_attendance_placeholders()
        self.assertEqual(result['created'], 1)


class AttendanceAPITestCase(APITestCase):
    def setUp(self):
        self.teacher = UserFactory(assigned_classes=[{'class_name': 'Senior 1', 'stream_name': 'A'}])
        self.student = StudentFactory()
        self.other_class = StudentFactory(class_name='Senior 2')
        self.client.force_authenticate(self.teacher)

    def test_teacher_marks_student_in_their_class(self):
        response = self.client.post(reverse('attendance-list'), {
            'student': self.student.pk, 'status': 'present', 'date': '2024-05-06',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['recorded_by'], self.teacher.pk)

    def test_marking_again_updates_the_day(self):
        AttendanceRecordFactory(student=self.student, date=SCHOOL_DAY)

        response = self.client.post(reverse('attendance-list'), {
            'student': self.student.pk, 'status': 'sick', 'date': '2024-05-06',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AttendanceRecord.objects.get().status, 'sick')

    def test_teacher_cannot_mark_other_class(self):
        response = self.client.post(reverse('attendance-list'), {
            'student': self.other_class.pk, 'status': 'present',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertFalse(AttendanceRecord.objects.exists())

    def test_invalid_status_rejected(self):
        response = self.client.post(reverse('attendance-list'), {
            'student': self.student.pk, 'status': 'holiday',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_absence_with_parent_notification(self):
        parent = ParentAssignmentFactory(student=self.student).parent

        response = self.client.post(reverse('attendance-list'), {
            'student': self.student.pk, 'status': 'absent', 'notify_parent': True,
        }, format='json')

        self.assertTrue(response.data['notification_sent'])
        self.assertTrue(Notification.objects.filter(recipient=parent, notification_type='WARNING').exists())

    def test_list_is_scoped_to_assigned_classes(self):
        AttendanceRecordFactory(student=self.student)
        AttendanceRecordFactory(student=self.other_class)

        response = self.client.get(reverse('attendance-list'))

        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['student'], self.student.pk)

    def test_parent_sees_only_their_child(self):
        parent = ParentAssignmentFactory(student=self.student).parent
        AttendanceRecordFactory(student=self.student)
        AttendanceRecordFactory(student=self.other_class)
        self.client.force_authenticate(parent)

        response = self.client.get(reverse('attendance-list'))

        self.assertEqual(response.data['count'], 1)

    def test_by_date_ordered_by_time(self):
        second = StudentFactory()
        AttendanceRecordFactory(student=self.student, date=SCHOOL_DAY, time=datetime.time(9, 0))
        AttendanceRecordFactory(student=second, date=SCHOOL_DAY, time=datetime.time(7, 45))
        AttendanceRecordFactory(student=self.student, date=SCHOOL_DAY + datetime.timedelta(days=1))

        response = self.client.get(reverse('attendance-by-date', kwargs={'date': '2024-05-06'}))

        self.assertEqual([row['student'] for row in response.data], [second.pk, self.student.pk])

    def test_by_date_rejects_impossible_date(self):
        response = self.client.get(reverse('attendance-by-date', kwargs={'date': '2024-13-40'}))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_status(self):
        AttendanceRecordFactory(student=self.student, date=SCHOOL_DAY, status='absent')
        AttendanceRecordFactory(student=StudentFactory(), date=SCHOOL_DAY, status='present')

        response = self.client.get(reverse('attendance-list'), {'status': 'absent'})

        self.assertEqual(response.data['count'], 1)

    def test_update_can_notify_parent(self):
        parent = ParentAssignmentFactory(student=self.student).parent
        record = AttendanceRecordFactory(student=self.student)

        response = self.client.patch(reverse('attendance-detail', args=[record.pk]), {
            'status': 'absent', 'notify_parent': True,
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Notification.objects.filter(recipient=parent).count(), 1)

    def test_teacher_cannot_delete(self):
        record = AttendanceRecordFactory(student=self.student)
        response = self.client.delete(reverse('attendance-detail', args=[record.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_deletes_and_ensures_daily(self):
        record = AttendanceRecordFactory(student=self.student, date=SCHOOL_DAY)
        self.client.force_authenticate(AdminFactory())

        deleted = self.client.delete(reverse('attendance-detail', args=[record.pk]))
        ensured = self.client.post(reverse('attendance-ensure-daily'), {'date': '2024-05-06'}, format='json')

        self.assertEqual(deleted.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(ensured.data['created'], 2)
        self.assertEqual(AttendanceRecord.objects.filter(status='not_marked').count(), 2)

    def test_nurse_has_no_attendance_access(self):
        self.client.force_authenticate(NurseFactory())
        response = self.client.get(reverse('attendance-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
