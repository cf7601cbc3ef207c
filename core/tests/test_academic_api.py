from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.models import AcademicRecord
from core.tests.factories import AdminFactory, AcademicRecordFactory, StudentFactory, UserFactory


class AcademicRecordAPITestCase(APITestCase):
    def setUp(self):
        self.teacher = UserFactory(assigned_classes=[{'class_name': 'Senior 1', 'stream_name': 'A'}])
        self.student = StudentFactory()
        self.client.force_authenticate(self.teacher)

    def _post(self, subjects):
        return self.client.post(reverse('academic-record-list'), {
            'student': self.student.pk,
            'term': 'Term 1',
            'year': 2024,
            'subjects': subjects,
        }, format='json')

    def test_saving_twice_updates_the_record(self):
        created = self._post({'Mathematics': 78, 'English': 66})
        updated = self._post({'Mathematics': 88, 'English': 66})

        self.assertEqual(created.status_code, status.HTTP_201_CREATED)
        self.assertEqual(created.data['percentage'], 72)
        self.assertEqual(created.data['overall_grade'], 'B')
        self.assertEqual(created.data['teacher'], self.teacher.username)
        self.assertEqual(updated.status_code, status.HTTP_200_OK)
        self.assertEqual(updated.data['id'], created.data['id'])
        self.assertEqual(updated.data['percentage'], 77)
        self.assertEqual(AcademicRecord.objects.count(), 1)

    def test_negative_marks_rejected(self):
        response = self._post({'Mathematics': -5})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_patch_regrades(self):
        record = AcademicRecordFactory(student=self.student)

        response = self.client.patch(
            reverse('academic-record-detail', args=[record.pk]), {'subjects': {'Mathematics': 45}}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        record.refresh_from_db()
        self.assertEqual(record.percentage, 45)
        self.assertEqual(record.overall_grade, 'F')

    def test_teacher_sees_only_assigned_classes(self):
        AcademicRecordFactory(student=self.student)
        AcademicRecordFactory(student=StudentFactory(class_name='Senior 4', access_number='DA01'))

        response = self.client.get(reverse('academic-record-list'))

        self.assertEqual(response.data['count'], 1)

    def test_auto_grade_does_not_save(self):
        response = self.client.post(reverse('academic-record-auto-grade'), {
            'subjects': {'Mathematics': 40, 'Physics': 30},
            'totals': {'Physics': 50},
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['subject_grades']['Physics']['percentage'], 60)
        self.assertEqual(response.data['average_percentage'], 47)
        self.assertEqual(response.data['overall_grade'], 'F')
        self.assertFalse(AcademicRecord.objects.exists())

    def test_recompute_positions(self):
        self.client.force_authenticate(AdminFactory())
        self._post({'Mathematics': 60})
        other = StudentFactory(access_number='AA09')
        self.client.post(reverse('academic-record-list'), {
            'student': other.pk, 'term': 'Term 1', 'year': 2024, 'subjects': {'Mathematics': 90},
        }, format='json')

        response = self.client.post(
            reverse('academic-record-recompute-positions'),
            {'term': 'Term 1', 'year': 2024, 'class_name': 'Senior 1'},
            format='json',
        )

        self.assertEqual(response.data, {'updated': 2})
        self.assertEqual(AcademicRecord.objects.get(student=other).position, 1)
        self.assertEqual(AcademicRecord.objects.get(student=self.student).position, 2)

    def test_recompute_positions_requires_term_and_year(self):
        self.client.force_authenticate(AdminFactory())
        response = self.client.post(reverse('academic-record-recompute-positions'), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_parent_cannot_enter_marks(self):
        self.client.force_authenticate(UserFactory(role='PARENT'))
        response = self._post({'Mathematics': 90})
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
