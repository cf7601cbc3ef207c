from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from core.models import AcademicRecord, DroppedAccessNumber, Student
from core.tests.factories import (
    AdminFactory,
    ParentAssignmentFactory,
    ParentFactory,
    StudentFactory,
    UserFactory,
)


class StudentAPITestCase(APITestCase):
    def setUp(self):
        self.admin = AdminFactory()
        self.client.force_authenticate(self.admin)

    def test_admit_student(self):
        response = self.client.post(reverse('student-list'), {
            'name': 'Amina Nakato',
            'age': 13,
            'class_name': 'Senior 1',
            'stream': 'A',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['access_number'], 'AA01')
        self.assertEqual(response.data['status'], 'active')
        self.assertEqual(response.data['admitted_by'], 'admin')

    def test_duplicate_admission_returns_details(self):
        existing = StudentFactory(name='Amina Nakato')

        response = self.client.post(reverse('student-list'), {
            'name': 'amina nakato', 'age': 13, 'class_name': 'Senior 1', 'stream': 'B',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Duplicate student detected')
        self.assertEqual(response.data['details']['existing_student']['id'], existing.pk)

    def test_list_is_paginated_and_filterable(self):
        StudentFactory(class_name='Senior 1')
        StudentFactory(class_name='Senior 2', access_number='BA01')

        response = self.client.get(reverse('student-list'), {'class_name': 'Senior 2'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 1)
        self.assertEqual(response.data['results'][0]['class_name'], 'Senior 2')

    def test_enrolled_excludes_students_off_the_roll(self):
        StudentFactory()
        StudentFactory(status='left')

        response = self.client.get(reverse('student-enrolled'))

        self.assertEqual(response.data['count'], 1)

    def test_changing_to_taken_access_number_conflicts(self):
        StudentFactory(access_number='AA01')
        student = StudentFactory(access_number='AA02')

        response = self.client.patch(
            reverse('student-detail', args=[student.pk]), {'access_number': 'AA01'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)

    def test_flag_and_readmit(self):
        student = StudentFactory(access_number='AA01')
        StudentFactory(access_number='AA02')
        url = reverse('student-flag', args=[student.pk])

        response = self.client.post(url, {'status': 'left', 'comment': 'Transferred'}, format='json')
        self.assertEqual(response.data['status'], 'left')
        self.assertTrue(DroppedAccessNumber.objects.filter(access_number='AA01').exists())

        response = self.client.post(url, {'status': 're-admitted'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 're-admitted')
        self.assertEqual(response.data['access_number'], 'AA01')

    def test_flag_without_privilege(self):
        teacher = UserFactory()
        self.client.force_authenticate(teacher)

        response = self.client.post(
            reverse('student-flag', args=[StudentFactory().pk]), {'status': 'expelled'}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_delete_student(self):
        student = StudentFactory()

        response = self.client.delete(reverse('student-detail', args=[student.pk]))

        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Student.objects.filter(pk=student.pk).exists())

    def test_overseer_admissions_are_protected(self):
        student = StudentFactory(admitted_by='overseer')

        response = self.client.delete(reverse('student-detail', args=[student.pk]))

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertTrue(Student.objects.filter(pk=student.pk).exists())

    def test_fee_balance(self):
        student = StudentFactory(total_fees=500000, fees_paid=200000)

        response = self.client.get(reverse('student-fee-balance', args=[student.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['balance'], 300000)
        self.assertFalse(response.data['is_fully_paid'])


class OverseerAdmissionTestCase(APITestCase):
    def setUp(self):
        self.overseer = UserFactory(role='SPONSORSHIPS_OVERSEER')

    def test_overseer_admission_is_pending_until_placed(self):
        self.client.force_authenticate(self.overseer)
        response = self.client.post(reverse('student-list'), {
            'name': 'Brian Okello', 'age': 12, 'class_name': 'Senior 1',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['status'], 'pending')
        self.assertEqual(response.data['access_number'], '')
        self.assertEqual(response.data['admitted_by'], 'overseer')
        place_url = reverse('student-place', args=[response.data['id']])

        refused = self.client.post(place_url, {'stream': 'B'}, format='json')
        self.assertEqual(refused.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(AdminFactory())
        placed = self.client.post(place_url, {'stream': 'B'}, format='json')
        self.assertEqual(placed.status_code, status.HTTP_200_OK)
        self.assertEqual(placed.data['status'], 'active')
        self.assertEqual(placed.data['access_number'], 'AB01')


class StudentScopingTestCase(APITestCase):
    def setUp(self):
        self.own = StudentFactory(class_name='Senior 1', stream='A')
        self.other = StudentFactory(class_name='Senior 3', stream='B', access_number='CB01')

    def test_parent_sees_only_their_children(self):
        assignment = ParentAssignmentFactory(student=self.own)
        self.client.force_authenticate(assignment.parent)

        response = self.client.get(reverse('student-list'))

        self.assertEqual([row['id'] for row in response.data['results']], [self.own.pk])
        detail = self.client.get(reverse('student-detail', args=[self.other.pk]))
        self.assertEqual(detail.status_code, status.HTTP_404_NOT_FOUND)

    def test_parent_without_children_sees_nothing(self):
        self.client.force_authenticate(ParentFactory())
        response = self.client.get(reverse('student-list'))
        self.assertEqual(response.data['count'], 0)

    def test_teacher_sees_assigned_classes(self):
        teacher = UserFactory(assigned_classes=[{'class_name': 'Senior 1', 'stream_name': 'A'}])
        self.client.force_authenticate(teacher)

        response = self.client.get(reverse('student-list'))

        self.assertEqual([row['id'] for row in response.data['results']], [self.own.pk])

    def test_super_teacher_sees_all(self):
        self.client.force_authenticate(UserFactory(role='SUPER_TEACHER'))
        response = self.client.get(reverse('student-list'))
        self.assertEqual(response.data['count'], 2)


class ConductNotesTestCase(APITestCase):
    def setUp(self):
        self.student = StudentFactory()
        self.url = reverse('student-conduct-notes', args=[self.student.pk])

    def test_super_teacher_adds_note(self):
        self.client.force_authenticate(UserFactory(role='SUPER_TEACHER', first_name='Ruth', last_name='Ouma'))

        response = self.client.post(self.url, {'content': 'Led the debate club', 'type': 'achievement'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['author'], 'Ruth Ouma')
        listing = self.client.get(self.url)
        self.assertEqual(len(listing.data), 1)

    def test_teacher_cannot_add_note(self):
        self.client.force_authenticate(UserFactory(role='TEACHER', assigned_classes=[{'class_name': 'Senior 1'}]))

        response = self.client.post(self.url, {'content': 'Late again', 'type': 'warning'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_invalid_type_rejected(self):
        self.client.force_authenticate(AdminFactory())

        response = self.client.post(self.url, {'content': 'Late again', 'type': 'praise'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('type', response.data['details'])


class ReportCardTestCase(APITestCase):
    def setUp(self):
        self.client.force_authenticate(AdminFactory())
        self.student = StudentFactory(name='Akello Grace')

    def test_missing_record(self):
        response = self.client.get(reverse('student-report-card', args=[self.student.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_report_card_html(self):
        AcademicRecord.objects.create(
            student=self.student, term='Term 1', year=2024, subjects={'Mathematics': 85}, position=1
        )

        response = self.client.get(
            reverse('student-report-card', args=[self.student.pk]), {'term': 'Term 1', 'year': 2024}
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'text/html; charset=utf-8')
        html = response.content.decode()
        self.assertIn('Akello Grace', html)
        self.assertIn('1st out of 1', html)
