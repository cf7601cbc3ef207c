from unittest import mock

from django.contrib.auth import get_user_model
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from accounts.services import has_privilege
from core.models import ParentAssignment
from core.tests.factories import AdminFactory, ParentFactory, StudentFactory, UserFactory

User = get_user_model()


class UserManagementTestCase(APITestCase):
    def setUp(self):
        self.admin = AdminFactory()
        self.client.force_authenticate(self.admin)

    def test_create_user_seeds_privileges(self):
        response = self.client.post(reverse('user-list'), {
            'username': 'nurse.jane',
            'email': 'jane@school.com',
            'role': 'NURSE',
            'password': 'Clinic-pass-2024',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertNotIn('password', response.data)
        user = User.objects.get(username='nurse.jane')
        self.assertTrue(user.check_password('Clinic-pass-2024'))
        self.assertTrue(has_privilege(user, 'add_clinic_record'))

    def test_create_requires_password(self):
        response = self.client.post(reverse('user-list'), {'username': 'nopass', 'role': 'TEACHER'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_by_role(self):
        UserFactory(role='NURSE')
        UserFactory()

        response = self.client.get(reverse('user-list'), {'role': 'NURSE'})

        self.assertEqual(response.data['count'], 1)

    def test_cannot_delete_self(self):
        response = self.client.delete(reverse('user-detail', args=[self.admin.pk]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_teacher_cannot_list_users(self):
        self.client.force_authenticate(UserFactory())
        response = self.client.get(reverse('user-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_lock_and_unlock(self):
        user = UserFactory()
        Token.objects.create(user=user)

        response = self.client.post(reverse('user-lock', args=[user.pk]), {'reason': 'On leave'}, format='json')
        self.assertTrue(response.data['is_locked'])
        self.assertEqual(response.data['lock_reason'], 'On leave')
        self.assertFalse(Token.objects.filter(user=user).exists())

        with mock.patch('accounts.views.reset_axes_lockout') as reset:
            response = self.client.post(reverse('user-unlock', args=[user.pk]))
        self.assertFalse(response.data['is_locked'])
        reset.assert_called_once_with(username=user.username)

    def test_cannot_lock_self(self):
        response = self.client.post(reverse('user-lock', args=[self.admin.pk]), {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reset_password(self):
        user = UserFactory()

        response = self.client.post(reverse('user-reset-password', args=[user.pk]))

        user.refresh_from_db()
        self.assertTrue(user.must_change_password)
        self.assertTrue(user.check_password(response.data['temporary_password']))


class UserPrivilegeAPITestCase(APITestCase):
    def setUp(self):
        self.admin = AdminFactory()
        self.user = UserFactory(role='HR')
        self.client.force_authenticate(self.admin)
        self.url = reverse('user-privileges', args=[self.user.pk])

    def test_list_grants(self):
        response = self.client.get(self.url)
        self.assertIn('view_staff', [grant['privilege'] for grant in response.data])

    def test_grant_and_revoke(self):
        response = self.client.post(self.url, {'privilege': 'view_students'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['assigned_by'], self.admin.username)

        response = self.client.delete(f'{self.url}?privilege=view_students')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(self.user.privileges.filter(privilege='view_students').exists())

    def test_duplicate_grant(self):
        response = self.client.post(self.url, {'privilege': 'view_staff'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_privilege(self):
        response = self.client.post(self.url, {'privilege': 'launch_rockets'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_reset_privileges(self):
        response = self.client.post(
            reverse('user-reset-privileges', args=[self.user.pk]), {'privileges': ['view_students']}, format='json'
        )

        self.assertEqual([grant['privilege'] for grant in response.data], ['view_students'])

    def test_assign_default_privileges(self):
        self.client.post(
            reverse('user-reset-privileges', args=[self.user.pk]), {'privileges': []}, format='json'
        )

        response = self.client.post(
            reverse('user-assign-default-privileges'), {'user_ids': [self.user.pk]}, format='json'
        )

        self.assertEqual(response.data, {'updated': 1})
        self.assertTrue(self.user.privileges.filter(privilege='view_staff').exists())

    def test_current_user_privileges(self):
        self.client.force_authenticate(self.user)
        response = self.client.get(reverse('me'))
        self.assertIn('upload_staff_cv', response.data['privileges'])


class ParentStudentAssignmentTestCase(APITestCase):
    def setUp(self):
        self.client.force_authenticate(AdminFactory())
        self.parent = ParentFactory()
        self.children = [StudentFactory(), StudentFactory()]

    def test_assign_list_and_unassign(self):
        url = reverse('user-assign-students', args=[self.parent.pk])

        response = self.client.post(url, {'student_ids': [child.pk for child in self.children]}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data, {'assigned': 2})

        again = self.client.post(url, {'student_ids': [self.children[0].pk]}, format='json')
        self.assertEqual(again.data, {'assigned': 0})

        listing = self.client.get(reverse('user-assigned-students', args=[self.parent.pk]))
        self.assertEqual(len(listing.data), 2)

        response = self.client.delete(
            reverse('user-unassign-student', kwargs={'pk': self.parent.pk, 'student_id': self.children[0].pk})
        )
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(ParentAssignment.objects.filter(parent=self.parent).count(), 1)

    def test_unknown_students(self):
        response = self.client.post(
            reverse('user-assign-students', args=[self.parent.pk]), {'student_ids': [9999]}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['details'], {'student_ids': [9999]})

    def test_only_parents_take_students(self):
        teacher = UserFactory()
        response = self.client.post(
            reverse('user-assign-students', args=[teacher.pk]), {'student_ids': [self.children[0].pk]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
