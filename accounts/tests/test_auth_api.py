from django.test import RequestFactory
from django.urls import reverse
from rest_framework import status
from rest_framework.authtoken.models import Token
from rest_framework.test import APITestCase

from accounts.signals import notify_admins_of_lockout
from core.models import Notification
from core.tests.factories import AdminFactory, UserFactory


class LoginTestCase(APITestCase):
    def setUp(self):
        self.user = UserFactory(username='okello', email='okello@school.com', password='S3cure-pass')
        self.url = reverse('login')

    def test_login_with_username(self):
        response = self.client.post(self.url, {'username': 'okello', 'password': 'S3cure-pass'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['token'], Token.objects.get(user=self.user).key)
        self.assertEqual(response.data['user']['username'], 'okello')
        self.assertIn('view_students', response.data['user']['privileges'])
        self.assertFalse(response.data['requires_password_change'])

    def test_login_with_email(self):
        response = self.client.post(
            self.url, {'email': 'OKELLO@school.com', 'password': 'S3cure-pass'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

    def test_wrong_password(self):
        response = self.client.post(self.url, {'username': 'okello', 'password': 'nope'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.data['error'], 'Invalid credentials')

    def test_missing_identifier(self):
        response = self.client.post(self.url, {'password': 'S3cure-pass'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_locked_account(self):
        self.user.lock('Left the school')

        response = self.client.post(self.url, {'username': 'okello', 'password': 'S3cure-pass'}, format='json')

        self.assertEqual(response.status_code, 423)
        self.assertEqual(response.data['details'], {'reason': 'Left the school'})
        self.assertFalse(Token.objects.filter(user=self.user).exists())

    def test_token_authenticates_requests(self):
        token = self.client.post(
            self.url, {'username': 'okello', 'password': 'S3cure-pass'}, format='json'
        ).data['token']

        self.client.credentials(HTTP_AUTHORIZATION=f'Token {token}')
        response = self.client.get(reverse('me'))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['id'], self.user.pk)

    def test_logout_deletes_token(self):
        Token.objects.create(user=self.user)
        self.client.force_authenticate(self.user)

        self.client.post(reverse('logout'))

        self.assertFalse(Token.objects.filter(user=self.user).exists())


class PasswordTestCase(APITestCase):
    def setUp(self):
        self.user = UserFactory(password='Old-pass-123')
        self.user.must_change_password = True
        self.user.save()
        self.client.force_authenticate(self.user)

    def test_change_password(self):
        response = self.client.post(reverse('change-password'), {
            'current_password': 'Old-pass-123', 'new_password': 'Brand-new-pass-456',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('Brand-new-pass-456'))
        self.assertFalse(self.user.must_change_password)
        self.assertEqual(Token.objects.get(user=self.user).key, response.data['token'])

    def test_wrong_current_password(self):
        response = self.client.post(reverse('change-password'), {
            'current_password': 'wrong', 'new_password': 'Brand-new-pass-456',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data['details'])

    def test_reset_request_notifies_admins(self):
        admin = AdminFactory()
        self.client.force_authenticate(None)

        response = self.client.post(
            reverse('password-reset-request'), {'username': self.user.username}, format='json'
        )

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        notification = Notification.objects.get(recipient=admin)
        self.assertEqual(notification.title, 'Password Reset Request')
        self.assertEqual(notification.notification_type, 'SECURITY')

    def test_reset_request_for_unknown_account_looks_the_same(self):
        AdminFactory()
        self.client.force_authenticate(None)

        response = self.client.post(reverse('password-reset-request'), {'username': 'ghost'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Notification.objects.exists())


class LockoutSignalTest(APITestCase):
    def test_admins_notified_of_lockout(self):
        admin = AdminFactory()
        request = RequestFactory().post('/api/auth/login/')

        notify_admins_of_lockout(sender=None, request=request, username='okello', ip_address='10.0.0.7')

        notification = Notification.objects.get(recipient=admin)
        self.assertEqual(notification.title, 'Account Locked')
        self.assertEqual(notification.notification_type, 'SECURITY')
        self.assertIn('10.0.0.7', notification.message)
