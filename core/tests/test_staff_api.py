import datetime
import shutil
import tempfile
from decimal import Decimal

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import SimpleTestCase, override_settings
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.services import grant_privilege
from core.models import SchoolSettings, StaffPayment
from core.services.documents import add_months
from core.tests.factories import StaffFactory, UserFactory

MEDIA_ROOT = tempfile.mkdtemp()


@override_settings(MEDIA_ROOT=MEDIA_ROOT)
class StaffAPITestCase(APITestCase):
    @classmethod
    def tearDownClass(cls):
        shutil.rmtree(MEDIA_ROOT, ignore_errors=True)
        super().tearDownClass()

    def setUp(self):
        self.hr = UserFactory(role='HR')
        self.client.force_authenticate(self.hr)
        self.staff = StaffFactory(name='Okot James', role='Teacher')

    def test_create_staff(self):
        response = self.client.post(reverse('staff-list'), {
            'name': 'Nansubuga Joan', 'role': 'Bursar', 'amount_to_pay': '650000',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

    def test_blank_name_rejected(self):
        response = self.client.post(reverse('staff-list'), {'name': '   '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pay_and_summary(self):
        url = reverse('staff-pay', args=[self.staff.pk])
        first = self.client.post(url, {'amount': '400000', 'period': '2024-05'}, format='json')
        self.client.post(url, {'amount': '400000', 'period': '2024-06', 'method': 'mobile_money'}, format='json')

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['paid_by'], self.hr.username)

        summary = self.client.get(reverse('staff-payment-summary', args=[self.staff.pk]))
        self.assertEqual(summary.data['total_paid'], Decimal('800000'))
        self.assertEqual(summary.data['payment_count'], 2)
        self.assertEqual(summary.data['last_payment']['period'], '2024-06')

        history = self.client.get(reverse('staff-payments', args=[self.staff.pk]))
        self.assertEqual(len(history.data), 2)
        everyone = self.client.get(reverse('staff-all-payments'))
        self.assertEqual(everyone.data['count'], 2)

    def test_non_positive_payment_rejected(self):
        response = self.client.post(reverse('staff-pay', args=[self.staff.pk]), {'amount': '0'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(StaffPayment.objects.exists())

    def test_appointment_letter(self):
        school = SchoolSettings.get_settings()
        school.hr_name = 'Akiteng Rose'
        school.save()

        response = self.client.get(reverse('staff-appointment-letter', args=[self.staff.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        html = response.content.decode()
        self.assertIn('Dear Okot James', html)
        self.assertIn('TEACHER', html)
        self.assertIn('UGX 800,000', html)
        self.assertIn('15 January 2025', html)
        self.assertIn('Akiteng Rose', html)

    def test_cv_upload_and_download(self):
        cv = SimpleUploadedFile('cv.pdf', b'%PDF-1.4 test', content_type='application/pdf')

        response = self.client.patch(
            reverse('staff-detail', args=[self.staff.pk]), {'cv': cv}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        download = self.client.get(reverse('staff-cv', args=[self.staff.pk]))
        self.assertEqual(download.status_code, status.HTTP_200_OK)
        self.assertEqual(b''.join(download.streaming_content), b'%PDF-1.4 test')

    def test_missing_passport(self):
        response = self.client.get(reverse('staff-passport', args=[self.staff.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_upload_needs_privilege(self):
        clerk = UserFactory(role='OPM')
        grant_privilege(clerk, 'edit_staff')
        self.client.force_authenticate(clerk)
        cv = SimpleUploadedFile('cv.pdf', b'%PDF-1.4 test', content_type='application/pdf')

        response = self.client.patch(
            reverse('staff-detail', args=[self.staff.pk]), {'cv': cv}, format='multipart'
        )

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_teacher_cannot_view_staff(self):
        self.client.force_authenticate(UserFactory())
        response = self.client.get(reverse('staff-list'))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AddMonthsTest(SimpleTestCase):
    def test_clamps_to_month_end(self):
        self.assertEqual(add_months(datetime.date(2024, 1, 31), 1), datetime.date(2024, 2, 29))
        self.assertEqual(add_months(datetime.date(2024, 11, 15), 3), datetime.date(2025, 2, 15))
