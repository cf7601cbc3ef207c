from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from accounts.services import grant_privilege, revoke_privilege
from core.models import Message, Notification
from core.tests.factories import (
    AdminFactory,
    MessageFactory,
    NotificationFactory,
    ParentFactory,
    UserFactory,
)


class MessageAPITestCase(APITestCase):
    def setUp(self):
        self.teacher = UserFactory()
        self.parent = ParentFactory()
        self.client.force_authenticate(self.teacher)

    def test_send_to_several_recipients(self):
        other_parent = ParentFactory()

        response = self.client.post(reverse('message-send'), {
            'recipients': [self.parent.pk, other_parent.pk],
            'subject': 'Sports day',
            'content': 'Sports day is on Friday.',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data), 2)
        self.assertEqual(Message.objects.count(), 2)

    def test_single_recipient_shorthand(self):
        response = self.client.post(reverse('message-list'), {
            'recipient': self.parent.pk, 'subject': 'Homework', 'content': 'Page 12',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data[0]['recipient'], self.parent.pk)

    def test_refused_message_type(self):
        response = self.client.post(reverse('message-send'), {
            'recipients': [self.parent.pk], 'subject': 'Fees', 'content': 'Pay up', 'message_type': 'payment',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error'], 'Teacher is not authorized to send payment messages')

    def test_inbox_and_sent_folders(self):
        MessageFactory(sender=self.parent, recipient=self.teacher)
        MessageFactory(sender=self.teacher, recipient=self.parent)
        MessageFactory(sender=self.parent, recipient=UserFactory())

        inbox = self.client.get(reverse('message-list'), {'folder': 'inbox'})
        sent = self.client.get(reverse('message-list'), {'folder': 'sent'})

        self.assertEqual(inbox.data['count'], 1)
        self.assertEqual(sent.data['count'], 1)

    def test_unapproved_messages_hidden_from_recipient(self):
        MessageFactory(sender=self.parent, recipient=self.teacher, requires_approval=True, is_approved=False)

        response = self.client.get(reverse('message-unread-count'))

        self.assertEqual(response.data, {'unread_count': 0})

    def test_mark_read(self):
        message = MessageFactory(sender=self.parent, recipient=self.teacher)

        response = self.client.post(reverse('message-mark-read', args=[message.pk]))

        self.assertTrue(response.data['is_read'])
        self.assertIsNotNone(response.data['read_at'])

    def test_sender_cannot_mark_read(self):
        message = MessageFactory(sender=self.teacher, recipient=self.parent)
        response = self.client.post(reverse('message-mark-read', args=[message.pk]))
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_mark_all_read(self):
        MessageFactory.create_batch(3, sender=self.parent, recipient=self.teacher)

        response = self.client.post(reverse('message-mark-all-read'))

        self.assertEqual(response.data, {'updated': 3})
        self.assertEqual(self.client.get(reverse('message-unread-count')).data['unread_count'], 0)

    def test_recipients(self):
        AdminFactory()
        UserFactory(role='SPONSOR')

        response = self.client.get(reverse('message-recipients'))

        self.assertIn('PARENT', response.data['roles'])
        self.assertEqual(response.data['restrictions']['max_recipients'], 10)
        roles = {row['role'] for row in response.data['recipients']}
        self.assertNotIn('SPONSOR', roles)
        self.assertNotIn(self.teacher.pk, [row['id'] for row in response.data['recipients']])

    def test_admin_approves_message(self):
        message = MessageFactory(sender=UserFactory(role='SPONSOR'), requires_approval=True, is_approved=False)
        admin = AdminFactory()
        self.client.force_authenticate(admin)

        response = self.client.post(reverse('message-approve', args=[message.pk]))

        self.assertTrue(response.data['is_approved'])
        self.assertTrue(Notification.objects.filter(recipient=message.recipient).exists())


class MessageExportVisibilityTestCase(APITestCase):
    def setUp(self):
        self.teacher = UserFactory()
        self.parent = ParentFactory()
        MessageFactory(sender=self.teacher, recipient=self.parent)
        MessageFactory(sender=self.parent, recipient=self.teacher)
        MessageFactory(
            sender=UserFactory(role='SPONSOR'), recipient=UserFactory(role='SPONSORSHIPS_OVERSEER'),
            requires_approval=True, is_approved=False,
        )

    def test_admin_sees_every_message(self):
        self.client.force_authenticate(AdminFactory())

        response = self.client.get(reverse('message-list'))

        self.assertEqual(response.data['count'], 3)

    def test_superuser_role_with_export_privilege_sees_every_message(self):
        auditor = UserFactory(role='SUPERUSER')
        self.client.force_authenticate(auditor)

        response = self.client.get(reverse('message-list'))

        self.assertEqual(response.data['count'], 3)

    def test_admin_role_without_export_privilege_sees_own_messages(self):
        auditor = UserFactory(role='SUPERUSER')
        revoke_privilege(auditor, 'export_messages')
        MessageFactory(sender=self.teacher, recipient=auditor)
        self.client.force_authenticate(auditor)

        response = self.client.get(reverse('message-list'))

        self.assertEqual(response.data['count'], 1)

    def test_export_privilege_alone_does_not_widen_non_admin(self):
        grant_privilege(self.teacher, 'export_messages')
        self.client.force_authenticate(self.teacher)

        response = self.client.get(reverse('message-list'))

        self.assertEqual(response.data['count'], 2)


class NotificationAPITestCase(APITestCase):
    def setUp(self):
        self.user = UserFactory()
        self.client.force_authenticate(self.user)

    def test_only_own_notifications(self):
        NotificationFactory.create_batch(2, recipient=self.user)
        NotificationFactory()

        response = self.client.get(reverse('notification-list'))

        self.assertEqual(response.data['count'], 2)

    def test_read_and_read_all(self):
        first, _second, _third = NotificationFactory.create_batch(3, recipient=self.user)

        self.client.post(reverse('notification-read', args=[first.pk]))
        self.assertEqual(self.client.get(reverse('notification-unread-count')).data, {'unread_count': 2})

        response = self.client.post(reverse('notification-read-all'))
        self.assertEqual(response.data, {'updated': 2})
        first.refresh_from_db()
        self.assertIsNotNone(first.read_at)

    def test_other_users_notification_not_found(self):
        foreign = NotificationFactory()
        response = self.client.post(reverse('notification-read', args=[foreign.pk]))
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
