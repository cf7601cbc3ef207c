"""
Communication models: direct messages and in-app notifications.
"""
import logging

from django.conf import settings
from django.db import models

logger = logging.getLogger(__name__)


class Message(models.Model):
    MESSAGE_TYPES = [
        ('general', 'General'),
        ('clinic', 'Clinic'),
        ('attendance', 'Attendance'),
        ('payment', 'Payment'),
        ('academic', 'Academic'),
    ]

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('normal', 'Normal'),
        ('high', 'High'),
        ('urgent', 'Urgent'),
    ]

    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='sent_messages'
    )
    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='received_messages'
    )
    subject = models.CharField(max_length=200)
    content = models.TextField()
    message_type = models.CharField(max_length=20, choices=MESSAGE_TYPES, default='general')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='normal')
    is_pinned = models.BooleanField(default=False)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    requires_approval = models.BooleanField(default=False)
    is_approved = models.BooleanField(default=True)
    student = models.ForeignKey(
        'core.Student', on_delete=models.SET_NULL, null=True, blank=True, related_name='messages'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-is_pinned', '-created_at']
        verbose_name = 'Message'
        verbose_name_plural = 'Messages'
        indexes = [
            models.Index(fields=['recipient', 'is_read'], name='core_msg_recipient_read_idx'),
            models.Index(fields=['sender', 'created_at'], name='core_msg_sender_created_idx'),
        ]

    def __str__(self):
        return f"{self.subject} ({self.sender.username} -> {getattr(self.recipient, 'username', 'broadcast')})"


class Notification(models.Model):
    NOTIFICATION_TYPES = [
        ('INFO', 'Information'),
        ('WARNING', 'Warning'),
        ('MESSAGE', 'Message'),
        ('CLINIC', 'Clinic'),
        ('WEEKLY_REPORT', 'Weekly Report'),
        ('SECURITY', 'Security'),
    ]

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name='notifications'
    )
    notification_type = models.CharField(max_length=20, choices=NOTIFICATION_TYPES, default='INFO')
    title = models.CharField(max_length=200)
    message = models.TextField()
    link = models.CharField(max_length=500, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['recipient', 'is_read', 'created_at'], name='core_notif_recipient_read_idx'),
            models.Index(fields=['created_at'], name='core_notif_created_idx'),
        ]
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'

    def __str__(self):
        return f"{self.get_notification_type_display()} - {self.title} - {self.recipient.username}"

    @classmethod
    def get_unread_count_for_user(cls, user):
        if not user or not user.is_authenticated:
            return 0
        return cls.objects.filter(recipient=user, is_read=False).count()
